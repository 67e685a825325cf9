"""
dynwarp
-------

Dynamic warping of sequences with a bound on strain, and recursive exponential smoothing.
"""

from dynwarp.config import (
    describe_option,
    get_option,
    option_context,
    reset_option,
    set_option,
)
from dynwarp.dataprocessing.warping import (
    DynamicWarping,
    ErrorExtrapolation,
    find_shifts,
)
from dynwarp.filtering import Edges, RecursiveExponentialFilter

__version__ = "0.1.0"

__all__ = [
    "DynamicWarping",
    "ErrorExtrapolation",
    "find_shifts",
    "Edges",
    "RecursiveExponentialFilter",
    "describe_option",
    "get_option",
    "option_context",
    "reset_option",
    "set_option",
]
