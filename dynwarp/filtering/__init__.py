"""
Filtering
---------
"""

from dynwarp.filtering.exponential_filter import (
    Edges,
    RecursiveExponentialFilter,
    a_from_sigma,
)
from dynwarp.filtering.filtering_model import FilteringModel

__all__ = [
    "Edges",
    "FilteringModel",
    "RecursiveExponentialFilter",
    "a_from_sigma",
]
