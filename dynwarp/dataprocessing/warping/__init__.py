"""
Dynamic Warping
---------------

Tools for estimating and applying shifts between sequences by dynamic warping, with a bound
on strain, the rate at which shifts may change from one sample to the next.
"""

from dynwarp.dataprocessing.warping.dynamic_warping import DynamicWarping, find_shifts
from dynwarp.dataprocessing.warping.extrapolation import ErrorExtrapolation

__all__ = [
    "DynamicWarping",
    "ErrorExtrapolation",
    "find_shifts",
]
