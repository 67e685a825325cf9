"""
Filtering Model Base Class

Filtering models all have a `filter(x)` function, which
returns an array that is a filtered version of the sequence `x`.
"""

from abc import ABC, abstractmethod

import numpy as np

from dynwarp.utils import check_sequence


class FilteringModel(ABC):
    """The base class for filtering models. Filtering models act on one 1-D sequence at a time,
    never modify their input, and return a new sequence of the same length.
    """

    @abstractmethod
    def __init__(self):
        pass

    @abstractmethod
    def filter(self, x: np.ndarray) -> np.ndarray:
        """Filters a given sequence

        Parameters
        ----------
        x
            The sequence to filter.

        Returns
        -------
        np.ndarray
            An array containing the filtered values.
        """
        pass

    def apply(self, x: np.ndarray) -> np.ndarray:
        """Alias of `filter`."""
        return self.filter(x)

    @staticmethod
    def _check_sequence(x) -> np.ndarray:
        """Returns a float64 copy of `x`, after checking that it is a non-empty, finite 1-D sequence."""
        return check_sequence(x, "x", copy=True)
