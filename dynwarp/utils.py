"""
Utils
-----
"""

import numpy as np

from dynwarp.logging import get_logger, raise_if, raise_if_not

logger = get_logger(__name__)


def check_sequence(values, name: str = "x", copy: bool = False) -> np.ndarray:
    """
    Checks that `values` is a non-empty, finite 1-D sequence and returns it as a float64 array.

    Parameters
    ----------
    values
        Array-like sequence of real values.
    name
        Name of the sequence, used in error messages.
    copy
        Whether to always return a copy. Otherwise a float64 array passed in is returned as is.

    Returns
    -------
    np.ndarray
        The sequence as a 1-D float64 array.
    """
    values = (
        np.array(values, dtype=np.float64)
        if copy
        else np.asarray(values, dtype=np.float64)
    )
    raise_if_not(
        values.ndim == 1,
        f"Expected `{name}` to be a 1-D sequence, got an array with {values.ndim} dimensions",
        logger,
    )
    raise_if(len(values) == 0, f"Expected `{name}` to be non-empty", logger)
    raise_if(
        np.any(np.isnan(values)),
        f"nan values are not supported, found some in `{name}`.",
        logger,
    )
    raise_if_not(
        np.all(np.isfinite(values)),
        f"Infinite values are not supported, found some in `{name}`.",
        logger,
    )
    return values
