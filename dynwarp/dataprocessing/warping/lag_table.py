"""
Tables of values indexed by (sample, lag).

Alignment errors and accumulated errors are stored in contiguous float64 arrays of shape
(n_samples, n_lags), with lag the fastest dimension. Neighbors of a cell are always
addressed through `clamp_sample` and `clamp_lag`, so that strides running past the ends
of a table are truncated rather than wrapped.
"""

from typing import Optional

import numpy as np

from dynwarp.logging import get_logger, raise_if, raise_if_not

logger = get_logger(__name__)


def like(table: np.ndarray) -> np.ndarray:
    return np.zeros_like(table, dtype=np.float64)


def clamp_sample(i: int, n_samples: int) -> int:
    return max(0, min(n_samples - 1, i))


def clamp_lag(il: int, n_lags: int) -> int:
    return max(0, min(n_lags - 1, il))


def check_table(
    table: np.ndarray, n_lags: Optional[int] = None, name: str = "e"
) -> np.ndarray:
    """
    Validates a table passed in by a caller and returns it as a float64 array.

    Parameters
    ----------
    table
        Array-like of shape (n_samples, n_lags).
    n_lags
        Expected number of lags, or None to accept any.
    name
        Name of the table, used in error messages.
    """
    table = np.asarray(table, dtype=np.float64)
    raise_if_not(
        table.ndim == 2,
        f"Expected `{name}` to be a 2d array of shape (n_samples, n_lags), got {table.ndim} dimensions",
        logger,
    )
    raise_if(
        table.shape[0] == 0 or table.shape[1] == 0,
        f"Expected `{name}` to be non-empty, got shape {table.shape}",
        logger,
    )
    if n_lags is not None:
        raise_if_not(
            table.shape[1] == n_lags,
            f"Expected `{name}` to have {n_lags} lags, got {table.shape[1]}",
            logger,
        )
    return table


def shift_and_scale(emin: float, emax: float, e: np.ndarray) -> np.ndarray:
    """Shifts and scales `e` in place, so that emin maps to 0 and emax to 1."""
    escale = 1.0 / (emax - emin) if emax > emin else 1.0
    e -= emin
    e *= escale
    return e


def normalize(e: np.ndarray) -> np.ndarray:
    """
    Normalizes errors in place to the range [0, 1]. If all errors are equal they are
    only shifted, so that they all become 0.

    Returns
    -------
    np.ndarray
        The same array `e`.
    """
    return shift_and_scale(float(np.min(e)), float(np.max(e)), e)


def transpose_lag(e: np.ndarray) -> np.ndarray:
    """
    Returns a copy of `e` with lag the slowest dimension, of shape (n_lags, n_samples).
    Only useful for display; everything else expects lag to be the fastest dimension.
    """
    return np.ascontiguousarray(np.transpose(e))
