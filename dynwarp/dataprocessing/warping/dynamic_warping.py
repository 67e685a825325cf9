import math
from numbers import Integral, Real
from typing import Optional, Union

import numpy as np
from scipy.interpolate import CubicSpline

from dynwarp.config import get_option
from dynwarp.filtering.exponential_filter import RecursiveExponentialFilter
from dynwarp.logging import get_logger, raise_if_not, time_log
from dynwarp.utils import check_sequence

from .extrapolation import ErrorExtrapolation
from .lag_table import (
    check_table,
    clamp_lag,
    clamp_sample,
    like,
    normalize,
    transpose_lag,
)

logger = get_logger(__name__)


# CORE ALGORITHM
def _compute_errors(
    f: np.ndarray,
    g: np.ndarray,
    shift_min: int,
    n_lags: int,
    extrapolation: ErrorExtrapolation,
    exponent: float,
) -> np.ndarray:
    """Alignment errors |f[i] - g[i+lag]|^exponent, not normalized."""
    nf, ng = len(f), len(g)

    samples = np.arange(nf)[:, None]
    lag_index = np.arange(n_lags)[None, :]
    lags = shift_min + lag_index
    j = samples + lags
    valid = (j >= 0) & (j < ng)

    raw = np.abs(f[:, None] - g[np.clip(j, 0, ng - 1)]) ** exponent
    e = np.where(valid, raw, np.nan)
    if valid.all():
        return e

    emax = float(np.max(raw[valid])) if valid.any() else 0.0
    invalid = ~valid

    if extrapolation is ErrorExtrapolation.AVERAGE:
        counts = np.sum(valid, axis=0)
        sums = np.sum(np.where(valid, raw, 0.0), axis=0)
        fill = np.where(counts > 0, sums / np.maximum(counts, 1), emax)
        e[invalid] = np.broadcast_to(fill, e.shape)[invalid]
        return e

    # donor: the sample at which this lag first (j == 0) or last (j == ng-1) is in bounds
    k = np.where(j < 0, -lags, ng - 1 - lags)
    if extrapolation is ErrorExtrapolation.REFLECT:
        k = 2 * k - samples
    k_clipped = np.clip(k, 0, nf - 1)
    lag_index = np.broadcast_to(lag_index, e.shape)
    donor_ok = (k >= 0) & (k < nf) & valid[k_clipped, lag_index]
    fill = np.where(donor_ok, e[k_clipped, lag_index], emax)
    e[invalid] = fill[invalid]
    return e


def _accumulate(direction: int, b: int, e: np.ndarray) -> np.ndarray:
    """
    Non-linear accumulation of alignment errors along the sample axis, in the given direction.
    A change of lag by one is only allowed between samples that are `b` samples apart,
    picking up the errors of the samples in between.
    """
    n, n_lags = e.shape
    step = 1 if direction > 0 else -1
    ib = 0 if step > 0 else n - 1
    ie = n if step > 0 else -1

    lags = np.arange(n_lags)
    lm1 = np.maximum(lags - 1, 0)
    lp1 = np.minimum(lags + 1, n_lags - 1)

    d = like(e)
    d[ib] = e[ib]
    for ii in range(ib + step, ie, step):
        ji = clamp_sample(ii - step, n)
        jb = clamp_sample(ii - step * b, n)
        dm = d[jb, lm1]
        di = d[ji]
        dp = d[jb, lp1]
        for kb in range(ji, jb, -step):
            dm += e[kb, lm1]
            dp += e[kb, lp1]
        d[ii] = np.minimum(np.minimum(dm, di), dp) + e[ii]
    return d


def _backtrack(
    direction: int, b: int, shift_min: int, d: np.ndarray, e: np.ndarray
) -> np.ndarray:
    """
    Finds shifts by backtracking through accumulated errors `d`, in the direction
    opposite to that used to accumulate them.
    """
    n, n_lags = d.shape
    step = 1 if direction > 0 else -1
    ib = 0 if step > 0 else n - 1
    ie = n - 1 if step > 0 else 0

    u = np.empty(n, dtype=np.float64)

    # ties go to zero lag, if within bounds
    ii = ib
    il = clamp_lag(-shift_min, n_lags)
    dl = d[ii, il]
    for jl in range(n_lags):
        if d[ii, jl] < dl:
            dl = d[ii, jl]
            il = jl
    u[ii] = il + shift_min

    while ii != ie:
        ji = clamp_sample(ii + step, n)
        jb = clamp_sample(ii + step * b, n)
        ilm1 = clamp_lag(il - 1, n_lags)
        ilp1 = clamp_lag(il + 1, n_lags)
        dm = float(d[jb, ilm1])
        di = float(d[ji, il])
        dp = float(d[jb, ilp1])
        for kb in range(ji, jb, step):
            dm += e[kb, ilm1]
            dp += e[kb, ilp1]
        dl = min(dm, di, dp)

        if dl == di:
            ii += step
            u[ii] = il + shift_min
            continue

        # the lag changes over the next b samples (fewer near the end); ramp linearly
        il = ilm1 if dl == dm else ilp1
        u_start = u[ii]
        du = (il + shift_min) - u_start
        for k in range(1, abs(jb - ii) + 1):
            u[ii + k * step] = u_start + du * (k / b)
        ii = jb
    return u


def _smooth_errors(b: int, e: np.ndarray) -> np.ndarray:
    """Does not normalize errors after smoothing."""
    ef = _accumulate(1, b, e)
    er = _accumulate(-1, b, e)
    return ef + er - e


# Public API
class DynamicWarping:
    """
    Dynamic warping of sequences.

    For sequences f and g, dynamic warping finds a sequence of shifts u such that
    f[i] ~ g[i+u[i]], subject to a bound on strain, the rate at which the shifts
    u[i] may vary with sample index i.

    An increasing u[i] = u[i-1] + 1 implies that g is stretched by 100% between
    samples i-1 and i; a decreasing u[i] = u[i-1] - 1 implies squeezing by 100%.
    As this is often extreme, the bound on strain may be smaller than one: for
    ``set_strain_max(0.5)``, shifts are constrained to ``|u[i]-u[i-1]| <= 0.5``.

    Estimated shifts can be smoothed with a `RecursiveExponentialFilter`, whose
    half-width is inversely proportional to the bound on strain and scaled by
    the factor given to `set_shift_smoothing`.

    Typical applications only need `find_shifts` and perhaps `apply_shifts`. The
    individual steps of `find_shifts` (`compute_errors`, `smooth_errors`,
    `accumulate_forward`, `backtrack_reverse`, `smooth_shifts`) are exposed for
    research and diagnostics.

    Instances are not safe to share between threads while being reconfigured.
    """

    from ._plot import plot_errors, plot_shifts

    def __init__(self, shift_min: int, shift_max: int):
        """
        Parameters
        ----------
        shift_min
            Lower bound on shifts u.
        shift_max
            Upper bound on shifts u. Must exceed `shift_min` by more than one.
        """
        raise_if_not(
            isinstance(shift_min, Integral)
            and isinstance(shift_max, Integral)
            and not isinstance(shift_min, bool)
            and not isinstance(shift_max, bool),
            f"Shift bounds must be integers, got {shift_min!r} and {shift_max!r}",
            logger,
        )
        raise_if_not(
            shift_max - shift_min > 1,
            f"Expected shift_max - shift_min > 1, got shift_min={shift_min} and shift_max={shift_max}",
            logger,
        )
        self._shift_min = int(shift_min)
        self._shift_max = int(shift_max)
        self._n_lags = 1 + self._shift_max - self._shift_min
        self._extrapolation = ErrorExtrapolation.parse(
            get_option("warping.error_extrapolation")
        )
        self._error_exponent = float(get_option("warping.error_exponent"))
        self._error_smoothing = 0
        self._shift_smoothing = 0.0
        self._strain_bound = 1
        self._shift_filter: Optional[RecursiveExponentialFilter] = None

    def __repr__(self):
        return (
            f"DynamicWarping(shift_min={self._shift_min}, shift_max={self._shift_max}, "
            f"strain_bound={self._strain_bound}, extrapolation={self._extrapolation}, "
            f"error_exponent={self._error_exponent}, error_smoothing={self._error_smoothing}, "
            f"shift_smoothing={self._shift_smoothing})"
        )

    @property
    def shift_min(self) -> int:
        return self._shift_min

    @property
    def shift_max(self) -> int:
        return self._shift_max

    @property
    def n_lags(self) -> int:
        """Number of lags, 1 + shift_max - shift_min."""
        return self._n_lags

    @property
    def strain_bound(self) -> int:
        """Inverse b of the bound on strain: shifts change by at most 1/b per sample."""
        return self._strain_bound

    @property
    def error_extrapolation(self) -> ErrorExtrapolation:
        return self._extrapolation

    @property
    def error_exponent(self) -> float:
        return self._error_exponent

    @property
    def error_smoothing(self) -> int:
        return self._error_smoothing

    @property
    def shift_smoothing(self) -> float:
        return self._shift_smoothing

    @property
    def shift_filter(self) -> Optional[RecursiveExponentialFilter]:
        """The filter used to smooth shifts, or None if shifts are not smoothed."""
        return self._shift_filter

    def set_strain_max(self, strain_max: float):
        """
        Sets the bound on strain. The actual bound is 1/ceil(1/strain_max), which is less
        than `strain_max` when 1/strain_max is not an integer. The default bound is 1.0.

        Parameters
        ----------
        strain_max
            The bound, a value in (0, 1].
        """
        raise_if_not(
            isinstance(strain_max, Real)
            and 0.0 < strain_max <= 1.0
            and math.isfinite(1.0 / strain_max),
            f"strain_max must be in (0, 1], got {strain_max}",
            logger,
        )
        self._strain_bound = int(math.ceil(1.0 / strain_max))
        self._update_smoothing_filter()

    def set_error_extrapolation(self, extrapolation: Union[ErrorExtrapolation, str]):
        """
        Sets the method used to extrapolate alignment errors for lags that reference
        samples beyond the ends of g.

        Parameters
        ----------
        extrapolation
            An `ErrorExtrapolation`, or its name ("Nearest", "Average" or "Reflect").
        """
        self._extrapolation = ErrorExtrapolation.parse(extrapolation)

    def set_error_exponent(self, exponent: float):
        """
        Sets the exponent p used to compute alignment errors |f-g|^p. The default is 2.
        """
        raise_if_not(
            isinstance(exponent, Real) and exponent > 0,
            f"Error exponent must be positive, got {exponent}",
            logger,
        )
        self._error_exponent = float(exponent)

    def set_error_smoothing(self, count: int):
        """
        Sets the number of non-linear smoothings of alignment errors applied by
        `find_shifts` before accumulating them. The default is zero.
        """
        raise_if_not(
            isinstance(count, Integral) and not isinstance(count, bool) and count >= 0,
            f"Number of error smoothings must be a non-negative integer, got {count!r}",
            logger,
        )
        self._error_smoothing = int(count)

    def set_shift_smoothing(self, sigma: float):
        """
        Sets the extent of the filter used to smooth shifts. The half-width of the filter
        is `sigma` times the inverse bound on strain. The default is zero, for no smoothing.
        """
        raise_if_not(
            isinstance(sigma, Real) and math.isfinite(sigma) and sigma >= 0.0,
            f"Shift smoothing must be finite and non-negative, got {sigma}",
            logger,
        )
        self._shift_smoothing = float(sigma)
        self._update_smoothing_filter()

    def _update_smoothing_filter(self):
        if self._shift_smoothing > 0.0:
            self._shift_filter = RecursiveExponentialFilter(
                self._shift_smoothing * self._strain_bound
            )
            logger.debug(f"Rebuilt shift smoothing filter: {self._shift_filter}")
        else:
            self._shift_filter = None

    @time_log(logger)
    def find_shifts(self, f: np.ndarray, g: np.ndarray) -> np.ndarray:
        """
        Computes shifts u for sequences f and g, such that f[i] ~ g[i+u[i]].

        Parameters
        ----------
        f
            The reference sequence.
        g
            The target sequence, which need not have the same length as f.

        Returns
        -------
        np.ndarray
            The shifts, one per sample of f, within [shift_min, shift_max].
        """
        f = check_sequence(f, "f")
        g = check_sequence(g, "g")

        table_size = len(f) * self._n_lags
        if table_size > get_option("warping.max_table_size"):
            logger.warning(
                f"Dynamic warping will allocate tables of {table_size} cells, which may be slow."
                " Consider narrowing the range of shifts."
            )

        e = self.compute_errors(f, g)
        for _ in range(self._error_smoothing):
            e = self.smooth_errors(e)
        d = self.accumulate_forward(e)
        u = self.backtrack_reverse(d, e)
        return self.smooth_shifts(u)

    def apply_shifts(self, u: np.ndarray, g: np.ndarray) -> np.ndarray:
        """
        Warps a sequence by applying shifts, h[i] = g(i + u[i]).

        Values of g between samples are interpolated with a cubic spline; beyond the
        ends of g, the values at the ends are repeated.

        Parameters
        ----------
        u
            The shifts.
        g
            The sequence to be warped.

        Returns
        -------
        np.ndarray
            The warped sequence, with the same length as u.
        """
        u = check_sequence(u, "u")
        g = check_sequence(g, "g")
        ng = len(g)
        if ng == 1:
            return np.full(len(u), g[0])
        x = np.clip(np.arange(len(u)) + u, 0, ng - 1)
        return CubicSpline(np.arange(ng), g)(x)

    def compute_errors(self, f: np.ndarray, g: np.ndarray) -> np.ndarray:
        """
        Returns normalized alignment errors for all samples and lags.

        Lag indices 0, 1, ..., n_lags-1 correspond to integer shifts in [shift_min, shift_max].
        Errors are a monotonically increasing function of |f[i] - g[i+il+shift_min]|; those
        referencing samples beyond the ends of g are extrapolated according to the
        configured `ErrorExtrapolation`.

        Parameters
        ----------
        f
            The reference sequence.
        g
            The target sequence.

        Returns
        -------
        np.ndarray of shape (len(f), n_lags)
            Alignment errors, normalized to [0, 1].
        """
        f = check_sequence(f, "f")
        g = check_sequence(g, "g")
        e = _compute_errors(
            f,
            g,
            self._shift_min,
            self._n_lags,
            self._extrapolation,
            self._error_exponent,
        )
        return normalize(e)

    def smooth_errors(self, e: np.ndarray) -> np.ndarray:
        """
        Returns smoothed and normalized alignment errors, the sum of the errors accumulated
        in forward and reverse directions minus the errors themselves. The input is not
        modified.
        """
        e = check_table(e, self._n_lags, "e")
        return normalize(_smooth_errors(self._strain_bound, e))

    def smooth_shifts(self, u: np.ndarray) -> np.ndarray:
        """Returns smoothed shifts, or a copy of `u` if shift smoothing is disabled."""
        u = check_sequence(u, "u")
        if self._shift_filter is None:
            return u.copy()
        return self._shift_filter.filter(u)

    def accumulate_forward(self, e: np.ndarray) -> np.ndarray:
        """Returns alignment errors accumulated in the forward direction."""
        e = check_table(e, self._n_lags, "e")
        return _accumulate(1, self._strain_bound, e)

    def accumulate_reverse(self, e: np.ndarray) -> np.ndarray:
        """Returns alignment errors accumulated in the reverse direction."""
        e = check_table(e, self._n_lags, "e")
        return _accumulate(-1, self._strain_bound, e)

    def backtrack_reverse(self, d: np.ndarray, e: np.ndarray) -> np.ndarray:
        """
        Returns shifts found by backtracking in reverse direction through errors
        accumulated in forward direction.

        Parameters
        ----------
        d
            Errors accumulated with `accumulate_forward`.
        e
            The alignment errors that were accumulated.

        Returns
        -------
        np.ndarray
            The shifts, one per sample.
        """
        d = check_table(d, self._n_lags, "d")
        e = check_table(e, self._n_lags, "e")
        raise_if_not(
            d.shape == e.shape,
            f"Accumulated errors {d.shape} and errors {e.shape} must have the same shape",
            logger,
        )
        return _backtrack(-1, self._strain_bound, self._shift_min, d, e)

    def sum_errors(self, e: np.ndarray, u: np.ndarray) -> float:
        """
        Returns the sum of errors along shifts u, rounded to the nearest integer lags.
        """
        e = check_table(e, self._n_lags, "e")
        u = check_sequence(u, "u")
        raise_if_not(
            len(u) == len(e),
            f"Expected {len(e)} shifts, got {len(u)}",
            logger,
        )
        il = np.floor(u + 0.5 - self._shift_min).astype(int)
        il = np.clip(il, 0, self._n_lags - 1)
        return float(np.sum(e[np.arange(len(u)), il]))

    @staticmethod
    def normalize_errors(e: np.ndarray) -> np.ndarray:
        """
        Normalizes alignment errors to the range [0, 1]. Float64 arrays are normalized
        in place.
        """
        return normalize(check_table(e))

    @staticmethod
    def transpose_lag(e: np.ndarray) -> np.ndarray:
        """Returns errors of shape (n_lags, n_samples), for display."""
        return transpose_lag(check_table(e))


def find_shifts(
    f: np.ndarray,
    g: np.ndarray,
    shift_min: int,
    shift_max: int,
    strain_max: float = 1.0,
    error_extrapolation: Union[ErrorExtrapolation, str, None] = None,
    error_exponent: Optional[float] = None,
    error_smoothing: int = 0,
    shift_smoothing: float = 0.0,
) -> np.ndarray:
    """
    Determines shifts u such that f[i] ~ g[i+u[i]], using dynamic warping with a bound on strain.

    Parameters
    ----------
    f
        The reference sequence.
    g
        The target sequence.
    shift_min
        Lower bound on shifts.
    shift_max
        Upper bound on shifts.
    strain_max
        Bound on strain, in (0, 1].
    error_extrapolation
        Method used to extrapolate alignment errors. Defaults to the option ``warping.error_extrapolation``.
    error_exponent
        Exponent used to compute alignment errors. Defaults to the option ``warping.error_exponent``.
    error_smoothing
        Number of non-linear smoothings of alignment errors.
    shift_smoothing
        Extent of the filter used to smooth shifts, zero for no smoothing.

    Returns
    -------
    np.ndarray
        The shifts, one per sample of f.
    """
    warping = DynamicWarping(shift_min, shift_max)
    warping.set_strain_max(strain_max)
    if error_extrapolation is not None:
        warping.set_error_extrapolation(error_extrapolation)
    if error_exponent is not None:
        warping.set_error_exponent(error_exponent)
    warping.set_error_smoothing(error_smoothing)
    warping.set_shift_smoothing(shift_smoothing)
    return warping.find_shifts(f, g)
