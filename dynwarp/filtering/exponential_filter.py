"""
Recursive Exponential Filter
----------------------------
"""

import math
from enum import Enum
from numbers import Real
from typing import Optional, Union

import numpy as np

from dynwarp.config import get_option
from dynwarp.filtering.filtering_model import FilteringModel
from dynwarp.logging import get_logger, raise_if_not, raise_log

logger = get_logger(__name__)


class Edges(Enum):
    """
    Boundary condition used at the edges of either input or output samples.
    All except `INPUT_ZERO_SLOPE` yield a filter that is symmetric positive-definite.
    """

    INPUT_ZERO_VALUE = "input_zero_value"
    """Extrapolate input samples beyond the edges with zero values."""
    INPUT_ZERO_SLOPE = "input_zero_slope"
    """Extrapolate input samples beyond the edges with the values at the edges."""
    OUTPUT_ZERO_VALUE = "output_zero_value"
    """Constrain output values beyond the edges to be zero."""
    OUTPUT_ZERO_SLOPE = "output_zero_slope"
    """Constrain output values beyond the edges to be constant (nearly zero slope at the edges)."""

    @property
    def input_anchored(self) -> bool:
        return self in (Edges.INPUT_ZERO_VALUE, Edges.INPUT_ZERO_SLOPE)

    @property
    def zero_slope(self) -> bool:
        return self in (Edges.INPUT_ZERO_SLOPE, Edges.OUTPUT_ZERO_SLOPE)

    @classmethod
    def parse(cls, value: Union["Edges", str]) -> "Edges":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if value.lower() == member.value:
                    return member
        raise_log(
            ValueError(
                f"Unknown edges '{value}', expected one of {[m.value for m in cls]}"
            ),
            logger,
        )


def a_from_sigma(sigma: float) -> float:
    """
    Returns the filter parameter a in [0, 1) for a half-width `sigma`. For low frequencies,
    the frequency response of the resulting filter matches the value, slope and curvature of
    a Gaussian filter with the same half-width.
    """
    if sigma <= 0.0:
        return 0.0
    ss = sigma * sigma
    return (1.0 + ss - math.sqrt(1.0 + 2.0 * ss)) / ss


class RecursiveExponentialFilter(FilteringModel):
    def __init__(self, sigma: float, edges: Optional[Union[Edges, str]] = None):
        """
        Recursive two-sided exponential smoothing filter.

        Away from the edges of a sequence, the impulse response of this filter is symmetric
        and decays exponentially from its peak at zero lag: h[n] = a^|n| (1-a)/(1+a), with
        the parameter a derived from the half-width `sigma`. A forward causal recursion is
        followed by a backward anti-causal recursion; how the two recursions are started
        depends on the boundary condition `edges`.

        Parameters
        ----------
        sigma
            Half-width of the filter. A half-width of zero yields the identity filter.
        edges
            Boundary condition, as an `Edges` member or its name. Defaults to the option
            ``filtering.edges`` (`Edges.OUTPUT_ZERO_SLOPE` unless configured otherwise).
        """
        super().__init__()
        raise_if_not(
            isinstance(sigma, Real) and math.isfinite(sigma) and sigma >= 0.0,
            f"sigma must be finite and non-negative, got {sigma}",
            logger,
        )
        self.sigma = float(sigma)
        self.a = a_from_sigma(self.sigma)
        self.edges = Edges.parse(get_option("filtering.edges") if edges is None else edges)

    def __repr__(self):
        return f"RecursiveExponentialFilter(sigma={self.sigma}, edges={self.edges.value})"

    def set_edges(self, edges: Union[Edges, str]):
        """Sets the boundary condition used for samples beyond the edges."""
        self.edges = Edges.parse(edges)

    def filter(self, x: np.ndarray) -> np.ndarray:
        """
        Smooths a sequence. The input is never modified, so that the result may safely be
        assigned back to the array that was passed in.

        Parameters
        ----------
        x
            A non-empty 1-D sequence.

        Returns
        -------
        np.ndarray
            The smoothed sequence, with the same length as `x`.
        """
        x = self._check_sequence(x)
        a = self.a
        if a == 0.0 or len(x) == 1:
            return x
        if self.edges.input_anchored:
            return _smooth_input_edges(self.edges.zero_slope, a, x)
        return _smooth_output_edges(self.edges.zero_slope, a, x)


def _smooth_input_edges(zs: bool, a: float, x: np.ndarray) -> np.ndarray:
    n = len(x)
    y = np.empty(n, dtype=np.float64)
    b = 1.0 - a
    sx = 1.0 if zs else b
    sy = a

    yi = y[0] = sx * x[0]
    for i in range(1, n - 1):
        yi = y[i] = a * yi + b * x[i]
    sx /= 1.0 + a
    sy /= 1.0 + a
    yi = y[n - 1] = sy * yi + sx * x[n - 1]
    for i in range(n - 2, -1, -1):
        yi = y[i] = a * yi + b * y[i]
    return y


def _smooth_output_edges(zs: bool, a: float, x: np.ndarray) -> np.ndarray:
    # Algorithm 4.1 in Boisvert, R.F., 1991, Algorithms for special tridiagonal
    # systems: SIAM J. Sci. Stat. Comput., v. 12, no. 2, pp. 423-442.
    n = len(x)
    aa = a * a
    ss = 1.0 - a if zs else 1.0
    gg = aa - a if zs else aa
    c = (1.0 - aa - ss) / ss
    d = 1.0 / (1.0 - aa + gg * (1.0 + c * aa ** (n - 1)))
    e = (1.0 - a) * (1.0 - a) * np.finfo(np.float64).eps / 4.0

    y = (1.0 - a) * (1.0 - a) * x

    # reversed triangular factorization; terms of the series below e are dropped
    k = min(int(math.ceil(math.log(e) / math.log(a))), 2 * n - 2)  # 1 <= k <= 2n-2
    ynm1 = 0.0
    m = k - n + 1  # 2-n <= m <= n-1
    for i in range(m, 0, -1):
        ynm1 = a * ynm1 + y[i]
    ynm1 *= c
    if n - k < 1:
        ynm1 = a * ynm1 + (1.0 + c) * y[0]
    m = max(n - k, 1)  # 1 <= m <= n-1
    for i in range(m, n):
        ynm1 = a * ynm1 + y[i]
    ynm1 *= d

    # reverse substitution
    y[n - 1] -= gg * ynm1
    for i in range(n - 2, -1, -1):
        y[i] += a * y[i + 1]
    y[0] /= ss

    # forward substitution
    for i in range(1, n - 1):
        y[i] += a * y[i - 1]
    y[n - 1] = ynm1
    return y
