from typing import Optional

import numpy as np
from matplotlib import pyplot as plt


def plot_errors(
    self,
    e: np.ndarray,
    u: Optional[np.ndarray] = None,
    new_plot: bool = False,
    ax: Optional[plt.Axes] = None,
    errors_cmap: str = "gray",
    args_errors: Optional[dict] = None,
    args_shifts: Optional[dict] = None,
) -> plt.Axes:
    """
    Plot alignment (or accumulated) errors as an image, with lag on the vertical axis,
    and optionally the shifts found through them.

    Parameters
    ----------
    e
        Array of shape (n_samples, n_lags), as returned by `compute_errors` or `accumulate_forward`.
    u
        Optionally, shifts to draw over the errors.
    new_plot
        Boolean value indicating whether to spawn a new figure.
    ax
        Axes to draw into. Defaults to the current axes.
    errors_cmap
        Colormap style for the errors.
    args_errors
        Some keyword arguments to pass to `imshow` for the errors
    args_shifts
        Some keyword arguments to pass to `plot()` for the shifts

    Returns
    -------
    matplotlib.axes.Axes
        The axes that were drawn into.
    """
    if ax is None:
        if new_plot:
            plt.figure()
        ax = plt.gca()

    et = self.transpose_lag(e)
    n_lags, n_samples = et.shape

    imshow_kwargs = {
        "cmap": errors_cmap,
        "interpolation": "none",
        "origin": "lower",
        "aspect": "auto",
        "extent": [
            -0.5,
            n_samples - 0.5,
            self.shift_min - 0.5,
            self.shift_min + n_lags - 0.5,
        ],
    }
    ax.imshow(et, **(imshow_kwargs | (args_errors or {})))
    ax.set_xlabel("sample")
    ax.set_ylabel("lag")
    ax.yaxis.set_major_locator(plt.MaxNLocator(integer=True))

    if u is not None:
        ax.plot(np.arange(len(u)), u, **({"color": "red"} | (args_shifts or {})))

    return ax


def plot_shifts(
    self,
    u: np.ndarray,
    new_plot: bool = False,
    ax: Optional[plt.Axes] = None,
    show_bounds: bool = True,
    args_shifts: Optional[dict] = None,
) -> plt.Axes:
    """
    Plot shifts against sample index.

    Parameters
    ----------
    u
        The shifts, as returned by `find_shifts`.
    new_plot
        Boolean value indicating whether to spawn a new figure.
    ax
        Axes to draw into. Defaults to the current axes.
    show_bounds
        Whether to draw the bounds on shifts as dashed lines.
    args_shifts
        Some keyword arguments to pass to `plot()` for the shifts

    Returns
    -------
    matplotlib.axes.Axes
        The axes that were drawn into.
    """
    if ax is None:
        if new_plot:
            plt.figure()
        ax = plt.gca()

    ax.plot(np.arange(len(u)), u, **(args_shifts or {}))
    if show_bounds:
        for bound in (self.shift_min, self.shift_max):
            ax.axhline(bound, linestyle="--", color="#dedede")
    ax.set_xlabel("sample")
    ax.set_ylabel("shift")
    return ax
