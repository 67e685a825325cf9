"""
Configuration
-------------

Global options and default settings for dynwarp, similar to pandas' options system.

Options are read when a `DynamicWarping` or a `RecursiveExponentialFilter` is constructed;
changing an option afterwards does not affect existing instances.

Available Options
=================

**Warping Options**

- ``warping.error_exponent`` : float (default: 2.0)
    Exponent p used to compute alignment errors ``|f - g|^p``.

- ``warping.error_extrapolation`` : str (default: "nearest")
    Method used to fill alignment errors for lags that reference samples beyond the ends of the
    target sequence. One of "nearest", "average" or "reflect".

- ``warping.max_table_size`` : int (default: 10000000)
    Number of (sample, lag) cells above which `find_shifts` logs a performance warning.

**Filtering Options**

- ``filtering.edges`` : str (default: "output_zero_slope")
    Boundary condition of exponential smoothing filters. One of "input_zero_value",
    "input_zero_slope", "output_zero_value" or "output_zero_slope".

**Plotting Options**

- ``plotting.use_dynwarp_style`` : bool (default: False)
    Whether to apply dynwarp's matplotlib style. Changes take effect immediately.

Examples
========
>>> from dynwarp import get_option, set_option, option_context
>>> get_option('warping.error_exponent')
2.0
>>> set_option('warping.error_extrapolation', 'reflect')
>>> with option_context('warping.error_exponent', 1.0):
...     dw = DynamicWarping(-5, 5)  # uses |f - g|
>>> get_option('warping.error_exponent')
2.0
"""

from collections.abc import Generator
from contextlib import contextmanager
from numbers import Real
from typing import Any, Callable, Optional

from dynwarp.logging import get_logger, raise_log

logger = get_logger(__name__)

_DYNWARP_COLORS = [
    "#000000",
    "#003dfd",
    "#b512b8",
    "#11a9ba",
    "#0d780f",
    "#f77f07",
    "#ba0f0f",
]

_EXTRAPOLATION_NAMES = ("nearest", "average", "reflect")
_EDGES_NAMES = (
    "input_zero_value",
    "input_zero_slope",
    "output_zero_value",
    "output_zero_slope",
)


class _Option:
    """Internal class representing a single configuration option."""

    def __init__(
        self,
        key: str,
        default_value: Any,
        description: str,
        validator: Optional[Callable] = None,
        callback: Optional[Callable] = None,
    ):
        self.key = key
        self.default_value = default_value
        self.description = description
        self.validator = validator
        self.callback = callback
        self.value = default_value

    def set(self, value: Any) -> None:
        """Set the option value with validation."""
        if self.validator is not None:
            self.validator(value)
        self.value = value
        if self.callback is not None:
            self.callback(value)

    def reset(self) -> None:
        """Reset the option to its default value."""
        old_value = self.value
        self.value = self.default_value
        if self.callback is not None and old_value != self.default_value:
            self.callback(self.default_value)

    def get(self) -> Any:
        """Get the current option value."""
        return self.value


class _OptionsManager:
    def __init__(self):
        """Manager for all dynwarp configuration options."""
        error_exponent = _Option(
            key="warping.error_exponent",
            default_value=2.0,
            description="Exponent p used to compute alignment errors |f-g|^p.",
            validator=self._validate_positive_number,
        )

        error_extrapolation = _Option(
            key="warping.error_extrapolation",
            default_value="nearest",
            description="Method used to fill alignment errors for lags that reference samples "
            "beyond the ends of the target sequence. One of 'nearest', 'average' or 'reflect'.",
            validator=self._validator_choice(_EXTRAPOLATION_NAMES),
        )

        max_table_size = _Option(
            key="warping.max_table_size",
            default_value=10_000_000,
            description="Number of (sample, lag) cells above which find_shifts logs "
            "a performance warning.",
            validator=self._validate_positive_int,
        )

        filtering_edges = _Option(
            key="filtering.edges",
            default_value="output_zero_slope",
            description="Boundary condition of exponential smoothing filters. One of "
            "'input_zero_value', 'input_zero_slope', 'output_zero_value' or 'output_zero_slope'.",
            validator=self._validator_choice(_EDGES_NAMES),
        )

        plotting_use_dynwarp_style = _Option(
            key="plotting.use_dynwarp_style",
            default_value=False,
            description="Whether to apply dynwarp's matplotlib style. When False, the default "
            "or user-configured style is used.",
            validator=self._validate_bool,
            callback=self._on_plotting_style_change,
        )

        self._options = {
            opt.key: opt
            for opt in [
                error_exponent,
                error_extrapolation,
                max_table_size,
                filtering_edges,
                plotting_use_dynwarp_style,
            ]
        }
        # remember if user applied dynwarp style
        self._dynwarp_plotting_style_applied = False

    @staticmethod
    def _validate_positive_int(value: Any):
        """Validator for positive integers."""
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise_log(ValueError("Value must be a positive integer"), logger)

    @staticmethod
    def _validate_positive_number(value: Any):
        """Validator for positive real numbers."""
        if not isinstance(value, Real) or isinstance(value, bool) or not value > 0:
            raise_log(ValueError("Value must be a positive number"), logger)

    @staticmethod
    def _validate_bool(value: Any):
        """Validator for boolean values."""
        if not isinstance(value, bool):
            raise_log(ValueError("Value must be a boolean"), logger)

    @staticmethod
    def _validator_choice(choices: tuple) -> Callable:
        def validate(value: Any):
            if not isinstance(value, str) or value.lower() not in choices:
                raise_log(
                    ValueError(f"Value must be one of {list(choices)}, got '{value}'"),
                    logger,
                )

        return validate

    def _on_plotting_style_change(self, value: bool) -> None:
        """Callback for when plotting.use_dynwarp_style changes."""
        import matplotlib as mpl
        from matplotlib import cycler

        if value:
            mpl.rcParams.update({
                "axes.edgecolor": "black",
                "axes.grid": True,
                "axes.labelcolor": "#333333",
                "axes.linewidth": 1,
                "axes.prop_cycle": cycler(color=_DYNWARP_COLORS),
                "axes.spines.top": False,
                "axes.spines.right": False,
                "grid.color": "#dedede",
                "legend.frameon": False,
                "lines.linewidth": 1.3,
                "xtick.color": "#333333",
                "xtick.labelsize": "small",
                "ytick.color": "#333333",
                "ytick.labelsize": "small",
                "image.cmap": "viridis",
            })
        elif self._dynwarp_plotting_style_applied:
            mpl.rcParams.update(mpl.rcParamsDefault)

        self._dynwarp_plotting_style_applied = value

    def _find_option(self, pattern: str, check_unique: bool = False) -> list[_Option]:
        """Find options matching a pattern (supports both exact match and prefix match)."""
        if not pattern:
            raise_log(
                ValueError("Pattern must be non-empty"),
                logger,
            )

        if pattern == "all":
            return list(self._options.values())

        if pattern in self._options:
            return [self._options[pattern]]

        # prefix match, e.g. 'warping' matches all 'warping.*' options
        matches = [
            opt
            for key, opt in self._options.items()
            if key.split(".")[0].startswith(pattern)
        ]
        if matches:
            if check_unique and len(matches) > 1:
                raise_log(
                    ValueError(
                        f"Pattern '{pattern}' matches multiple options: {[opt.key for opt in matches]}"
                        ". "
                        "Give a specific option."
                    ),
                    logger,
                )
            return matches

        raise_log(ValueError(f"No option found matching pattern: '{pattern}'"), logger)

    def get_option(self, pattern: str) -> Any:
        """Get the value of an option."""
        matches = self._find_option(pattern, check_unique=True)
        return matches[0].get()

    def set_option(self, pattern: str, value: Any) -> None:
        """Set the value of an option."""
        matches = self._find_option(pattern, check_unique=True)
        matches[0].set(value)

    def reset_option(self, pattern: str) -> None:
        """Reset option(s) to default value(s)."""
        matches = self._find_option(pattern, check_unique=False)
        for opt in matches:
            opt.reset()

    def describe_option(self, pattern: str) -> str:
        """Describe option(s) matching the pattern."""
        matches = self._find_option(pattern, check_unique=False)

        description_parts = []
        for opt in sorted(matches, key=lambda x: x.key):
            desc = f"{opt.key} : {type(opt.default_value).__name__}\n"
            desc += f"    {opt.description}\n"
            desc += f"    [default: {opt.default_value}] [currently: {opt.get()}]"
            description_parts.append(desc)

        return "\n\n".join(description_parts)

    @contextmanager
    def option_context(self, *args) -> Generator[None, None, None]:
        """Context manager to temporarily set options."""
        if len(args) % 2 != 0:
            raise_log(
                ValueError(
                    "option_context requires an even number of arguments (option-value pairs)"
                ),
                logger,
            )

        original_values = {}
        try:
            for pattern, value in zip(args[::2], args[1::2]):
                original_values[pattern] = self.get_option(pattern)
                self.set_option(pattern, value)

            yield
        finally:
            for key, value in original_values.items():
                self.set_option(key, value)


_global_options = _OptionsManager()


def get_option(pat: str) -> Any:
    """
    Retrieves the value of the specified option.

    Available Options:

    - warping.[error_exponent, error_extrapolation, max_table_size]
    - filtering.edges
    - plotting.use_dynwarp_style

    Parameters
    ----------
    pat
        The option key to retrieve. Must uniquely identify a single option.

    Returns
    -------
    Any
        The current value of the option.

    Raises
    ------
    ValueError
        If no option matches the pattern, or if the pattern is ambiguous.
    """
    return _global_options.get_option(pat)


def set_option(pat: str, value: Any) -> None:
    """
    Sets the value of the specified option.

    Parameters
    ----------
    pat
        The option key to set. Must uniquely identify a single option.
    value
        The new value for the option. Must be valid according to the option's validator.

    Raises
    ------
    ValueError
        If no option matches the pattern, if the pattern is ambiguous, or if the value is invalid for the option.
    """
    _global_options.set_option(pat, value)


def reset_option(pat: str) -> None:
    """
    Reset one or more options to their default value.

    Parameters
    ----------
    pat
        The option key or pattern to reset. Can match multiple options. Use `"all"` to reset all options.
    """
    _global_options.reset_option(pat)


def describe_option(pat: str) -> str:
    """
    Describe one or more options.

    Parameters
    ----------
    pat
        The option key or pattern to describe. Can match multiple options. Use `"all"` to describe all options.

    Returns
    -------
    str
        The description for the specified options.
    """
    return _global_options.describe_option(pat)


@contextmanager
def option_context(*args) -> Generator[None, None, None]:
    """
    Context manager to temporarily set options in the `with` statement context.

    Parameters
    ----------
    *args
        Pairs of (key, value) for options to set temporarily.

    Examples
    --------
    >>> from dynwarp import option_context, get_option
    >>> with option_context('warping.error_exponent', 1.0):
    ...     print(get_option('warping.error_exponent'))
    1.0
    """
    with _global_options.option_context(*args):
        yield
