from enum import Enum
from typing import Union

from dynwarp.logging import get_logger, raise_log

logger = get_logger(__name__)


class ErrorExtrapolation(Enum):
    """
    Method used to fill alignment errors e[i, l] for which the target index
    j = i + l + shift_min lies beyond the ends of the target sequence g.
    """

    NEAREST = "Nearest"
    """Use the error computed at the nearest in-bounds sample index, for the same lag."""
    AVERAGE = "Average"
    """Use the average of all errors computed for the same lag."""
    REFLECT = "Reflect"
    """Use the error at the sample index reflected about the nearest in-bounds index, for the same lag."""

    def __str__(self):
        return self.value

    @classmethod
    def from_str(cls, name: str) -> "ErrorExtrapolation":
        """
        Parameters
        ----------
        name
            Case-insensitive name of the method, "Nearest", "Average" or "Reflect".

        Returns
        -------
        ErrorExtrapolation
            The matching extrapolation method.
        """
        for member in cls:
            if isinstance(name, str) and name.lower() == member.value.lower():
                return member
        raise_log(
            ValueError(
                f"Unknown error extrapolation '{name}', expected one of "
                f"{[m.value for m in cls]}"
            ),
            logger,
        )

    @classmethod
    def parse(cls, value: Union["ErrorExtrapolation", str]) -> "ErrorExtrapolation":
        if isinstance(value, cls):
            return value
        return cls.from_str(value)
