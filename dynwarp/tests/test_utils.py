import numpy as np
import pytest

from dynwarp.utils import check_sequence


class TestCheckSequence:
    def test_returns_float_array(self):
        x = check_sequence([1, 2, 3])
        assert x.dtype == np.float64
        np.testing.assert_array_equal(x, [1.0, 2.0, 3.0])

    def test_copy(self):
        x = np.arange(4.0)
        assert check_sequence(x) is x
        y = check_sequence(x, copy=True)
        assert y is not x
        np.testing.assert_array_equal(y, x)

    @pytest.mark.parametrize(
        "values", [[], np.ones((2, 2)), [1.0, np.nan], [-np.inf, 0.0], 3.0]
    )
    def test_invalid(self, values):
        with pytest.raises(ValueError):
            check_sequence(values, "f")

    def test_message_names_sequence(self):
        with pytest.raises(ValueError, match="found some in `g`"):
            check_sequence([0.0, np.nan], "g")
