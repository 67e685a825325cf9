import logging
import re

import numpy as np
import pytest
from testfixtures import LogCapture

from dynwarp import DynamicWarping, option_context
from dynwarp.logging import get_logger, raise_if, raise_if_not, raise_log, time_log


@pytest.fixture(scope="module", autouse=True)
def setup_logging():
    logging.disable(logging.NOTSET)


def test_raise_log():
    exception_was_raised = False
    with LogCapture() as lc:
        logger = get_logger(__name__)
        logger.handlers = []
        try:
            raise_log(Exception("test"), logger)
        except Exception:
            exception_was_raised = True

    # testing correct log message
    lc.check((__name__, "ERROR", "Exception: test"))

    # checking whether exception was properly raised
    assert exception_was_raised


def test_raise_if_not():
    exception_was_raised = False
    with LogCapture() as lc:
        logger = get_logger(__name__)
        logger.handlers = []
        try:
            raise_if_not(True, "test", logger)
            raise_if_not(False, "test", logger)
        except Exception:
            exception_was_raised = True

    lc.check((__name__, "ERROR", "ValueError: test"))
    assert exception_was_raised


def test_raise_if():
    logger = get_logger(__name__)
    raise_if(False, "test", logger)
    with pytest.raises(ValueError, match="test"):
        raise_if(True, "test", logger)


def test_invalid_strain_error_log(caplog):
    warping = DynamicWarping(-3, 3)

    with caplog.at_level(logging.ERROR):
        with pytest.raises(ValueError) as exc:
            warping.set_strain_max(0.0)

    message_expected = "strain_max must be in (0, 1], got 0.0"
    assert str(exc.value) == message_expected
    assert f"ValueError: {message_expected}" in caplog.text


def test_degenerate_lags_error_log():
    with LogCapture() as lc:
        get_logger("dynwarp.dataprocessing.warping.dynamic_warping").handlers = []
        try:
            DynamicWarping(0, 1)
        except ValueError:
            pass

    lc.check((
        "dynwarp.dataprocessing.warping.dynamic_warping",
        "ERROR",
        "ValueError: Expected shift_max - shift_min > 1, got shift_min=0 and shift_max=1",
    ))


def test_time_log():
    logger = get_logger(__name__)
    logger.handlers = []

    @time_log(logger)
    def _my_timed_fn():
        # do something for some time
        for _ in range(2):
            pass

    with LogCapture() as lc:
        _my_timed_fn()

    logged_message = lc.records[-1].getMessage()
    assert (
        re.fullmatch(
            "_my_timed_fn function ran for [0-9]+ milliseconds", logged_message
        )
        is not None
    )


def test_find_shifts_time_log():
    warping = DynamicWarping(-2, 2)
    f = np.sin(np.arange(20) * 0.3)

    with LogCapture() as lc:
        warping.find_shifts(f, f)

    messages = [r.getMessage() for r in lc.records]
    assert any(
        re.fullmatch("find_shifts function ran for [0-9]+ milliseconds", m)
        for m in messages
    )


def test_large_table_warning():
    warping = DynamicWarping(-2, 2)
    f = np.sin(np.arange(20) * 0.3)

    with option_context("warping.max_table_size", 50):
        with LogCapture(level=logging.WARNING) as lc:
            warping.find_shifts(f, f)

    assert len(lc.records) == 1
    assert lc.records[0].levelname == "WARNING"
    assert "100 cells" in lc.records[0].getMessage()
