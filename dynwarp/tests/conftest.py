import logging

import matplotlib
import pytest

# tests never open a display
matplotlib.use("Agg")


@pytest.fixture(scope="session", autouse=True)
def set_up_tests(request):
    logging.disable(logging.CRITICAL)

    def tear_down_tests():
        logging.disable(logging.NOTSET)

    request.addfinalizer(tear_down_tests)
