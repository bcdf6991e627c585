import logging
import os

import pytest
from hypothesis import settings

from canoncbor import logging as clog

settings.register_profile("ci", max_examples=500, deadline=None)
settings.register_profile("dev", max_examples=100, deadline=None)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture(autouse=True)
def _canoncbor_reset_logging():
    """
    The CLI configures the `canoncbor` logger tree (own handler, no
    propagation). Restore the library default after every test so output
    does not leak between tests.
    """
    yield
    clog.clear_context()
    root = logging.getLogger("canoncbor")
    for hnd in list(root.handlers):
        root.removeHandler(hnd)
    root.setLevel(logging.NOTSET)
    root.propagate = True
