"""Global configuration for pytest"""

import numpy as np
import pytest

from spatialgfx.utils import config


@pytest.fixture(autouse=True)
def predictable_random_numbers():
    """
    Called at start of each test, guarantees that calls to random produce the same
    output over subsequent tests runs, see
    http://docs.scipy.org/doc/numpy-1.10.1/reference/generated/numpy.random.seed.html
    """
    np.random.seed(0)


@pytest.fixture(autouse=True)
def restore_node_defaults():
    """Undo changes that a test makes to the process-wide node defaults."""
    saved = config.defaults.copy()
    yield
    config.set_defaults(up=saved.up, auto_update_matrix=saved.auto_update_matrix)


@pytest.fixture(autouse=True, scope="session")
def numerical_exceptions():
    """
    Ensure any numerical errors raise a warning in our test suite
    The point is that we enforce such cases to be handled explicitly in our code
    Preferably using local `with np.errstate(...)` constructs
    """
    np.seterr(all="raise")
