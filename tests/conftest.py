import pytest
import numpy as np

from manifoldmeasures.config import options


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def spd_matrix():
    A = np.array([[2.0, 0.3, 0.1],
                  [0.3, 1.5, -0.2],
                  [0.1, -0.2, 1.0]])
    return A


@pytest.fixture(autouse=True)
def restore_options():
    """Tests may change package options; put them back afterwards."""
    saved = (options.max_rejections, options.hypergeometric_max_degree, options.hypergeometric_rtol)
    yield
    options.max_rejections, options.hypergeometric_max_degree, options.hypergeometric_rtol = saved
