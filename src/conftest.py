"""doctest fixtures"""

import numpy as np
import pytest

import roiclust.config as config

# Set numpy print option to legacy 1.25 so native numpy types
# are not printed with dtype information.
if np.__version__[0] == "2":
    np.set_printoptions(legacy="1.25", precision=3)  # type: ignore
else:
    np.set_printoptions(precision=3)


@pytest.fixture(autouse=True)
def reset_config():
    yield
    config.set_explicit_zeros(None)
