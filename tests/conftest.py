import pytest

from geomkit.geometry.precision import reset_precision


@pytest.fixture(autouse=True)
def default_precision():
    """Every test starts and ends with the configured tolerance."""
    reset_precision()
    yield
    reset_precision()
