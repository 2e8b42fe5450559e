import pytest
from payments.gateway import reset_gateway


@pytest.fixture(autouse=True)
def _fresh_gateway():
    reset_gateway()
    yield
    reset_gateway()
