import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def reset_throttle_history():
    """Scoped throttles keep their history in the cache; start every test clean."""
    cache.clear()
    yield
    cache.clear()
