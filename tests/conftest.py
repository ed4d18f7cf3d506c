import pytest

from storefront.main import app
from storefront.services.cache import TTLCache


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(ttl=300, clock=clock)


@pytest.fixture
def app_cache(clock):
    """Swap the application's cache for a fresh one driven by the fake clock."""
    previous = app.state.cache
    app.state.cache = TTLCache(ttl=300, clock=clock)
    yield app.state.cache
    app.state.cache = previous
