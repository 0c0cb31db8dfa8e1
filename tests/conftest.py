import time

import pytest

from rotating_cache.store import RotatingCache

#-------------FIXTURES----------------
@pytest.fixture
def clock(monkeypatch):
    """
    Frozen time.time(), advance with clock.advance(seconds)
    """
    class Clock:
        def __init__(self):
            self.now = 1_700_000_000.0

        def advance(self, seconds: float):
            self.now += seconds

    fake = Clock()
    monkeypatch.setattr(time, "time", lambda: fake.now)
    return fake

@pytest.fixture
def make_cache():
    """
    Build caches with the periodic sweep disabled unless asked for, close them afterwards
    """
    caches = []

    def factory(**overrides):
        overrides.setdefault("checkperiod", 0)
        cache = RotatingCache(**overrides)
        caches.append(cache)
        return cache

    yield factory
    for cache in caches:
        cache.close()

@pytest.fixture
def cache(make_cache):
    return make_cache()
