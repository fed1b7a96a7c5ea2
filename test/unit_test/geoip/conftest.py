import pytest

from fauxdash.geoip import clear_memory_cache


@pytest.fixture(autouse=True)
def empty_memory_cache():
    clear_memory_cache()
    yield
    clear_memory_cache()
