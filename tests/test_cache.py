from __future__ import annotations

import pytest

from services.cache import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=60, clock=clock)

    entry = cache.set("forecast", ["sunny"])

    assert entry.expires_at == 1060.0
    clock.now = 1059.0
    assert cache.get("forecast") == ["sunny"]
    clock.now = 1060.0
    assert cache.get("forecast") is None
    assert len(cache) == 0


def test_values_are_copied_in_and_out() -> None:
    cache = TTLCache(ttl_seconds=60, clock=FakeClock())
    value = {"temp": [30.0]}

    cache.set("current", value)
    value["temp"].append(99.0)
    fetched = cache.get("current")
    fetched["temp"].append(12.0)

    assert cache.get("current") == {"temp": [30.0]}


def test_missing_key_returns_none() -> None:
    assert TTLCache(ttl_seconds=1).get("absent") is None


@pytest.mark.parametrize("ttl", [0, -5])
def test_ttl_must_be_positive(ttl: float) -> None:
    with pytest.raises(ValueError):
        TTLCache(ttl_seconds=ttl)


def test_clear_drops_everything() -> None:
    cache = TTLCache(ttl_seconds=60, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)

    cache.clear()

    assert len(cache) == 0
