from satsmap.services.cache import ResponseCache


class FakeMonotonic:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_value_served_until_ttl():
    clock = FakeMonotonic()
    cache = ResponseCache(ttl_seconds=300, clock=clock)

    cache.set("locations", [1, 2])
    clock.now = 299.9
    assert cache.get("locations") == [1, 2]

    clock.now = 300
    assert cache.get("locations") is None


def test_get_or_set_calls_factory_once_while_fresh():
    clock = FakeMonotonic()
    cache = ResponseCache(ttl_seconds=300, clock=clock)
    calls = []

    def factory():
        calls.append(1)
        return {"total": len(calls)}

    assert cache.get_or_set("stats", factory) == {"total": 1}
    assert cache.get_or_set("stats", factory) == {"total": 1}
    clock.now = 301
    assert cache.get_or_set("stats", factory) == {"total": 2}


def test_zero_ttl_disables_caching():
    cache = ResponseCache(ttl_seconds=0, clock=FakeMonotonic())
    calls = []

    cache.get_or_set("locations", lambda: calls.append(1) or [])
    cache.get_or_set("locations", lambda: calls.append(1) or [])

    assert not cache.enabled
    assert len(calls) == 2


def test_clear_drops_every_entry():
    cache = ResponseCache(ttl_seconds=300, clock=FakeMonotonic())
    cache.set("locations", [1])
    cache.set("stats", {"total": 1})

    cache.clear()

    assert cache.get("locations") is None
    assert cache.get("stats") is None
