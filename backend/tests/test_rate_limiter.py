from toolbridge.limits.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_bucket_starts_full_and_drains():
    limiter = RateLimiter(3, 1.0, clock=FakeClock())
    assert [limiter.try_acquire("key") for _ in range(4)] == [True, True, True, False]
    assert limiter.remaining("key") == 0


def test_bucket_refills_over_time_up_to_capacity():
    clock = FakeClock()
    limiter = RateLimiter(2, 10.0, clock=clock)
    assert limiter.try_acquire("key") and limiter.try_acquire("key")
    assert not limiter.try_acquire("key")
    clock.now = 0.1
    assert limiter.try_acquire("key")
    clock.now = 60.0
    limiter.try_acquire("key")
    assert limiter.remaining("key") == 1


def test_keys_are_isolated_and_blank_keys_share_a_bucket():
    limiter = RateLimiter(1, 0.0, clock=FakeClock())
    assert limiter.try_acquire("a")
    assert limiter.try_acquire("b")
    assert not limiter.try_acquire("a")
    assert limiter.try_acquire("")
    assert not limiter.try_acquire("")


def test_reset_restores_capacity():
    limiter = RateLimiter(1, 0.0, clock=FakeClock())
    limiter.try_acquire("a")
    limiter.reset("a")
    assert limiter.try_acquire("a")
    limiter.reset()
    assert limiter.remaining("a") == 1


def test_refilled_buckets_are_evicted_when_new_keys_arrive():
    clock = FakeClock()
    limiter = RateLimiter(2, 1.0, clock=clock)
    for index in range(50):
        limiter.try_acquire(f"key-{index}")
    assert len(limiter._buckets) == 50

    clock.now = 5.0
    assert limiter.try_acquire("fresh")
    assert list(limiter._buckets) == ["fresh"]
    assert limiter.remaining("key-3") == 2


def test_partially_spent_buckets_survive_eviction():
    clock = FakeClock()
    limiter = RateLimiter(10, 1.0, clock=clock)
    for _ in range(8):
        limiter.try_acquire("busy")
    clock.now = 1.0
    limiter.try_acquire("other")
    assert limiter.remaining("busy") == 2
