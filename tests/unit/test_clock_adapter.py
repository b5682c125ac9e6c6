import time
from datetime import UTC, datetime

from resource_tracking.adapters.clock import SystemClock


def test_system_clock_utc_is_aware():
    now = SystemClock().now_utc()
    assert now.tzinfo is not None
    assert now.utcoffset().total_seconds() == 0
    # Sanity check: is it close to real now?
    assert abs((datetime.now(UTC) - now).total_seconds()) < 1.0


def test_system_clock_monotonic_never_goes_back():
    clock = SystemClock()
    first = clock.monotonic()
    time.sleep(0.01)
    assert clock.monotonic() >= first
