from datetime import datetime, timedelta

import pytest


class FakeClock:
    """Settable clock for deterministic expiry checks"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 15, 12, 0, 0))
