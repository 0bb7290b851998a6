import os
from datetime import datetime, timedelta, timezone

import pytest

TEST_ENV = {
    "HOST": "localhost",
    "PORT": "3003",
    "LOG_LEVEL": "WARNING",
    "LOG_JSON": "false",
    "LOG_FILE": "",
    "START_DATE": "2021-01-01T00:00:00Z",
    "END_DATE": "2022-01-01T00:00:00Z",
    "COUNTDOWN_HOSTS": "ugh.kominick.com",
    "IP_HOSTS": "ip.kominick.com",
    "GIT_HOSTS": "git.jaemk.me",
    "GIT_REDIRECT_BASE": "https://github.com/jaemk/",
    "CLIENT_IP_HEADER": "fly-client-ip",
    "METRICS_ENABLED": "0",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value
os.environ.pop("STATIC_DIR", None)


@pytest.fixture(autouse=True)
def _reset_settings():
    """Each test sees settings rebuilt from the environment it sets up."""

    from mono.core import settings as settings_module

    settings_module.get_settings.cache_clear()
    yield
    settings_module.get_settings.cache_clear()


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeNow:
    """Wall clock that moves in step with a FakeClock."""

    def __init__(self, clock: FakeClock, origin: datetime) -> None:
        self._clock = clock
        self._start = clock.now
        self._origin = origin

    def __call__(self) -> datetime:
        return self._origin + timedelta(seconds=self._clock.now - self._start)


MID_YEAR = datetime(2021, 7, 1, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def now(clock) -> FakeNow:
    return FakeNow(clock, MID_YEAR)
