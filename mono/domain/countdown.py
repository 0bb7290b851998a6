"""Countdown metrics for the configured date window.

``CountdownMetrics`` owns two independent caches in front of
``count_business_days``:

- a keyed cache on the exact ``(start, end)`` date pair (60s, 5 entries)
- a singleton snapshot cache for the ``/dates/end`` payload (30s)

One instance is built at startup and shared by every request.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from time import monotonic
from typing import Callable, NamedTuple, Optional

from mono.core.microcache import TTLCache
from mono.core.time_utils import format_rfc3339, utc_date, utc_now
from mono.domain.business_days import count_business_days

logger = logging.getLogger(__name__)

BUSINESS_DAYS_TTL_SECONDS = 60.0
BUSINESS_DAYS_CACHE_SIZE = 5
SNAPSHOT_TTL_SECONDS = 30.0

_SNAPSHOT_KEY = "dates:end"
_MICROS = 1_000_000


@dataclass(frozen=True)
class DateWindow:
    start: datetime
    end: datetime


class ElapsedParts(NamedTuple):
    days: int
    hours: int
    minutes: int
    seconds: int


@dataclass(frozen=True)
class Snapshot:
    start: str
    end: str
    days_left: int
    business_days_left: int
    business_days_done: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Remaining:
    parts: ElapsedParts
    business_days_left: int
    business_days_done: int

    def as_text(self) -> str:
        days, hours, minutes, seconds = self.parts
        return (
            f"{days}d {hours}h {minutes}m {seconds}s\n"
            f"business days left: {self.business_days_left}\n"
            f"business days done: {self.business_days_done}\n"
        )


def elapsed_parts(start: datetime, end: datetime) -> ElapsedParts:
    """Split ``end - start`` into days/hours/minutes/seconds.

    Whole seconds are truncated toward zero and every component carries the
    sign of the duration, so a window that has already closed yields
    non-positive parts.
    """
    delta: timedelta = end - start
    micros = (delta.days * 86_400 + delta.seconds) * _MICROS + delta.microseconds
    sign = -1 if micros < 0 else 1
    total = abs(micros) // _MICROS

    minutes, seconds = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    return ElapsedParts(sign * days, sign * hours, sign * minutes, sign * seconds)


class CountdownMetrics:
    def __init__(
        self,
        window: DateWindow,
        *,
        business_days_ttl: float = BUSINESS_DAYS_TTL_SECONDS,
        business_days_size: int = BUSINESS_DAYS_CACHE_SIZE,
        snapshot_ttl: float = SNAPSHOT_TTL_SECONDS,
        clock: Callable[[], float] = monotonic,
        now: Callable[[], datetime] = utc_now,
        counter: Callable[[date, date], int] = count_business_days,
    ) -> None:
        self.window = window
        self._now = now
        self._counter = counter
        self._business_days: TTLCache[tuple[date, date], int] = TTLCache(
            ttl_seconds=business_days_ttl,
            max_items=business_days_size,
            name="business_days",
            clock=clock,
        )
        self._snapshot: TTLCache[str, Snapshot] = TTLCache(
            ttl_seconds=snapshot_ttl,
            max_items=1,
            name="snapshot",
            clock=clock,
        )

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "CountdownMetrics":
        return cls(
            settings.window,
            business_days_ttl=settings.business_days_ttl_seconds,
            business_days_size=settings.business_days_cache_size,
            snapshot_ttl=settings.snapshot_ttl_seconds,
            **kwargs,
        )

    def business_days(self, start: date, end: date) -> int:
        def compute() -> int:
            logger.debug("calculating business days", extra={"start": str(start), "end": str(end)})
            return self._counter(start, end)

        return self._business_days.get_or_compute((start, end), compute)

    def _build_snapshot(self) -> Snapshot:
        logger.debug("calculating /dates/end info")
        now = self._now()
        start, end = self.window.start, self.window.end
        today = utc_date(now)
        return Snapshot(
            start=format_rfc3339(start),
            end=format_rfc3339(end),
            days_left=elapsed_parts(now, end).days,
            business_days_left=self.business_days(today, utc_date(end)),
            business_days_done=self.business_days(utc_date(start), today),
        )

    def get_snapshot(self) -> Snapshot:
        return self._snapshot.get_or_compute(_SNAPSHOT_KEY, self._build_snapshot)

    def remaining(self, now: Optional[datetime] = None) -> Remaining:
        """Uncached view of the countdown as of ``now``; only day counts are memoized."""

        now = now or self._now()
        start, end = self.window.start, self.window.end
        today = utc_date(now)
        return Remaining(
            parts=elapsed_parts(now, end),
            business_days_left=self.business_days(today, utc_date(end)),
            business_days_done=self.business_days(utc_date(start), today),
        )

    def clear(self) -> None:
        self._business_days.clear()
        self._snapshot.clear()


__all__ = [
    "CountdownMetrics",
    "DateWindow",
    "ElapsedParts",
    "Remaining",
    "Snapshot",
    "elapsed_parts",
]
