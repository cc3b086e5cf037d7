# src/taskflow/core/clock.py

"""
Clock source.

- NetworkClock.now(): server-reported time (HTTP Date header), so a client with a
  wrong local clock cannot move deadlines; falls back to the local clock.
- start_of_day(): day boundaries in one fixed reference timezone, so overdue
  math does not depend on where the viewer sits.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta, tzinfo
from email.utils import parsedate_to_datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

import httpx

from .errors import ClockUnavailable, InvalidInput

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Shanghai"

TzLike = str | tzinfo


@lru_cache(maxsize=16)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def resolve_timezone(tz: TzLike = DEFAULT_TIMEZONE) -> tzinfo:
    if isinstance(tz, str):
        return _zone(tz)
    return tz


def _aware(instant: datetime) -> datetime:
    # Naive instants are treated as UTC, never as machine-local time.
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant


def calendar_day(instant: datetime, tz: TzLike = DEFAULT_TIMEZONE) -> date:
    """Calendar date of `instant` as seen in the reference timezone."""
    return _aware(instant).astimezone(resolve_timezone(tz)).date()


def day_start(day: date, tz: TzLike = DEFAULT_TIMEZONE) -> datetime:
    """00:00:00 of a calendar date in the reference timezone."""
    zone = resolve_timezone(tz)
    return datetime(day.year, day.month, day.day, tzinfo=zone)


def start_of_day(instant: datetime, tz: TzLike = DEFAULT_TIMEZONE) -> datetime:
    """
    Truncate `instant` to 00:00:00 in the reference timezone.

    The result only depends on the absolute instant and `tz`; the machine's
    local timezone is never consulted.
    """
    return day_start(calendar_day(instant, tz), tz)


def parse_due_date(value: object, tz: TzLike = DEFAULT_TIMEZONE) -> date:
    """
    Parse a due date.

    Accepts a date, a datetime, "YYYY-MM-DD" or a full ISO-8601 timestamp.
    Timestamps are reduced to their calendar day in the reference timezone.
    """
    if isinstance(value, datetime):
        return calendar_day(value, tz)
    if isinstance(value, date):
        return value

    raw = str(value or "").strip()
    if not raw:
        raise InvalidInput("Due date is required (YYYY-MM-DD).")

    try:
        if len(raw) == 10:
            return date.fromisoformat(raw)
        return calendar_day(datetime.fromisoformat(raw.replace("Z", "+00:00")), tz)
    except ValueError as e:
        raise InvalidInput(f"Invalid due date: {raw!r} (expected YYYY-MM-DD).") from e


def local_now() -> datetime:
    return datetime.now(UTC)


class NetworkClock:
    """
    Best-effort trusted "now".

    Sends an uncached HEAD request and reads the server `Date` header.
    Any failure (network error, timeout, missing/bad header) is logged and
    answered with the local clock instead; now() never raises.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
        fallback: Callable[[], datetime] = local_now,
    ) -> None:
        self._url = url
        self._timeout = float(timeout)
        self._transport = transport
        self._fallback = fallback

    async def now(self) -> datetime:
        try:
            return await self._fetch_network_time()
        except ClockUnavailable as e:
            logger.warning("Network time unavailable (%s); falling back to local time.", e)
        return _aware(self._fallback())

    async def _fetch_network_time(self) -> datetime:
        if not self._url:
            raise ClockUnavailable("no time source configured")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.head(
                    self._url,
                    # Cache-buster: a cached response would carry a stale Date.
                    params={"t": str(int(time.time() * 1000))},
                    headers={"Cache-Control": "no-store"},
                )
        except httpx.HTTPError as e:
            raise ClockUnavailable(f"request failed: {e.__class__.__name__}") from e

        header = resp.headers.get("Date")
        if not header:
            raise ClockUnavailable("Date header missing")

        try:
            server_time = parsedate_to_datetime(header)
        except (TypeError, ValueError) as e:
            raise ClockUnavailable(f"unparseable Date header: {header!r}") from e

        logger.debug("Network time from %s: %s", self._url, server_time.isoformat())
        return _aware(server_time).astimezone(UTC)


class LocalClock:
    """Local system clock (no network)."""

    async def now(self) -> datetime:
        return local_now()


class FixedClock:
    """Clock frozen at one instant; handy for tests and replays."""

    def __init__(self, instant: datetime) -> None:
        self.instant = _aware(instant)

    async def now(self) -> datetime:
        return self.instant

    def advance(self, **kwargs: float) -> None:
        self.instant = self.instant + timedelta(**kwargs)
