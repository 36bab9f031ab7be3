"""Time sources for SigV4 signing.

Signing reads the clock exactly once per call.  ``SystemClock`` is the
production default; ``FixedClock`` pins the instant so that URLs can be
reproduced byte-for-byte in tests.
"""

import re
from datetime import datetime, timezone
from typing import Protocol

AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
# strptime accepts unpadded fields; the wire form is always fixed width.
AMZ_DATE_PATTERN = re.compile(r"\d{8}T\d{6}Z", re.ASCII)


class Clock(Protocol):
    """Anything that can report the current instant."""

    def now(self) -> datetime: ...


class SystemClock:
    """Reads the real system clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Always returns the same instant.

    Attributes:
        instant: The instant reported by ``now()``.
    """

    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def to_utc(instant: datetime) -> datetime:
    """Convert an instant to UTC, truncated to second precision.

    Naive datetimes are taken to already be in UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    else:
        instant = instant.astimezone(timezone.utc)
    return instant.replace(microsecond=0)


def format_amz_date(instant: datetime) -> str:
    """Format an instant as a SigV4 timestamp (YYYYMMDDTHHMMSSZ)."""
    return to_utc(instant).strftime(AMZ_DATE_FORMAT)


def parse_amz_date(value: str) -> datetime:
    """Parse a SigV4 timestamp into an aware UTC datetime.

    Raises:
        ValueError: If the value is not in YYYYMMDDTHHMMSSZ form.
    """
    if not AMZ_DATE_PATTERN.fullmatch(value):
        raise ValueError(f"time data {value!r} is not in YYYYMMDDTHHMMSSZ form")
    return datetime.strptime(value, AMZ_DATE_FORMAT).replace(tzinfo=timezone.utc)
