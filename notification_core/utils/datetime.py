"""Helpers for stamping notification records with timezone-aware datetimes."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notification_core.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "UTC"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the timezone configured through ``APP_TIMEZONE``.

    Both IANA names (``Asia/Colombo``) and fixed offsets (``UTC+05:30``) are
    accepted. Unresolvable values fall back to UTC.
    """

    tz_name = (get_settings().app_timezone or "").strip() or _DEFAULT_TIMEZONE
    return _resolve_timezone(tz_name)


def now_in_app_timezone() -> datetime:
    """Return the current time localized to the configured timezone."""

    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Return the current localized time without ``tzinfo`` for storage."""

    return now_in_app_timezone().replace(tzinfo=None)


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the configured timezone, treating naive values as local."""

    if value is None:
        return None

    tz = get_app_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return ``value`` localized to the app timezone but without ``tzinfo``.

    ``DateTime`` columns are declared without timezone support, so aware values
    from the domain layer are normalized before they reach the database.
    """

    localized = ensure_app_timezone(value)
    if localized is None:
        return None
    return localized.replace(tzinfo=None)


def _resolve_timezone(tz_name: str) -> tzinfo:
    match = _OFFSET_PATTERN.match(tz_name)
    if match:
        sign = -1 if match.group("sign") == "-" else 1
        offset = timedelta(
            hours=int(match.group("hours")), minutes=int(match.group("minutes") or 0)
        )
        return timezone(sign * offset)

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc
