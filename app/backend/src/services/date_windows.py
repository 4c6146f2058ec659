"""Calendar windows derived from a reference timestamp."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from app.backend.src.core.config import get_settings
from app.backend.src.core.exceptions import InvalidTimeReference


@dataclass(frozen=True)
class DateWindow:
    """Half-open interval ``[start, end)``."""

    start: datetime
    end: datetime

    def __contains__(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def normalize_reference(now: object, timezone_name: str) -> datetime:
    """Validate ``now`` and express it as a naive business-local datetime.

    Stored timestamps are naive local times of the business, so aware
    references are converted into ``timezone_name`` before dropping tzinfo.
    """

    if not isinstance(now, datetime):
        raise InvalidTimeReference(
            f"Reference time must be a datetime, got {type(now).__name__}."
        )
    if now.tzinfo is None:
        return now
    return now.astimezone(ZoneInfo(timezone_name)).replace(tzinfo=None)


def business_now(*, timezone_name: str | None = None) -> datetime:
    """Current wall-clock time in the business timezone, as a naive datetime."""

    if timezone_name is None:
        timezone_name = get_settings().business_timezone
    return datetime.now(ZoneInfo(timezone_name)).replace(tzinfo=None)


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def start_of_year(now: datetime) -> datetime:
    return start_of_month(now).replace(month=1)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` by whole calendar months, clamping the day of month."""

    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def month_to_date(now: datetime) -> DateWindow:
    return DateWindow(start_of_month(now), now)


def previous_month(now: datetime) -> DateWindow:
    this_month = start_of_month(now)
    return DateWindow(shift_months(this_month, -1), this_month)


def year_to_date(now: datetime) -> DateWindow:
    return DateWindow(start_of_year(now), now)


__all__ = [
    "DateWindow",
    "business_now",
    "month_to_date",
    "normalize_reference",
    "previous_month",
    "shift_months",
    "start_of_month",
    "start_of_year",
    "year_to_date",
]
