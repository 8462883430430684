"""Time interval arithmetic for dasha periods."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, TypeVar

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta


def parse_instant(value: str | datetime | date) -> datetime:
    """Return a timezone-aware instant from an ISO-8601 string or date.

    Naive values are taken to be UTC.
    """

    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, date):
        instant = datetime(value.year, value.month, value.day)
    else:
        try:
            instant = isoparse(str(value).strip())
        except ValueError as exc:
            raise ValueError(f"Invalid ISO-8601 instant: {value!r}") from exc
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def format_instant(instant: datetime) -> str:
    return instant.isoformat()


def format_date(instant: datetime) -> str:
    """Short display form, e.g. ``01/01/2020``."""

    return instant.strftime("%d/%m/%Y")


@dataclass(frozen=True)
class DurationYMD:
    """Calendar duration truncated to whole years, months and days."""

    years: int = 0
    months: int = 0
    days: int = 0

    def to_dict(self) -> dict:
        return {"years": self.years, "months": self.months, "days": self.days}

    @classmethod
    def from_dict(cls, payload: Optional[dict]) -> "DurationYMD":
        if not payload:
            return cls()
        return cls(
            years=int(payload.get("years", 0)),
            months=int(payload.get("months", 0)),
            days=int(payload.get("days", 0)),
        )

    def __str__(self) -> str:
        return f"{self.years}y {self.months}m {self.days}d"


@dataclass(frozen=True)
class TimeInterval:
    """Closed interval ``[start, end]`` between two aware instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Interval start {self.start.isoformat()} is after end {self.end.isoformat()}")

    @classmethod
    def parse(cls, start: str | datetime, end: str | datetime) -> "TimeInterval":
        return cls(parse_instant(start), parse_instant(end))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.end


def contains(interval: TimeInterval, instant: datetime) -> bool:
    """True when ``instant`` lies inside the interval, both ends included."""

    return interval.start <= instant <= interval.end


T = TypeVar("T")


def first_containing(items: Iterable[T], instant: datetime, key=lambda item: item) -> Optional[T]:
    """Return the first item whose interval contains ``instant``.

    On a shared boundary two neighbours both contain the instant; the earlier
    one in sequence order is returned.
    """

    for item in items:
        if contains(key(item), instant):
            return item
    return None


def split(parent: TimeInterval, percents: Sequence[float]) -> List[TimeInterval]:
    """Split ``parent`` into consecutive pieces of ``percent / 100`` of its length.

    The percentages are used as given and are not normalised. The last piece
    always ends on ``parent.end``; boundaries never run past it.
    """

    if not percents:
        raise ValueError("At least one weight is required to split an interval")

    total = parent.duration
    cursor = parent.start
    pieces: List[TimeInterval] = []
    for index, percent in enumerate(percents):
        start = min(cursor, parent.end)
        cursor = cursor + total * (percent / 100.0)
        if index == len(percents) - 1:
            end = parent.end
        else:
            end = min(cursor, parent.end)
        pieces.append(TimeInterval(start, end))
    return pieces


def breakdown(start: datetime, end: datetime) -> DurationYMD:
    """Calendar difference from ``start`` to ``end`` in whole years, months and days."""

    if end < start:
        raise ValueError("breakdown() requires start <= end")
    if start.tzinfo is not None and end.tzinfo is not None:
        end = end.astimezone(start.tzinfo)
    delta = relativedelta(end, start)
    return DurationYMD(years=delta.years, months=delta.months, days=delta.days)
