"""Temporal payloads of the document tree.

TOML distinguishes four temporal variants, none of which map one-to-one onto
the standard library:

- LocalDate       — a calendar date with no time and no offset
- LocalTime       — a time of day with nanosecond resolution
- LocalDatetime   — date + time, no offset
- OffsetDatetime  — date + time + fixed UTC offset

The stdlib datetime types only carry microseconds, so the payloads keep the
millisecond/microsecond/nanosecond split and convert on demand.
"""

from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass

_NS_PER_SECOND = 1_000_000_000
_TIME_FIELDS = (
    ("hour", 23),
    ("minute", 59),
    ("second", 59),
    ("millisecond", 999),
    ("microsecond", 999),
    ("nanosecond", 999),
)


@dataclass(frozen=True, slots=True)
class LocalDate:
    """A calendar date (``1979-05-27``)."""

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        if not dt.MINYEAR <= self.year <= dt.MAXYEAR:
            msg = f"year must be in [{dt.MINYEAR}, {dt.MAXYEAR}], got {self.year}"
            raise ValueError(msg)
        if not 1 <= self.month <= 12:
            msg = f"month must be in [1, 12], got {self.month}"
            raise ValueError(msg)
        last = calendar.monthrange(self.year, self.month)[1]
        if not 1 <= self.day <= last:
            msg = f"day must be in [1, {last}] for month {self.month}, got {self.day}"
            raise ValueError(msg)

    def to_date(self) -> dt.date:
        return dt.date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, d: dt.date) -> LocalDate:
        return cls(d.year, d.month, d.day)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True, slots=True)
class LocalTime:
    """A time of day (``07:32:00.999999999``).

    Sub-second precision is split into three fields, each in ``[0, 999]``.
    Leap seconds are not representable.
    """

    hour: int
    minute: int
    second: int = 0
    millisecond: int = 0
    microsecond: int = 0
    nanosecond: int = 0

    def __post_init__(self) -> None:
        for name, upper in _TIME_FIELDS:
            part = getattr(self, name)
            if not 0 <= part <= upper:
                msg = f"{name} must be in [0, {upper}], got {part}"
                raise ValueError(msg)

    @property
    def total_nanoseconds(self) -> int:
        """Nanoseconds elapsed since midnight."""
        seconds = self.hour * 3600 + self.minute * 60 + self.second
        subsecond = (
            self.millisecond * 1_000_000 + self.microsecond * 1_000 + self.nanosecond
        )
        return seconds * _NS_PER_SECOND + subsecond

    def to_time(self, tzinfo: dt.tzinfo | None = None) -> dt.time:
        """Convert to ``datetime.time``, truncating the nanosecond field."""
        return dt.time(
            self.hour,
            self.minute,
            self.second,
            self.millisecond * 1000 + self.microsecond,
            tzinfo=tzinfo,
        )

    @classmethod
    def from_time(cls, t: dt.time) -> LocalTime:
        return cls(
            t.hour,
            t.minute,
            t.second,
            millisecond=t.microsecond // 1000,
            microsecond=t.microsecond % 1000,
        )

    def __str__(self) -> str:
        text = f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        if self.nanosecond:
            return f"{text}.{self.millisecond:03d}{self.microsecond:03d}{self.nanosecond:03d}"
        if self.microsecond:
            return f"{text}.{self.millisecond:03d}{self.microsecond:03d}"
        if self.millisecond:
            return f"{text}.{self.millisecond:03d}"
        return text


@dataclass(frozen=True, slots=True)
class TimeOffset:
    """A fixed UTC offset (``+09:00``, ``-07:30``).

    Both fields carry the sign: ``-07:30`` is ``TimeOffset(-7, -30)``.
    """

    hour: int = 0
    minute: int = 0

    def __post_init__(self) -> None:
        if not -23 <= self.hour <= 23 or not -59 <= self.minute <= 59:
            msg = f"offset must be within ±23:59, got {self.hour}:{self.minute}"
            raise ValueError(msg)
        if self.hour * self.minute < 0:
            msg = f"offset hour and minute must share a sign, got {self.hour}, {self.minute}"
            raise ValueError(msg)

    @property
    def minutes(self) -> int:
        return self.hour * 60 + self.minute

    def to_timezone(self) -> dt.timezone:
        return dt.timezone(dt.timedelta(minutes=self.minutes))

    @classmethod
    def from_utcoffset(cls, offset: dt.timedelta) -> TimeOffset:
        total = int(offset.total_seconds()) // 60
        sign = -1 if total < 0 else 1
        hours, minutes = divmod(abs(total), 60)
        return cls(sign * hours, sign * minutes)

    def __str__(self) -> str:
        if self.minutes == 0:
            return "Z"
        sign = "-" if self.minutes < 0 else "+"
        hours, minutes = divmod(abs(self.minutes), 60)
        return f"{sign}{hours:02d}:{minutes:02d}"


@dataclass(frozen=True, slots=True)
class LocalDatetime:
    """Date and time of day without an offset (``1979-05-27T07:32:00``)."""

    date: LocalDate
    time: LocalTime

    def to_datetime(self) -> dt.datetime:
        """Convert to a naive ``datetime.datetime`` (nanoseconds truncated)."""
        return dt.datetime.combine(self.date.to_date(), self.time.to_time())

    @classmethod
    def from_datetime(cls, value: dt.datetime) -> LocalDatetime:
        return cls(LocalDate.from_date(value.date()), LocalTime.from_time(value.time()))

    def __str__(self) -> str:
        return f"{self.date}T{self.time}"


@dataclass(frozen=True, slots=True)
class OffsetDatetime:
    """Date and time of day at a fixed offset (``1979-05-27T00:32:00-07:00``)."""

    date: LocalDate
    time: LocalTime
    offset: TimeOffset

    def to_datetime(self) -> dt.datetime:
        """Convert to an aware ``datetime.datetime`` (nanoseconds truncated)."""
        return dt.datetime.combine(
            self.date.to_date(), self.time.to_time(self.offset.to_timezone())
        )

    @classmethod
    def from_datetime(cls, value: dt.datetime) -> OffsetDatetime:
        offset = value.utcoffset()
        if offset is None:
            msg = "OffsetDatetime requires an aware datetime"
            raise ValueError(msg)
        return cls(
            LocalDate.from_date(value.date()),
            LocalTime.from_time(value.time()),
            TimeOffset.from_utcoffset(offset),
        )

    def __str__(self) -> str:
        return f"{self.date}T{self.time}{self.offset}"
