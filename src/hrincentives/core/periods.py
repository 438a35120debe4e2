"""Period addressing shared by scoring, ranking and award resolution."""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Iterator

import pendulum

from ..errors import ValidationError

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_RANGE_SEPARATOR = ".."


@dataclass(frozen=True, slots=True)
class Period:
    """Closed date range identified by ``key``.

    Monthly periods use ``YYYY-MM`` keys; explicit ranges use
    ``YYYY-MM-DD..YYYY-MM-DD``.
    """

    key: str
    start: dt.date
    end: dt.date

    @classmethod
    def month(cls, year: int, month: int) -> "Period":
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid month: {month}")
        first = pendulum.date(year, month, 1)
        last = first.end_of("month")
        return cls(key=f"{year:04d}-{month:02d}", start=_plain(first), end=_plain(last))

    @classmethod
    def between(cls, start: dt.date, end: dt.date) -> "Period":
        if end < start:
            raise ValidationError(f"Period end {end} is before start {start}")
        return cls(
            key=f"{start.isoformat()}{_RANGE_SEPARATOR}{end.isoformat()}",
            start=start,
            end=end,
        )

    @property
    def is_month(self) -> bool:
        return _MONTH_RE.match(self.key) is not None

    def contains(self, day: dt.date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[dt.date]:
        current = self.start
        while current <= self.end:
            yield current
            current += dt.timedelta(days=1)

    def previous(self) -> "Period":
        """Immediately preceding period of the same shape."""
        if self.is_month:
            prior = pendulum.date(self.start.year, self.start.month, 1).subtract(months=1)
            return Period.month(prior.year, prior.month)
        length = (self.end - self.start).days
        end = self.start - dt.timedelta(days=1)
        return Period.between(end - dt.timedelta(days=length), end)

    def __str__(self) -> str:
        return self.key


def parse_period(value: str | Period) -> Period:
    """Parse ``YYYY-MM`` or ``YYYY-MM-DD..YYYY-MM-DD``."""
    if isinstance(value, Period):
        return value
    text = str(value).strip()
    match = _MONTH_RE.match(text)
    if match:
        return Period.month(int(match.group(1)), int(match.group(2)))
    if _RANGE_SEPARATOR in text:
        start_text, _, end_text = text.partition(_RANGE_SEPARATOR)
        return Period.between(parse_date(start_text), parse_date(end_text))
    raise ValidationError(f"Unrecognized period: {value!r}")


def parse_date(value: str | dt.date) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        parsed = pendulum.parse(str(value).strip(), exact=True)
    except (ValueError, pendulum.parsing.exceptions.ParserError) as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc
    if isinstance(parsed, dt.datetime):
        return _plain(parsed.date())
    if isinstance(parsed, dt.date):
        return _plain(parsed)
    raise ValidationError(f"Invalid date: {value!r}")


def _plain(value: dt.date) -> dt.date:
    return dt.date(value.year, value.month, value.day)
