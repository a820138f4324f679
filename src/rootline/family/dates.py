"""Normalization of free-text historical dates.

People describe dates loosely: "3rd March 1950", "circa 1875", "'50s",
"summer 62". ``normalize`` turns such text into a canonical display string
and a closed day interval whose width reflects the precision of the input,
so two loosely-specified dates can be compared for overlap.

Forms are attempted in a fixed order and the first one that yields a
plausible date wins:

1. ISO-like ``YYYY-MM-DD`` / ``YYYY-MM``
2. day month-name year (``3 March 1950``)
3. month-name day year (``March 3, 1950``)
4. month-name year (``March 1950``)
5. numeric ``D/M/Y`` then ``Y/M/D``
6. bare ``YYYY``
7. ``circa YYYY``
8. decades (``1950s``, ``'50s``)
9. season + year (``Spring 1950``)
10. ``YYYY AD`` / ``YYYY CE``

Anything else is returned with its trimmed text as the display and no range.
"""

from __future__ import annotations

import calendar
import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

MIN_YEAR = 1200
MAX_YEAR = 2100

# Two-digit years up to this many years past the current one are read as 20xx.
TWO_DIGIT_YEAR_LOOKAHEAD = 5

MONTHS: dict[str, int] = {
    "jan": 1,
    "january": 1,
    "feb": 2,
    "february": 2,
    "mar": 3,
    "march": 3,
    "apr": 4,
    "april": 4,
    "may": 5,
    "jun": 6,
    "june": 6,
    "jul": 7,
    "july": 7,
    "aug": 8,
    "august": 8,
    "sep": 9,
    "sept": 9,
    "september": 9,
    "oct": 10,
    "october": 10,
    "nov": 11,
    "november": 11,
    "dec": 12,
    "december": 12,
}

# Season name -> first month; every season spans three months.
SEASONS: dict[str, int] = {
    "spring": 3,
    "summer": 6,
    "autumn": 9,
    "fall": 9,
    "winter": 12,
}

_CIRCA_WORDS = {"c", "ca", "circa"}
_ERA_WORDS = {"ad", "ce"}

_ISO = re.compile(r"^(\d{4})-(\d{1,2})(?:-(\d{1,2}))?$")
_DAY_MONTH_YEAR = re.compile(
    r"^(\d{1,2})(?:st|nd|rd|th)?[\s/-]+([a-z]+)[\s/-]+(\d{2,4})$", re.IGNORECASE
)
_MONTH_DAY_YEAR = re.compile(
    r"^([a-z]+)[\s/-]+(\d{1,2})(?:st|nd|rd|th)?[\s/-]+(\d{2,4})$", re.IGNORECASE
)
_MONTH_YEAR = re.compile(r"^([a-z]+)[\s/-]+(\d{2,4})$", re.IGNORECASE)
_NUMERIC_DMY = re.compile(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{2,4})$")
_NUMERIC_YMD = re.compile(r"^(\d{4})[/.-](\d{1,2})[/.-](\d{1,2})$")
_YEAR = re.compile(r"^(\d{4})$")
_CIRCA = re.compile(r"^(?:c|ca|circa)\.?\s*(\d{2,4})s?$", re.IGNORECASE)
_DECADE = re.compile(r"^(\d{4})s$", re.IGNORECASE)
_SHORT_DECADE = re.compile(r"^['’]?(\d{2})s$", re.IGNORECASE)
_SEASON = re.compile(r"^(spring|summer|autumn|fall|winter)[\s-]+(\d{2,4})$", re.IGNORECASE)
_ERA = re.compile(r"^(\d{4})[\s-]*(?:ad|ce)$", re.IGNORECASE)


@dataclass(frozen=True)
class DateRange:
    """Closed interval of calendar days."""

    start: date
    end: date

    def overlaps(self, other: DateRange) -> bool:
        return self.start <= other.end and other.start <= self.end

    def widened(self, years: int) -> DateRange:
        """Extend both ends by whole years, staying inside the calendar."""
        if years <= 0:
            return self
        start_year = max(self.start.year - years, 1)
        end_year = min(self.end.year + years, 9999)
        return DateRange(date(start_year, 1, 1), date(end_year, 12, 31))


@dataclass(frozen=True)
class NormalizedDate:
    """Result of normalizing a date expression.

    ``range`` is None when the text could not be understood; ``display``
    then falls back to the trimmed input.
    """

    display: str
    range: DateRange | None
    original: str

    @property
    def parsed(self) -> bool:
        return self.range is not None

    @property
    def year(self) -> int | None:
        return self.range.start.year if self.range else None


def clamp_year(year: int) -> int | None:
    """Return the year if it lies in the plausible historical window."""
    if MIN_YEAR <= year <= MAX_YEAR:
        return year
    return None


def expand_two_digit_year(value: int, today: date | None = None) -> int | None:
    """Expand a two-digit year to a full year relative to ``today``."""
    current = (today or date.today()).year % 100
    century = 2000 if value <= current + TWO_DIGIT_YEAR_LOOKAHEAD else 1900
    return clamp_year(century + value)


def _parse_year(raw: str, today: date | None) -> int | None:
    if len(raw) == 2:
        return expand_two_digit_year(int(raw), today)
    return clamp_year(int(raw))


def _day_range(year: int, month: int, day: int) -> DateRange | None:
    try:
        value = date(year, month, day)
    except ValueError:
        return None
    return DateRange(value, value)


def _month_range(year: int, month: int) -> DateRange | None:
    if not 1 <= month <= 12:
        return None
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(date(year, month, 1), date(year, month, last_day))


def _year_range(year: int) -> DateRange:
    return DateRange(date(year, 1, 1), date(year, 12, 31))


def _within_window(value: DateRange) -> DateRange:
    """Cut a range that runs past the last plausible year."""
    last = date(MAX_YEAR, 12, 31)
    if value.end <= last:
        return value
    return DateRange(value.start, last)


def _decade_start(year: int) -> int:
    return year - year % 10


def _decade_range(year: int) -> DateRange:
    start = _decade_start(year)
    return DateRange(date(start, 1, 1), date(start + 9, 12, 31))


def _season_range(year: int, first_month: int) -> DateRange:
    end_month = first_month + 2
    end_year = year
    if end_month > 12:
        end_month -= 12
        end_year += 1
    last_day = calendar.monthrange(end_year, end_month)[1]
    return DateRange(date(year, first_month, 1), date(end_year, end_month, last_day))


def _is_date_token(token: str) -> bool:
    lower = token.lower().rstrip(".,")
    return (
        any(ch.isdigit() for ch in lower)
        or lower in MONTHS
        or lower in SEASONS
        or lower in _CIRCA_WORDS
        or lower in _ERA_WORDS
    )


def _candidate_text(trimmed: str) -> str:
    """Pick the date-looking run of tokens out of surrounding prose."""
    picked: list[str] = []
    seen_numeric = False
    for token in trimmed.split():
        if _is_date_token(token):
            picked.append(token)
            if any(ch.isdigit() for ch in token):
                seen_numeric = True
            continue
        if seen_numeric:
            break
    candidate = " ".join(picked) if picked else trimmed
    # Drop commas and trailing periods ("Mar.", "c.") but keep inner ones ("3.4.1950")
    return " ".join(tok.rstrip(".") for tok in candidate.replace(",", " ").split())


def _iso(text: str, today: date | None) -> NormalizedDate | None:
    match = _ISO.match(text)
    if not match:
        return None
    year = clamp_year(int(match.group(1)))
    if year is None:
        return None
    month = int(match.group(2))
    if match.group(3) is None:
        month_range = _month_range(year, month)
        if month_range is None:
            return None
        return NormalizedDate(f"{year:04d}-{month:02d}", month_range, text)
    day_range = _day_range(year, month, int(match.group(3)))
    if day_range is None:
        return None
    return NormalizedDate(day_range.start.isoformat(), day_range, text)


def _full_date(year: int | None, month: int | None, day: int, text: str) -> NormalizedDate | None:
    if year is None or month is None:
        return None
    day_range = _day_range(year, month, day)
    if day_range is None:
        return None
    return NormalizedDate(day_range.start.isoformat(), day_range, text)


def _day_month_year(text: str, today: date | None) -> NormalizedDate | None:
    match = _DAY_MONTH_YEAR.match(text)
    if not match:
        return None
    day, month_name, year = match.groups()
    return _full_date(
        _parse_year(year, today), MONTHS.get(month_name.lower()), int(day), text
    )


def _month_day_year(text: str, today: date | None) -> NormalizedDate | None:
    match = _MONTH_DAY_YEAR.match(text)
    if not match:
        return None
    month_name, day, year = match.groups()
    return _full_date(
        _parse_year(year, today), MONTHS.get(month_name.lower()), int(day), text
    )


def _month_year(text: str, today: date | None) -> NormalizedDate | None:
    match = _MONTH_YEAR.match(text)
    if not match:
        return None
    month = MONTHS.get(match.group(1).lower())
    year = _parse_year(match.group(2), today)
    if month is None or year is None:
        return None
    return NormalizedDate(f"{year:04d}-{month:02d}", _month_range(year, month), text)


def _numeric_dmy(text: str, today: date | None) -> NormalizedDate | None:
    match = _NUMERIC_DMY.match(text)
    if not match:
        return None
    day, month, year = match.groups()
    return _full_date(_parse_year(year, today), int(month), int(day), text)


def _numeric_ymd(text: str, today: date | None) -> NormalizedDate | None:
    match = _NUMERIC_YMD.match(text)
    if not match:
        return None
    year, month, day = match.groups()
    return _full_date(clamp_year(int(year)), int(month), int(day), text)


def _bare_year(text: str, today: date | None) -> NormalizedDate | None:
    match = _YEAR.match(text)
    if not match:
        return None
    year = clamp_year(int(match.group(1)))
    if year is None:
        return None
    return NormalizedDate(str(year), _year_range(year), text)


def _circa(text: str, today: date | None) -> NormalizedDate | None:
    match = _CIRCA.match(text)
    if not match:
        return None
    year = _parse_year(match.group(1), today)
    if year is None:
        return None
    return NormalizedDate(f"circa {year}", _year_range(year), text)


def _decade(text: str, today: date | None) -> NormalizedDate | None:
    year: int | None = None
    if match := _DECADE.match(text):
        year = clamp_year(int(match.group(1)))
    elif match := _SHORT_DECADE.match(text):
        year = expand_two_digit_year(int(match.group(1)), today)
    if year is None:
        return None
    return NormalizedDate(
        f"{_decade_start(year)}s", _within_window(_decade_range(year)), text
    )


def _season(text: str, today: date | None) -> NormalizedDate | None:
    match = _SEASON.match(text)
    if not match:
        return None
    season, year_raw = match.groups()
    year = _parse_year(year_raw, today)
    if year is None:
        return None
    display = f"{season.capitalize()} {year}"
    season_range = _season_range(year, SEASONS[season.lower()])
    return NormalizedDate(display, _within_window(season_range), text)


def _era(text: str, today: date | None) -> NormalizedDate | None:
    match = _ERA.match(text)
    if not match:
        return None
    year = clamp_year(int(match.group(1)))
    if year is None:
        return None
    return NormalizedDate(str(year), _year_range(year), text)


_FORMS: tuple[Callable[[str, date | None], NormalizedDate | None], ...] = (
    _iso,
    _day_month_year,
    _month_day_year,
    _month_year,
    _numeric_dmy,
    _numeric_ymd,
    _bare_year,
    _circa,
    _decade,
    _season,
    _era,
)


def normalize(raw: str | None, *, today: date | None = None) -> NormalizedDate:
    """Normalize a free-text date expression.

    Never raises. Unrecognized input yields ``range=None`` and the trimmed
    text as ``display``.

    Args:
        raw: The user's date text.
        today: Reference date for two-digit year expansion (defaults to today).
    """
    trimmed = "" if raw is None else str(raw).strip()
    if not trimmed:
        return NormalizedDate("", None, "")

    candidate = _candidate_text(trimmed)
    for form in _FORMS:
        result = form(candidate, today)
        if result is not None:
            return NormalizedDate(result.display, result.range, trimmed)

    return NormalizedDate(trimmed, None, trimmed)


def display(raw: str | None) -> str | None:
    """Canonical display string for storage, or None for empty input."""
    value = normalize(raw).display
    return value or None


def sort_key(raw: str | None) -> float:
    """Sort key placing unparseable dates last."""
    result = normalize(raw)
    if result.range is None:
        return math.inf
    return float(result.range.start.toordinal())


def overlaps(a: DateRange | None, b: DateRange | None) -> bool:
    """Whether two ranges intersect; a missing range overlaps everything."""
    if a is None or b is None:
        return True
    return a.overlaps(b)
