"""Date, time and duration grammars - no I/O dependencies.

Accepted date-times:

    June 5, 2024            (date alone; time-of-day defaults per field)
    June 5 2024 5pm         (date then time)
    5:30am jun 5, 2024      (time then date)
    Sept 12, 2024 1700      (military time)
"""

from collections.abc import Callable
from datetime import date, datetime, time
from typing import TypeVar

from .scanner import Scanner

T = TypeVar("T")

START_OF_DAY = time(0, 0)
END_OF_DAY = time(23, 59)

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR

DURATION_UNITS = {
    "seconds": 1, "second": 1, "secs": 1, "sec": 1, "s": 1,
    "minutes": SECONDS_PER_MINUTE, "minute": SECONDS_PER_MINUTE,
    "mins": SECONDS_PER_MINUTE, "min": SECONDS_PER_MINUTE, "m": SECONDS_PER_MINUTE,
    "hours": SECONDS_PER_HOUR, "hour": SECONDS_PER_HOUR,
    "hrs": SECONDS_PER_HOUR, "hr": SECONDS_PER_HOUR, "h": SECONDS_PER_HOUR,
    "days": SECONDS_PER_DAY, "day": SECONDS_PER_DAY, "d": SECONDS_PER_DAY,
}


# ============== Dates ==============


def parse_month(s: Scanner) -> int | None:
    word = s.one_of(MONTHS)
    return MONTHS[word.lower()] if word else None


def parse_day(s: Scanner) -> int | None:
    start = s.pos
    day = s.up_to_two_digits()
    if day is None or not 1 <= day <= 31:
        s.pos = start
        return None
    return day


def parse_year(s: Scanner) -> int | None:
    start = s.pos
    year = s.decimal()
    if not year:
        s.pos = start
        return None
    return year


def _date_separator(s: Scanner) -> bool:
    """Either optional spaces around a comma, or at least one space."""
    start = s.pos
    s.space_or_tab()
    if s.literal(","):
        s.space_or_tab()
        return True
    s.pos = start
    return s.space_or_tab1()


def parse_date(s: Scanner) -> date | None:
    """<month-name> <day>[,] <year>"""
    start = s.pos
    month = parse_month(s)
    if month is not None and s.space_or_tab1():
        day = parse_day(s)
        if day is not None and _date_separator(s):
            year = parse_year(s)
            if year is not None:
                try:
                    return date(year, month, day)
                except ValueError:
                    pass
    s.pos = start
    return None


# ============== Times ==============


def _twelve_hour(s: Scanner) -> int | None:
    start = s.pos
    hour = s.up_to_two_digits()
    if hour is None or not 1 <= hour <= 12:
        s.pos = start
        return None
    return hour


def _twenty_four_hour(s: Scanner) -> int | None:
    start = s.pos
    hour = s.up_to_two_digits()
    if hour is None or not 0 <= hour <= 23:
        s.pos = start
        return None
    return hour


def _minute(s: Scanner) -> int | None:
    start = s.pos
    minute = s.digits(2)
    if minute is None or not 0 <= minute <= 59:
        s.pos = start
        return None
    return minute


def _meridiem(s: Scanner, hour: int) -> int | None:
    """Convert a 12-hour clock hour to 24-hour using a trailing am/pm."""
    word = s.one_of(("am", "pm"))
    if word is None:
        return None
    if word.lower() == "am":
        return 0 if hour == 12 else hour
    return hour if hour == 12 else hour + 12


def _simple_time(s: Scanner) -> time | None:
    # 5pm, 11 am
    start = s.pos
    hour = _twelve_hour(s)
    if hour is not None:
        s.space_or_tab()
        hour = _meridiem(s, hour)
        if hour is not None:
            return time(hour, 0)
    s.pos = start
    return None


def _twelve_hour_clock(s: Scanner) -> time | None:
    # 5:30pm
    start = s.pos
    hour = _twelve_hour(s)
    if hour is not None and s.literal(":"):
        minute = _minute(s)
        if minute is not None:
            s.space_or_tab()
            hour = _meridiem(s, hour)
            if hour is not None:
                return time(hour, minute)
    s.pos = start
    return None


def _twenty_four_hour_clock(s: Scanner) -> time | None:
    # 17:00
    start = s.pos
    hour = _twenty_four_hour(s)
    if hour is not None and s.literal(":"):
        minute = _minute(s)
        if minute is not None:
            return time(hour, minute)
    s.pos = start
    return None


def _military_time(s: Scanner) -> time | None:
    # 1700 or 930; four digits take precedence over three
    start = s.pos
    value = s.digits(4)
    if value is None:
        value = s.digits(3)
    if value is None:
        return None
    hour, minute = divmod(value, 100)
    if hour > 23 or minute > 59:
        s.pos = start
        return None
    return time(hour, minute)


def parse_time(s: Scanner) -> time | None:
    for alternative in (_simple_time, _twelve_hour_clock, _twenty_four_hour_clock, _military_time):
        parsed = alternative(s)
        if parsed is not None:
            return parsed
    return None


# ============== Date-times ==============


def parse_datetime(s: Scanner, end_of_day: bool = False) -> datetime | None:
    """
    Parse `<time> <date>`, `<date> <time>` or `<date>`.

    A bare date gets 23:59 when `end_of_day` is set (due dates), 00:00 otherwise.
    """
    start = s.pos

    parsed_time = parse_time(s)
    if parsed_time is not None and s.space_or_tab1():
        parsed_date = parse_date(s)
        if parsed_date is not None:
            return datetime.combine(parsed_date, parsed_time)
    s.pos = start

    parsed_date = parse_date(s)
    if parsed_date is None:
        return None

    after_date = s.pos
    if s.space_or_tab1():
        parsed_time = parse_time(s)
        if parsed_time is not None:
            return datetime.combine(parsed_date, parsed_time)
    s.pos = after_date

    return datetime.combine(parsed_date, END_OF_DAY if end_of_day else START_OF_DAY)


# ============== Durations ==============


def _duration_term(s: Scanner) -> int | None:
    start = s.pos
    amount = s.decimal()
    if amount is not None:
        s.space_or_tab()
        unit = s.one_of(DURATION_UNITS)
        if unit is not None:
            return amount * DURATION_UNITS[unit.lower()]
    s.pos = start
    return None


def parse_duration(s: Scanner) -> int | None:
    """
    Sum of one or more `<integer><unit>` terms, optionally joined by `and`.

    "1 hour and 30 minutes" -> 5400, "2h 15m" -> 8100.
    """
    total = _duration_term(s)
    if total is None:
        return None

    while True:
        mark = s.pos
        s.space_or_tab()
        if s.literal("and"):
            s.space_or_tab()
        term = _duration_term(s)
        if term is None:
            s.pos = mark
            return total
        total += term


# ============== Whole-string helpers ==============


def parse_whole(parser: Callable[..., T | None], text: str, *args) -> T | None:
    """Run `parser` over all of `text` (surrounding whitespace ignored)."""
    s = Scanner(text.strip())
    value = parser(s, *args)
    if value is None or not s.at_end:
        return None
    return value


# ============== Formatting ==============


def format_datetime(dt: datetime) -> str:
    """Render a date-time in a form `parse_datetime` accepts, e.g. 'June 5, 2024 5:30pm'."""
    hour = dt.hour % 12 or 12
    meridiem = "am" if dt.hour < 12 else "pm"
    return f"{dt:%B} {dt.day}, {dt.year} {hour}:{dt.minute:02d}{meridiem}"


_FORMAT_UNITS = [
    # (upper bound in seconds, seconds per unit, name)
    (SECONDS_PER_MINUTE, 1, "second"),
    (SECONDS_PER_HOUR, SECONDS_PER_MINUTE, "minute"),
    (SECONDS_PER_DAY, SECONDS_PER_HOUR, "hour"),
    (30 * SECONDS_PER_DAY, SECONDS_PER_DAY, "day"),
    (365 * SECONDS_PER_DAY, 30 * SECONDS_PER_DAY, "month"),
    (None, 365 * SECONDS_PER_DAY, "year"),
]


def format_duration(seconds: int, depth: int = 2) -> str:
    """
    Human-readable duration, at most `depth` units deep.

    5400 -> "1 hour and 30 minutes", 90061 -> "1 day and 1 hour".
    """
    seconds = abs(int(seconds))
    for bound, per_unit, name in _FORMAT_UNITS:
        if bound is None or seconds < bound:
            break
    amount, remainder = divmod(seconds, per_unit)
    unit = name if amount == 1 else f"{name}s"

    if remainder <= 0 or depth <= 1:
        return f"{amount} {unit}"

    rest = format_duration(remainder, depth - 1)
    if remainder < SECONDS_PER_MINUTE or depth <= 2:
        return f"{amount} {unit} and {rest}"
    return f"{amount} {unit} {rest}"
