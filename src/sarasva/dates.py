"""Calendar helpers: local dates, weekday names and slot times."""
import re
from datetime import date

from sarasva.errors import InvalidDate, ValidationError

DAYS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^\d{2}:\d{2}$")


def today() -> str:
    """Today's local calendar date as YYYY-MM-DD.

    Uses the machine's local date, never UTC, so a user east of Greenwich
    does not get yesterday's date shortly after midnight.
    """
    return date.today().isoformat()


def parse_date(value: str) -> date:
    """Parse a zero-padded YYYY-MM-DD string, raising InvalidDate otherwise."""
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise InvalidDate(f"Date must be in YYYY-MM-DD format: {value!r}", date=value)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDate(f"Not a calendar date: {value!r}", date=value) from None


def day_of_week(value: str) -> str:
    """Weekday name (Sunday..Saturday) for a YYYY-MM-DD date."""
    # isoweekday: Monday=1 .. Sunday=7
    return DAYS[parse_date(value).isoweekday() % 7]


def is_future(value: str) -> bool:
    return parse_date(value) > date.fromisoformat(today())


def parse_time(value: str) -> int:
    """Minutes since midnight for a 24-hour HH:mm string."""
    if not isinstance(value, str) or not TIME_RE.match(value):
        raise ValidationError(f"Time must be in HH:mm format: {value!r}", field="time", value=value)
    hours, minutes = int(value[:2]), int(value[3:])
    if hours > 23 or minutes > 59:
        raise ValidationError(f"Not a time of day: {value!r}", field="time", value=value)
    return hours * 60 + minutes
