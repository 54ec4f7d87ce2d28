"""Field validation shared by the stores and the engine."""
import math

from sarasva.dates import DAYS, parse_time
from sarasva.errors import ValidationError
from sarasva.models import STATUSES


def require_name(value, field: str = "name") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


def validate_status(status: str) -> str:
    if status not in STATUSES:
        raise ValidationError(
            f"status must be one of {', '.join(STATUSES)}", field="status", value=status,
        )
    return status


def validate_day(day: str) -> str:
    if day not in DAYS:
        raise ValidationError(f"day must be one of {', '.join(DAYS)}", field="day", value=day)
    return day


def validate_slot_times(start_time: str, end_time: str) -> None:
    """Both times must be HH:mm and the slot must have positive duration."""
    if parse_time(start_time) >= parse_time(end_time):
        raise ValidationError(
            f"startTime {start_time} must be before endTime {end_time}",
            field="endTime", start_time=start_time, end_time=end_time,
        )


def validate_progress(value, field: str) -> float:
    if not _is_number(value) or not 0 <= value <= 100:
        raise ValidationError(f"{field} must be between 0 and 100", field=field, value=value)
    return value


def validate_weightage(value) -> float:
    if not _is_number(value) or value < 0:
        raise ValidationError("weightage must be a number >= 0", field="weightage", value=value)
    return value


def _is_number(value) -> bool:
    """Finite int or float; bools, NaN and infinities are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
