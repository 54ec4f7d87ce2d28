"""Attendance ledger: write-once, locked attendance records."""
from typing import Optional

from sarasva.dates import is_future, parse_date, today
from sarasva.errors import InvalidDate, RecordLocked
from sarasva.models import AttendanceRecord
from sarasva.validators import validate_status


def resolve_mark_date(date: Optional[str] = None) -> str:
    """Default to today; reject malformed or future dates."""
    if date is None:
        return today()
    parse_date(date)
    if is_future(date):
        raise InvalidDate(f"Cannot mark attendance for a future date: {date}", date=date)
    return date


def can_edit(record: Optional[AttendanceRecord]) -> bool:
    if record is None:
        return False
    return record.locked is not True


def change_status(record: AttendanceRecord, status: str) -> AttendanceRecord:
    """Attendance is an audit trail: every stored record is locked."""
    if not can_edit(record):
        raise RecordLocked(
            "Attendance records are locked and cannot be edited",
            entity="attendance", id=record.id, subject_id=record.subject_id, date=record.date,
        )
    record.status = validate_status(status)
    return record


def mark(attendance, subject_id: int, status: str, date: Optional[str] = None) -> AttendanceRecord:
    """Record attendance for ``subject_id`` on ``date`` (default today).

    ``attendance`` is an attendance store; its ``insert_if_absent`` checks and
    inserts atomically and raises DuplicateRecord for a second mark on the
    same day.
    """
    validate_status(status)
    date = resolve_mark_date(date)
    return attendance.insert_if_absent(subject_id, date, status)
