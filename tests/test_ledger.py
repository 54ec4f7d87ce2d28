# tests/test_ledger.py
from datetime import date, timedelta

import pytest

from sarasva.errors import DuplicateRecord, InvalidDate, NotFound, RecordLocked, ValidationError
from sarasva.ledger import can_edit, change_status, mark, resolve_mark_date
from sarasva.models import AttendanceRecord


def test_resolve_mark_date_defaults_to_today():
    assert resolve_mark_date() == date.today().isoformat()


def test_resolve_mark_date_allows_past():
    assert resolve_mark_date("2024-03-01") == "2024-03-01"


def test_resolve_mark_date_rejects_future():
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    with pytest.raises(InvalidDate):
        resolve_mark_date(tomorrow)


def test_resolve_mark_date_rejects_malformed():
    with pytest.raises(InvalidDate):
        resolve_mark_date("01/03/2024")


def test_can_edit():
    assert can_edit(None) is False
    assert can_edit(AttendanceRecord(id=1, subject_id=1, date="2024-03-01", status="absent")) is False


def test_change_status_on_locked_record_fails():
    record = AttendanceRecord(id=1, subject_id=1, date="2024-03-01", status="absent")
    with pytest.raises(RecordLocked) as exc:
        change_status(record, "present")
    assert record.status == "absent"
    assert exc.value.details["id"] == 1


def test_mark_creates_locked_record(stores):
    cs101 = stores.subjects.create("cs101")
    record = mark(stores.attendance, cs101.id, "present", "2024-03-01")
    assert record.locked is True
    assert record.status == "present"
    assert record.date == "2024-03-01"
    assert record.created_at is not None


def test_mark_defaults_to_today(stores):
    subject = stores.subjects.create("Math")
    record = mark(stores.attendance, subject.id, "absent")
    assert record.date == date.today().isoformat()


def test_mark_twice_same_day_fails(stores):
    cs101 = stores.subjects.create("cs101")
    mark(stores.attendance, cs101.id, "present", "2024-03-01")
    with pytest.raises(DuplicateRecord):
        mark(stores.attendance, cs101.id, "absent", "2024-03-01")
    records = stores.attendance.query(subject_id=cs101.id)
    assert len(records) == 1
    assert records[0].status == "present"


def test_mark_future_date_fails(stores):
    subject = stores.subjects.create("Math")
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    with pytest.raises(InvalidDate):
        mark(stores.attendance, subject.id, "present", tomorrow)
    assert stores.attendance.query() == []


def test_mark_invalid_status(stores):
    subject = stores.subjects.create("Math")
    with pytest.raises(ValidationError):
        mark(stores.attendance, subject.id, "late", "2024-03-01")


def test_mark_unknown_subject(stores):
    with pytest.raises(NotFound):
        mark(stores.attendance, 42, "present", "2024-03-01")
