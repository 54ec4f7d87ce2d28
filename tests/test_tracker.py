# tests/test_tracker.py
import pytest

from sarasva.errors import DuplicateRecord, InvalidDate
from sarasva.tracker import (
    attendance_report, attention_report, exam_overview, mark_attendance, today_view,
)

MONDAY = "2024-03-04"
TUESDAY = "2024-03-05"


def test_today_view_without_timetable(stores):
    stores.subjects.create("Math")
    stores.subjects.create("Physics")
    view = today_view(stores, MONDAY)
    assert view["date"] == MONDAY
    assert view["day"] == "Monday"
    assert [s["name"] for s in view["subjects"]] == ["Math", "Physics"]
    assert all(s["already_marked"] is False for s in view["subjects"])


def test_today_view_with_active_timetable(stores):
    stores.subjects.create("Math")
    physics = stores.subjects.create("Physics")
    tt = stores.timetables.create("Sem")
    stores.timetables.add_slot(tt.id, "Monday", physics.id, "09:00", "10:00")
    stores.timetables.activate(tt.id)

    assert [s["name"] for s in today_view(stores, MONDAY)["subjects"]] == ["Physics"]
    assert today_view(stores, TUESDAY)["subjects"] == []


def test_today_view_shows_marked_status(stores):
    math = stores.subjects.create("Math")
    physics = stores.subjects.create("Physics")
    mark_attendance(stores, math.id, "absent", MONDAY)
    view = {s["subject_id"]: s for s in today_view(stores, MONDAY)["subjects"]}
    assert view[math.id]["marked_status"] == "absent"
    assert view[math.id]["already_marked"] is True
    assert view[physics.id]["marked_status"] is None


def test_today_view_rejects_bad_date(stores):
    with pytest.raises(InvalidDate):
        today_view(stores, "2024-13-01")


def test_mark_attendance_twice(stores):
    math = stores.subjects.create("Math")
    mark_attendance(stores, math.id, "present", MONDAY)
    with pytest.raises(DuplicateRecord):
        mark_attendance(stores, math.id, "present", MONDAY)


def test_attendance_report(stores):
    math = stores.subjects.create("Math")
    old = stores.subjects.create("Old")
    for d, status in [("2024-03-01", "present"), ("2024-03-04", "present"),
                      ("2024-03-05", "absent"), ("2024-03-06", "present")]:
        mark_attendance(stores, math.id, status, d)
    mark_attendance(stores, old.id, "absent", "2024-03-01")
    stores.subjects.archive(old.id)

    report = attendance_report(stores)
    assert [s["name"] for s in report["subjects"]] == ["Math"]
    math_summary = report["subjects"][0]
    assert math_summary["total"] == 4
    assert math_summary["percent"] == 75
    assert math_summary["zone"] == "safe"
    assert math_summary["classes_needed_for_75"] == 0
    # archived subject history still counts overall
    assert report["overall"]["total"] == 5
    assert report["overall"]["percent"] == 60
    assert report["overall"]["zone"] == "risk"
    assert report["overall"]["classes_needed_for_75"] == 3


def test_attendance_report_empty(stores):
    report = attendance_report(stores)
    assert report["overall"]["total"] == 0
    assert report["overall"]["classes_needed_for_75"] == 0
    assert report["subjects"] == []


def test_attention_report(stores):
    math = stores.subjects.create("Math")
    exam = stores.exams.create("Finals")
    stores.exams.add_subject(exam.id, math.id)
    stores.exams.add_chapter(exam.id, math.id, "Limits", theory=20, practice=20, weightage=1)
    stores.exams.add_chapter(exam.id, math.id, "Series", theory=90, practice=80, weightage=1)
    stores.exams.add_chapter(exam.id, math.id, "Proofs", theory=0, practice=0, weightage=0)

    entries = attention_report(stores)
    assert len(entries) == 1
    assert entries[0]["chapter_name"] == "Limits"
    assert entries[0]["subject_name"] == "Math"
    assert entries[0]["score"] == 80


def test_attention_report_skips_archived_exams(stores):
    math = stores.subjects.create("Math")
    exam = stores.exams.create("Old")
    stores.exams.add_subject(exam.id, math.id)
    stores.exams.add_chapter(exam.id, math.id, "Limits")
    stores.exams.archive(exam.id)
    assert attention_report(stores) == []


def test_exam_overview(stores):
    math = stores.subjects.create("Math")
    exam = stores.exams.create("Finals", "2024-05-20")
    stores.exams.add_subject(exam.id, math.id)
    stores.exams.add_chapter(exam.id, math.id, "Limits", theory=100, practice=100)
    overview = exam_overview(stores)
    assert overview[0]["progress"] == 100
    assert overview[0]["subjects"][0]["name"] == "Math"
    assert overview[0]["subjects"][0]["all_done"] is True
