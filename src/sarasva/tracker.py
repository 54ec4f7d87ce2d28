"""Reports that combine the stores with the scheduling and progress rules."""
from typing import Optional

from sarasva import ledger
from sarasva.analytics import summarize, summarize_by_subject
from sarasva.dates import day_of_week, parse_date, today
from sarasva.exams import ATTENTION_THRESHOLD, exam_progress, needs_attention, subject_progress
from sarasva.models import AttendanceRecord
from sarasva.schedule import scheduled_subjects
from sarasva.stores import Stores


def today_view(stores: Stores, date: Optional[str] = None) -> dict:
    """Subjects due on ``date`` and whether each has been marked yet."""
    date = date or today()
    parse_date(date)
    due = scheduled_subjects(date, stores.subjects.list(archived=False), stores.timetables.list())
    marked = {r.subject_id: r.status for r in stores.attendance.query(date_from=date, date_to=date)}
    return {
        "date": date,
        "day": day_of_week(date),
        "subjects": [
            {
                "subject_id": s.id,
                "name": s.name,
                "marked_status": marked.get(s.id),
                "already_marked": s.id in marked,
            }
            for s in due
        ],
    }


def mark_attendance(stores: Stores, subject_id: int, status: str,
                    date: Optional[str] = None) -> AttendanceRecord:
    return ledger.mark(stores.attendance, subject_id, status, date)


def attendance_report(stores: Stores) -> dict:
    """Per-subject summaries for active subjects plus an overall figure.

    The overall figure covers every record, archived subjects included.
    """
    subjects = stores.subjects.list(archived=False)
    records = stores.attendance.query()
    by_subject = summarize_by_subject(records, [s.id for s in subjects])
    return {
        "overall": summarize(records),
        "subjects": [
            {"subject_id": s.id, "name": s.name, **by_subject[s.id]}
            for s in subjects
        ],
    }


def exam_overview(stores: Stores) -> list[dict]:
    names = {s.id: s.name for s in stores.subjects.list()}
    overview = []
    for exam in stores.exams.list():
        overview.append({
            "exam_id": exam.id,
            "name": exam.name,
            "exam_date": exam.exam_date,
            "progress": exam_progress(exam),
            "subjects": [
                {"subject_id": es.subject_id, "name": names.get(es.subject_id, str(es.subject_id)),
                 "due_date": es.due_date, **subject_progress(es)}
                for es in exam.subjects
            ],
        })
    return overview


def attention_report(stores: Stores, threshold: int = ATTENTION_THRESHOLD) -> list[dict]:
    """Chapters of non-archived exams needing revision, most urgent first."""
    names = {s.id: s.name for s in stores.subjects.list()}
    entries = needs_attention(stores.exams.list(), threshold)
    for entry in entries:
        entry["subject_name"] = names.get(entry["subject_id"], str(entry["subject_id"]))
    return entries
