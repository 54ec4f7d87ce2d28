"""Resolve which subjects are due on a given date."""
from sarasva.dates import day_of_week, parse_time
from sarasva.models import Subject, Timetable
from sarasva.timetables import find_active


def scheduled_subjects(date: str, subjects: list[Subject], timetables: list[Timetable]) -> list[Subject]:
    """Subjects the active timetable schedules on ``date``.

    Slots for the weekday are taken in start-time order (ties keep slot
    order); a subject booked twice appears once, at its earliest slot.
    Archived subjects and slots pointing at unknown subjects are skipped.
    With no active timetable every non-archived subject is due.
    """
    available = {s.id: s for s in subjects if not s.archived}
    active = find_active(timetables)
    if active is None:
        return list(available.values())

    day = day_of_week(date)
    todays_slots = sorted(
        (slot for slot in active.slots if slot.day == day),
        key=lambda slot: parse_time(slot.start_time),
    )
    result = []
    seen = set()
    for slot in todays_slots:
        subject = available.get(slot.subject_id)
        if subject is None or subject.id in seen:
            continue
        seen.add(subject.id)
        result.append(subject)
    return result
