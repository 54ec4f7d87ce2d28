"""Attendance statistics, risk zones and recovery prediction."""
import math

from sarasva.models import PRESENT, RISK, SAFE, AttendanceRecord

SAFE_THRESHOLD = 75


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def attendance_percent(present: int, total: int) -> int:
    """round(present / total * 100) with halves rounded up, 0 when total is 0."""
    if total == 0:
        return 0
    # exact integer form of floor(100 * present / total + 0.5)
    return (200 * present + total) // (2 * total)


def get_zone(percent: int) -> str:
    return SAFE if percent >= SAFE_THRESHOLD else RISK


def get_zone_label(percent: int) -> str:
    return get_zone(percent).upper()


def get_zone_color(percent: int) -> str:
    if percent >= 85:
        return "green"
    elif percent >= SAFE_THRESHOLD:
        return "yellow"
    elif percent >= 65:
        return "dark_orange"
    return "red"


def classes_needed_for_75(total: int, present: int) -> int:
    """Consecutive present classes needed before the percentage rounds to 75.

    Simulated one class at a time with the same rounding as
    ``attendance_percent``; a closed form disagrees at rounding boundaries.
    """
    if total == 0:
        return 0
    needed = 0
    while attendance_percent(present, total) < SAFE_THRESHOLD:
        total += 1
        present += 1
        needed += 1
    return needed


def summarize(records: list[AttendanceRecord]) -> dict:
    """Totals, percent, zone and recovery prediction for a set of records.

    Works on any record set: pass one subject's records for a per-subject
    figure or every record for the overall one. Cancelled and extra classes
    count towards the total.
    """
    total = len(records)
    present = sum(1 for r in records if r.status == PRESENT)
    percent = attendance_percent(present, total)
    return {
        "total": total,
        "present": present,
        "percent": percent,
        "zone": get_zone(percent),
        "classes_needed_for_75": classes_needed_for_75(total, present),
    }


def summarize_by_subject(records: list[AttendanceRecord], subject_ids: list[int]) -> dict[int, dict]:
    by_subject = {sid: [] for sid in subject_ids}
    for r in records:
        if r.subject_id in by_subject:
            by_subject[r.subject_id].append(r)
    return {sid: summarize(recs) for sid, recs in by_subject.items()}
