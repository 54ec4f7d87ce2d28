"""Timetable activation rules.

A timetable is a draft (inactive), active, or archived. Archived is terminal.
At most one non-archived timetable per user is active. These functions work
on in-memory lists and return new objects; ``stores.TimetableStore`` applies
the same transitions to the database in a single transaction.
"""
from dataclasses import replace
from typing import Optional

from sarasva.errors import InvalidState, NotFound
from sarasva.models import Timetable


def find_active(timetables: list[Timetable]) -> Optional[Timetable]:
    for tt in timetables:
        if tt.active and not tt.archived:
            return tt
    return None


def _find(timetables: list[Timetable], timetable_id: int) -> Timetable:
    for tt in timetables:
        if tt.id == timetable_id:
            return tt
    raise NotFound(f"Timetable {timetable_id} not found", entity="timetable", id=timetable_id)


def can_activate(timetable: Timetable) -> bool:
    return not timetable.archived


def can_archive(timetable: Timetable) -> bool:
    return not timetable.archived


def check_activate(timetable: Timetable) -> None:
    if not can_activate(timetable):
        raise InvalidState(
            "Cannot activate an archived timetable",
            entity="timetable", id=timetable.id, state=timetable.state,
        )


def check_archive(timetable: Timetable) -> None:
    if not can_archive(timetable):
        raise InvalidState(
            "Timetable is already archived",
            entity="timetable", id=timetable.id, state=timetable.state,
        )


def activate(timetables: list[Timetable], timetable_id: int) -> list[Timetable]:
    """Make ``timetable_id`` the only active timetable."""
    check_activate(_find(timetables, timetable_id))
    return [replace(tt, active=tt.id == timetable_id) for tt in timetables]


def archive(timetables: list[Timetable], timetable_id: int) -> list[Timetable]:
    """Archive ``timetable_id``; an archived timetable is never active."""
    check_archive(_find(timetables, timetable_id))
    return [
        replace(tt, archived=True, active=False) if tt.id == timetable_id else tt
        for tt in timetables
    ]
