"""Data classes for the academic tracking domain model."""
from dataclasses import dataclass, field
from typing import Optional

PRESENT = "present"
ABSENT = "absent"
CANCELLED = "cancelled"
EXTRA = "extra"
STATUSES = (PRESENT, ABSENT, CANCELLED, EXTRA)

SAFE = "safe"
RISK = "risk"


@dataclass
class Subject:
    id: int
    name: str
    archived: bool = False


@dataclass
class Slot:
    id: int
    day: str
    subject_id: int
    start_time: str
    end_time: str


@dataclass
class Timetable:
    id: int
    name: str
    active: bool = False
    archived: bool = False
    slots: list[Slot] = field(default_factory=list)

    @property
    def state(self) -> str:
        if self.archived:
            return "archived"
        return "active" if self.active else "draft"


@dataclass
class AttendanceRecord:
    id: int
    subject_id: int
    date: str
    status: str
    locked: bool = True
    created_at: Optional[str] = None


@dataclass
class Chapter:
    id: int
    name: str
    theory_progress: float = 0
    practice_progress: float = 0
    weightage: float = 1


@dataclass
class ExamSubject:
    subject_id: int
    chapters: list[Chapter] = field(default_factory=list)
    due_date: Optional[str] = None


@dataclass
class Exam:
    id: int
    name: str
    archived: bool = False
    exam_date: Optional[str] = None
    subjects: list[ExamSubject] = field(default_factory=list)
