"""SQLite-backed subject, timetable, attendance and exam stores.

Each store is bound to one database file and one user id. Nothing here is
module-level state: a session opens its own ``Stores`` handle and passes it
to whatever needs data.
"""
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sarasva.db import get_connection, init_db
from sarasva.dates import parse_date
from sarasva.errors import DuplicateRecord, InvalidState, NotFound, RecordLocked
from sarasva.ledger import change_status
from sarasva.models import AttendanceRecord, Chapter, Exam, ExamSubject, Slot, Subject, Timetable
from sarasva.timetables import check_activate, check_archive
from sarasva.validators import (
    require_name, validate_day, validate_progress, validate_slot_times, validate_status,
    validate_weightage,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now().isoformat()


def _subject(row) -> Subject:
    return Subject(id=row["id"], name=row["name"], archived=bool(row["archived"]))


def _slot(row) -> Slot:
    return Slot(
        id=row["id"], day=row["day"], subject_id=row["subject_id"],
        start_time=row["start_time"], end_time=row["end_time"],
    )


def _record(row) -> AttendanceRecord:
    return AttendanceRecord(
        id=row["id"], subject_id=row["subject_id"], date=row["date"], status=row["status"],
        locked=bool(row["locked"]), created_at=row["created_at"],
    )


def _chapter(row) -> Chapter:
    return Chapter(
        id=row["id"], name=row["name"], theory_progress=row["theory_progress"],
        practice_progress=row["practice_progress"], weightage=row["weightage"],
    )


class _Store:
    def __init__(self, db_path: str, user_id: str):
        self.db_path = db_path
        self.user_id = user_id

    def _require_subject(self, conn, subject_id: int):
        row = conn.execute(
            "SELECT * FROM subjects WHERE id = ? AND user_id = ?", (subject_id, self.user_id)
        ).fetchone()
        if row is None:
            raise NotFound(f"Subject {subject_id} not found", entity="subject", id=subject_id)
        return row


class SubjectStore(_Store):
    def list(self, archived: Optional[bool] = None) -> list[Subject]:
        sql = "SELECT * FROM subjects WHERE user_id = ?"
        params = [self.user_id]
        if archived is not None:
            sql += " AND archived = ?"
            params.append(int(archived))
        conn = get_connection(self.db_path)
        rows = conn.execute(sql + " ORDER BY id", params).fetchall()
        conn.close()
        return [_subject(r) for r in rows]

    def get(self, subject_id: int) -> Subject:
        conn = get_connection(self.db_path)
        try:
            return _subject(self._require_subject(conn, subject_id))
        finally:
            conn.close()

    def create(self, name: str) -> Subject:
        name = require_name(name)
        conn = get_connection(self.db_path)
        cur = conn.execute(
            "INSERT INTO subjects (user_id, name, created_at) VALUES (?, ?, ?)",
            (self.user_id, name, _now()),
        )
        conn.commit()
        conn.close()
        logger.info("Created subject %d (%s)", cur.lastrowid, name)
        return Subject(id=cur.lastrowid, name=name)

    def rename(self, subject_id: int, name: str) -> Subject:
        name = require_name(name)
        conn = get_connection(self.db_path)
        try:
            self._require_subject(conn, subject_id)
            conn.execute("UPDATE subjects SET name = ? WHERE id = ?", (name, subject_id))
            conn.commit()
        finally:
            conn.close()
        return self.get(subject_id)

    def archive(self, subject_id: int) -> Subject:
        """Soft delete. Attendance history for the subject is kept."""
        conn = get_connection(self.db_path)
        try:
            self._require_subject(conn, subject_id)
            conn.execute("UPDATE subjects SET archived = 1 WHERE id = ?", (subject_id,))
            conn.commit()
        finally:
            conn.close()
        logger.info("Archived subject %d", subject_id)
        return self.get(subject_id)


class TimetableStore(_Store):
    def _require_timetable(self, conn, timetable_id: int):
        row = conn.execute(
            "SELECT * FROM timetables WHERE id = ? AND user_id = ?", (timetable_id, self.user_id)
        ).fetchone()
        if row is None:
            raise NotFound(f"Timetable {timetable_id} not found", entity="timetable", id=timetable_id)
        return row

    def _load(self, conn, rows) -> list[Timetable]:
        timetables = []
        for row in rows:
            slots = conn.execute(
                "SELECT * FROM slots WHERE timetable_id = ? ORDER BY id", (row["id"],)
            ).fetchall()
            timetables.append(Timetable(
                id=row["id"], name=row["name"], active=bool(row["active"]),
                archived=bool(row["archived"]), slots=[_slot(s) for s in slots],
            ))
        return timetables

    def list(self, include_archived: bool = True) -> list[Timetable]:
        sql = "SELECT * FROM timetables WHERE user_id = ?"
        if not include_archived:
            sql += " AND archived = 0"
        conn = get_connection(self.db_path)
        timetables = self._load(conn, conn.execute(sql + " ORDER BY id", (self.user_id,)).fetchall())
        conn.close()
        return timetables

    def get(self, timetable_id: int) -> Timetable:
        conn = get_connection(self.db_path)
        try:
            row = self._require_timetable(conn, timetable_id)
            return self._load(conn, [row])[0]
        finally:
            conn.close()

    def active(self) -> Optional[Timetable]:
        conn = get_connection(self.db_path)
        rows = conn.execute(
            "SELECT * FROM timetables WHERE user_id = ? AND active = 1 AND archived = 0",
            (self.user_id,),
        ).fetchall()
        timetables = self._load(conn, rows)
        conn.close()
        return timetables[0] if timetables else None

    def create(self, name: str) -> Timetable:
        name = require_name(name)
        conn = get_connection(self.db_path)
        cur = conn.execute(
            "INSERT INTO timetables (user_id, name, created_at) VALUES (?, ?, ?)",
            (self.user_id, name, _now()),
        )
        conn.commit()
        conn.close()
        logger.info("Created timetable %d (%s)", cur.lastrowid, name)
        return Timetable(id=cur.lastrowid, name=name)

    def rename(self, timetable_id: int, name: str) -> Timetable:
        name = require_name(name)
        conn = get_connection(self.db_path)
        try:
            self._require_timetable(conn, timetable_id)
            conn.execute("UPDATE timetables SET name = ? WHERE id = ?", (name, timetable_id))
            conn.commit()
        finally:
            conn.close()
        return self.get(timetable_id)

    def _locked_state(self, conn, timetable_id: int) -> Timetable:
        row = self._require_timetable(conn, timetable_id)
        return Timetable(
            id=row["id"], name=row["name"], active=bool(row["active"]),
            archived=bool(row["archived"]),
        )

    def activate(self, timetable_id: int) -> Timetable:
        """Activate one timetable and deactivate the rest in one transaction.

        Readers never observe two active timetables, or none, mid-switch.
        """
        conn = get_connection(self.db_path)
        try:
            with conn:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    check_activate(self._locked_state(conn, timetable_id))
                except InvalidState:
                    logger.warning("Refused to activate archived timetable %d", timetable_id)
                    raise
                conn.execute(
                    "UPDATE timetables SET active = CASE WHEN id = ? THEN 1 ELSE 0 END WHERE user_id = ?",
                    (timetable_id, self.user_id),
                )
        finally:
            conn.close()
        logger.info("Activated timetable %d", timetable_id)
        return self.get(timetable_id)

    def archive(self, timetable_id: int) -> Timetable:
        """Archive (terminal) and deactivate in the same statement."""
        conn = get_connection(self.db_path)
        try:
            with conn:
                conn.execute("BEGIN IMMEDIATE")
                check_archive(self._locked_state(conn, timetable_id))
                conn.execute(
                    "UPDATE timetables SET archived = 1, active = 0 WHERE id = ?", (timetable_id,)
                )
        finally:
            conn.close()
        logger.info("Archived timetable %d", timetable_id)
        return self.get(timetable_id)

    def add_slot(self, timetable_id: int, day: str, subject_id: int,
                 start_time: str, end_time: str) -> Slot:
        validate_day(day)
        validate_slot_times(start_time, end_time)
        conn = get_connection(self.db_path)
        try:
            self._require_timetable(conn, timetable_id)
            self._require_subject(conn, subject_id)
            cur = conn.execute(
                """INSERT INTO slots (timetable_id, day, subject_id, start_time, end_time)
                VALUES (?, ?, ?, ?, ?)""",
                (timetable_id, day, subject_id, start_time, end_time),
            )
            conn.commit()
        finally:
            conn.close()
        return Slot(id=cur.lastrowid, day=day, subject_id=subject_id,
                    start_time=start_time, end_time=end_time)

    def remove_slot(self, timetable_id: int, slot_id: int) -> None:
        conn = get_connection(self.db_path)
        try:
            self._require_timetable(conn, timetable_id)
            cur = conn.execute(
                "DELETE FROM slots WHERE id = ? AND timetable_id = ?", (slot_id, timetable_id)
            )
            if cur.rowcount == 0:
                raise NotFound(f"Slot {slot_id} not found", entity="slot", id=slot_id)
            conn.commit()
        finally:
            conn.close()


class AttendanceStore(_Store):
    def insert_if_absent(self, subject_id: int, date: str, status: str) -> AttendanceRecord:
        """Create a locked record; the unique index rejects a second one."""
        validate_status(status)
        parse_date(date)
        created_at = _now()
        conn = get_connection(self.db_path)
        try:
            self._require_subject(conn, subject_id)
            cur = conn.execute(
                """INSERT INTO attendance (user_id, subject_id, date, status, locked, created_at)
                VALUES (?, ?, ?, ?, 1, ?)""",
                (self.user_id, subject_id, date, status, created_at),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            if "UNIQUE" not in str(e):
                raise
            logger.warning("Duplicate attendance mark for subject %d on %s", subject_id, date)
            raise DuplicateRecord(
                "Attendance already marked for this subject on this date",
                entity="attendance", subject_id=subject_id, date=date,
            ) from e
        finally:
            conn.close()
        logger.info("Marked subject %d %s on %s", subject_id, status, date)
        return AttendanceRecord(
            id=cur.lastrowid, subject_id=subject_id, date=date, status=status,
            locked=True, created_at=created_at,
        )

    def get(self, subject_id: int, date: str) -> Optional[AttendanceRecord]:
        conn = get_connection(self.db_path)
        row = conn.execute(
            "SELECT * FROM attendance WHERE user_id = ? AND subject_id = ? AND date = ?",
            (self.user_id, subject_id, date),
        ).fetchone()
        conn.close()
        return _record(row) if row else None

    def query(self, subject_id: Optional[int] = None, date_from: Optional[str] = None,
              date_to: Optional[str] = None) -> list[AttendanceRecord]:
        """Records for this user, newest first, optionally filtered."""
        sql = "SELECT * FROM attendance WHERE user_id = ?"
        params = [self.user_id]
        if subject_id is not None:
            sql += " AND subject_id = ?"
            params.append(subject_id)
        if date_from:
            parse_date(date_from)
            sql += " AND date >= ?"
            params.append(date_from)
        if date_to:
            parse_date(date_to)
            sql += " AND date <= ?"
            params.append(date_to)
        conn = get_connection(self.db_path)
        rows = conn.execute(sql + " ORDER BY date DESC, id DESC", params).fetchall()
        conn.close()
        return [_record(r) for r in rows]

    def update_status(self, record_id: int, status: str) -> AttendanceRecord:
        conn = get_connection(self.db_path)
        row = conn.execute(
            "SELECT * FROM attendance WHERE id = ? AND user_id = ?", (record_id, self.user_id)
        ).fetchone()
        conn.close()
        if row is None:
            raise NotFound(f"Attendance record {record_id} not found", entity="attendance", id=record_id)
        try:
            return change_status(_record(row), status)
        except RecordLocked:
            logger.warning("Refused status change on locked attendance record %d", record_id)
            raise


class ExamStore(_Store):
    def _require_exam(self, conn, exam_id: int):
        row = conn.execute(
            "SELECT * FROM exams WHERE id = ? AND user_id = ?", (exam_id, self.user_id)
        ).fetchone()
        if row is None:
            raise NotFound(f"Exam {exam_id} not found", entity="exam", id=exam_id)
        return row

    def _require_chapter(self, conn, chapter_id: int):
        row = conn.execute(
            """SELECT c.* FROM chapters c
            JOIN exam_subjects es ON c.exam_subject_id = es.id
            JOIN exams e ON es.exam_id = e.id
            WHERE c.id = ? AND e.user_id = ?""",
            (chapter_id, self.user_id),
        ).fetchone()
        if row is None:
            raise NotFound(f"Chapter {chapter_id} not found", entity="chapter", id=chapter_id)
        return row

    def _load(self, conn, rows) -> list[Exam]:
        exams = []
        for row in rows:
            subjects = []
            for es in conn.execute(
                "SELECT * FROM exam_subjects WHERE exam_id = ? ORDER BY id", (row["id"],)
            ).fetchall():
                chapters = conn.execute(
                    "SELECT * FROM chapters WHERE exam_subject_id = ? ORDER BY id", (es["id"],)
                ).fetchall()
                subjects.append(ExamSubject(
                    subject_id=es["subject_id"], due_date=es["due_date"],
                    chapters=[_chapter(c) for c in chapters],
                ))
            exams.append(Exam(
                id=row["id"], name=row["name"], archived=bool(row["archived"]),
                exam_date=row["exam_date"], subjects=subjects,
            ))
        return exams

    def list(self, include_archived: bool = False) -> list[Exam]:
        sql = "SELECT * FROM exams WHERE user_id = ?"
        if not include_archived:
            sql += " AND archived = 0"
        conn = get_connection(self.db_path)
        exams = self._load(conn, conn.execute(sql + " ORDER BY id", (self.user_id,)).fetchall())
        conn.close()
        return exams

    def get(self, exam_id: int) -> Exam:
        conn = get_connection(self.db_path)
        try:
            return self._load(conn, [self._require_exam(conn, exam_id)])[0]
        finally:
            conn.close()

    def create(self, name: str, exam_date: Optional[str] = None) -> Exam:
        name = require_name(name)
        if exam_date is not None:
            parse_date(exam_date)
        conn = get_connection(self.db_path)
        cur = conn.execute(
            "INSERT INTO exams (user_id, name, exam_date, created_at) VALUES (?, ?, ?, ?)",
            (self.user_id, name, exam_date, _now()),
        )
        conn.commit()
        conn.close()
        logger.info("Created exam %d (%s)", cur.lastrowid, name)
        return Exam(id=cur.lastrowid, name=name, exam_date=exam_date)

    def update(self, exam_id: int, name: Optional[str] = None,
               exam_date: Optional[str] = None) -> Exam:
        changes = {}
        if name is not None:
            changes["name"] = require_name(name)
        if exam_date is not None:
            parse_date(exam_date)
            changes["exam_date"] = exam_date
        conn = get_connection(self.db_path)
        try:
            self._require_exam(conn, exam_id)
            if changes:
                assignments = ", ".join(f"{col} = ?" for col in changes)
                conn.execute(
                    f"UPDATE exams SET {assignments} WHERE id = ?", (*changes.values(), exam_id)
                )
                conn.commit()
        finally:
            conn.close()
        return self.get(exam_id)

    def archive(self, exam_id: int) -> Exam:
        conn = get_connection(self.db_path)
        try:
            self._require_exam(conn, exam_id)
            conn.execute("UPDATE exams SET archived = 1 WHERE id = ?", (exam_id,))
            conn.commit()
        finally:
            conn.close()
        logger.info("Archived exam %d", exam_id)
        return self.get(exam_id)

    def add_subject(self, exam_id: int, subject_id: int, due_date: Optional[str] = None) -> Exam:
        """Attach a subject to an exam; attaching it again changes nothing."""
        if due_date is not None:
            parse_date(due_date)
        conn = get_connection(self.db_path)
        try:
            self._require_exam(conn, exam_id)
            self._require_subject(conn, subject_id)
            conn.execute(
                "INSERT OR IGNORE INTO exam_subjects (exam_id, subject_id, due_date) VALUES (?, ?, ?)",
                (exam_id, subject_id, due_date),
            )
            conn.commit()
        finally:
            conn.close()
        return self.get(exam_id)

    def remove_subject(self, exam_id: int, subject_id: int) -> Exam:
        """Detach a subject from an exam. Its chapters go with it."""
        conn = get_connection(self.db_path)
        try:
            self._require_exam(conn, exam_id)
            cur = conn.execute(
                "DELETE FROM exam_subjects WHERE exam_id = ? AND subject_id = ?",
                (exam_id, subject_id),
            )
            if cur.rowcount == 0:
                raise NotFound(
                    f"Subject {subject_id} is not part of exam {exam_id}",
                    entity="exam_subject", id=subject_id, exam_id=exam_id,
                )
            conn.commit()
        finally:
            conn.close()
        logger.info("Removed subject %d from exam %d", subject_id, exam_id)
        return self.get(exam_id)

    def add_chapter(self, exam_id: int, subject_id: int, name: str, theory: float = 0,
                    practice: float = 0, weightage: float = 1) -> Chapter:
        name = require_name(name)
        validate_progress(theory, "theoryProgress")
        validate_progress(practice, "practiceProgress")
        validate_weightage(weightage)
        conn = get_connection(self.db_path)
        try:
            self._require_exam(conn, exam_id)
            es = conn.execute(
                "SELECT id FROM exam_subjects WHERE exam_id = ? AND subject_id = ?",
                (exam_id, subject_id),
            ).fetchone()
            if es is None:
                raise NotFound(
                    f"Subject {subject_id} is not part of exam {exam_id}",
                    entity="exam_subject", id=subject_id, exam_id=exam_id,
                )
            cur = conn.execute(
                """INSERT INTO chapters (exam_subject_id, name, theory_progress, practice_progress, weightage)
                VALUES (?, ?, ?, ?, ?)""",
                (es["id"], name, theory, practice, weightage),
            )
            conn.commit()
        finally:
            conn.close()
        return Chapter(id=cur.lastrowid, name=name, theory_progress=theory,
                       practice_progress=practice, weightage=weightage)

    def update_chapter(self, chapter_id: int, theory: Optional[float] = None,
                       practice: Optional[float] = None, weightage: Optional[float] = None,
                       name: Optional[str] = None) -> Chapter:
        changes = {}
        if name is not None:
            changes["name"] = require_name(name)
        if theory is not None:
            changes["theory_progress"] = validate_progress(theory, "theoryProgress")
        if practice is not None:
            changes["practice_progress"] = validate_progress(practice, "practiceProgress")
        if weightage is not None:
            changes["weightage"] = validate_weightage(weightage)
        conn = get_connection(self.db_path)
        try:
            self._require_chapter(conn, chapter_id)
            if changes:
                assignments = ", ".join(f"{col} = ?" for col in changes)
                conn.execute(
                    f"UPDATE chapters SET {assignments} WHERE id = ?",
                    (*changes.values(), chapter_id),
                )
                conn.commit()
            return _chapter(self._require_chapter(conn, chapter_id))
        finally:
            conn.close()

    def remove_chapter(self, chapter_id: int) -> None:
        conn = get_connection(self.db_path)
        try:
            self._require_chapter(conn, chapter_id)
            conn.execute("DELETE FROM chapters WHERE id = ?", (chapter_id,))
            conn.commit()
        finally:
            conn.close()


@dataclass
class Stores:
    db_path: str
    user_id: str
    subjects: SubjectStore
    timetables: TimetableStore
    attendance: AttendanceStore
    exams: ExamStore


def open_stores(db_path: str, user_id: str) -> Stores:
    """Initialize the database if needed and bind every store to one user."""
    init_db(db_path)
    return Stores(
        db_path=db_path,
        user_id=user_id,
        subjects=SubjectStore(db_path, user_id),
        timetables=TimetableStore(db_path, user_id),
        attendance=AttendanceStore(db_path, user_id),
        exams=ExamStore(db_path, user_id),
    )
