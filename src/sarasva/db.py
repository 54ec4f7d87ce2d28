"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

from sarasva.config import DEFAULT_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS subjects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    archived INTEGER DEFAULT 0,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_subjects_user ON subjects(user_id, archived);

CREATE TABLE IF NOT EXISTS timetables (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    active INTEGER DEFAULT 0,
    archived INTEGER DEFAULT 0,
    created_at TEXT,
    CHECK (NOT (active = 1 AND archived = 1))
);

CREATE INDEX IF NOT EXISTS idx_timetables_user ON timetables(user_id, active);

CREATE TABLE IF NOT EXISTS slots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timetable_id INTEGER NOT NULL REFERENCES timetables(id) ON DELETE CASCADE,
    day TEXT NOT NULL,
    subject_id INTEGER NOT NULL REFERENCES subjects(id),
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    CHECK (start_time < end_time)
);

CREATE TABLE IF NOT EXISTS attendance (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    subject_id INTEGER NOT NULL REFERENCES subjects(id),
    date TEXT NOT NULL,
    status TEXT NOT NULL CHECK (status IN ('present', 'absent', 'cancelled', 'extra')),
    locked INTEGER NOT NULL DEFAULT 1,
    created_at TEXT,
    UNIQUE(user_id, subject_id, date)
);

CREATE INDEX IF NOT EXISTS idx_attendance_user_date ON attendance(user_id, date);

CREATE TRIGGER IF NOT EXISTS attendance_locked
BEFORE UPDATE OF status ON attendance
BEGIN
    SELECT RAISE(ABORT, 'attendance record is locked');
END;

CREATE TABLE IF NOT EXISTS exams (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    exam_date TEXT,
    archived INTEGER DEFAULT 0,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS exam_subjects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    exam_id INTEGER NOT NULL REFERENCES exams(id) ON DELETE CASCADE,
    subject_id INTEGER NOT NULL REFERENCES subjects(id),
    due_date TEXT,
    UNIQUE(exam_id, subject_id)
);

CREATE TABLE IF NOT EXISTS chapters (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    exam_subject_id INTEGER NOT NULL REFERENCES exam_subjects(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    theory_progress REAL NOT NULL DEFAULT 0 CHECK (theory_progress BETWEEN 0 AND 100),
    practice_progress REAL NOT NULL DEFAULT 0 CHECK (practice_progress BETWEEN 0 AND 100),
    weightage REAL NOT NULL DEFAULT 1 CHECK (weightage >= 0)
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT,
    UNIQUE(user_id, key)
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
