"""Expected, recoverable error conditions raised by the engine and stores.

Every error carries a ``kind`` naming the broken constraint and a ``details``
dict (entity, id, field...) so a caller can render a specific message or map
the error onto an HTTP status without parsing strings.
"""


class SarasvaError(Exception):
    kind = "Error"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message, **self.details}


class NotFound(SarasvaError):
    """Referenced subject, timetable, slot, exam, chapter or record is absent."""
    kind = "NotFound"


class DuplicateRecord(SarasvaError):
    """Attendance already marked for this subject on this date."""
    kind = "DuplicateRecord"


class RecordLocked(SarasvaError):
    """Attempt to change the status of an existing attendance record."""
    kind = "RecordLocked"


class InvalidState(SarasvaError):
    """Transition not allowed from the entity's current state."""
    kind = "InvalidState"


class InvalidDate(SarasvaError):
    """Malformed date string, or an attendance mark dated in the future."""
    kind = "InvalidDate"


class ValidationError(SarasvaError):
    """Missing field or value out of range."""
    kind = "ValidationError"
