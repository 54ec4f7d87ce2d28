import pytest

from sarasva.errors import (
    DuplicateRecord, InvalidDate, InvalidState, NotFound, RecordLocked, SarasvaError,
    ValidationError,
)


@pytest.mark.parametrize("cls,kind", [
    (NotFound, "NotFound"),
    (DuplicateRecord, "DuplicateRecord"),
    (RecordLocked, "RecordLocked"),
    (InvalidState, "InvalidState"),
    (InvalidDate, "InvalidDate"),
    (ValidationError, "ValidationError"),
])
def test_error_kinds(cls, kind):
    err = cls("boom")
    assert isinstance(err, SarasvaError)
    assert err.kind == kind
    assert str(err) == "boom"


def test_to_dict_includes_details():
    err = NotFound("Subject 7 not found", entity="subject", id=7)
    assert err.to_dict() == {
        "error": "NotFound",
        "message": "Subject 7 not found",
        "entity": "subject",
        "id": 7,
    }
