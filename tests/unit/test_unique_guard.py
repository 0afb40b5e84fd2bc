"""unique_guard only relabels unique-index violations."""

import pytest
from sqlalchemy.exc import IntegrityError

from grifo.core.exceptions import ValidationError
from grifo.repositories.base import is_unique_violation, unique_guard


class _PgError(Exception):
    sqlstate = "23505"


def _integrity(orig: Exception) -> IntegrityError:
    return IntegrityError("UPDATE users SET name=?", {}, orig)


def test_sqlite_unique_violation_becomes_validation_error():
    with pytest.raises(ValidationError) as info:
        with unique_guard("Email já cadastrado"):
            raise _integrity(Exception("UNIQUE constraint failed: users.company_id, users.email"))

    assert info.value.message == "Email já cadastrado"
    assert info.value.status_code == 400


def test_postgres_sqlstate_is_recognised():
    assert is_unique_violation(_integrity(_PgError("duplicate key value violates unique constraint")))


@pytest.mark.parametrize(
    "message",
    [
        "NOT NULL constraint failed: users.name",
        "FOREIGN KEY constraint failed",
    ],
)
def test_other_integrity_errors_propagate(message):
    with pytest.raises(IntegrityError):
        with unique_guard("Email já cadastrado"):
            raise _integrity(Exception(message))
