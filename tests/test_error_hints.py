import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from app.services.error_hints import friendly_error_message, status_for_error


@pytest.mark.parametrize("message,hint", [
    ("new row violates row-level security policy for table \"videos\"", "Row-level security"),
    ("permission denied for table profiles", "You do not have permission"),
    ("invalid input syntax for type uuid: \"abc\"", "Invalid data format"),
    ("relation \"videos\" does not exist", "Database table not found"),
    ("no such table: videos", "Database table not found"),
    ("duplicate key value violates unique constraint \"profiles_username_key\"", "This record already exists."),
    ("UNIQUE constraint failed: profiles.username", "This record already exists."),
])
def test_known_database_errors_get_hints(message, hint):
    assert friendly_error_message(Exception(message)).startswith(hint)


def test_unknown_error_keeps_message():
    assert friendly_error_message(ValueError("bucket unreachable")) == "bucket unreachable"


def test_empty_error_gets_generic_message():
    assert friendly_error_message(Exception()) == "An error occurred. Please try again."


def test_integrity_errors_map_to_conflict():
    error = IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed"))

    assert status_for_error(error) == 409
    assert status_for_error(OperationalError("SELECT ...", {}, Exception("no such table"))) == 500
    assert status_for_error(RuntimeError("boom")) == 500
