from sqlalchemy.exc import IntegrityError
import structlog

logger = structlog.get_logger()

# Ordered: first matching substring wins
DATABASE_ERROR_HINTS = [
    ("row-level security",
     "Row-level security is blocking this write. Check the table policies for this role."),
    ("permission denied",
     "You do not have permission to perform this action. Please check your account settings."),
    ("invalid input syntax",
     "Invalid data format provided. Please check your input."),
    ("does not exist",
     "Database table not found. Please contact support."),
    ("no such table",
     "Database table not found. Please contact support."),
    ("duplicate key value",
     "This record already exists."),
    ("unique constraint",
     "This record already exists."),
]


def friendly_error_message(error: Exception) -> str:
    """
    Translate a database/storage error into a human-readable hint.

    Falls back to the original message when no known pattern matches.
    """
    message = str(error) or "An error occurred. Please try again."
    lowered = message.lower()
    for pattern, hint in DATABASE_ERROR_HINTS:
        if pattern in lowered:
            logger.debug("Matched database error hint", pattern=pattern)
            return hint
    return message


def status_for_error(error: Exception) -> int:
    if isinstance(error, IntegrityError):
        return 409
    return 500
