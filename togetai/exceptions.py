"""Error types raised while handling submissions and admin queries."""

from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class SubmissionError(Exception):
    """Base error carrying the message and status returned to the client."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SubmissionError):
    """A required field is missing or malformed. Nothing was written."""
    status_code = HTTP_400_BAD_REQUEST


class ConflictError(SubmissionError):
    """An entry with the same email already exists. Nothing was written."""
    status_code = HTTP_409_CONFLICT


class PersistenceError(SubmissionError):
    """The store failed to write the entry."""
    status_code = HTTP_500_INTERNAL_SERVER_ERROR


class EntryNotFoundError(SubmissionError):
    """No entry matches the requested id."""
    status_code = HTTP_404_NOT_FOUND


class DuplicateEmailError(Exception):
    """Raised by a record store when the email is already stored."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Entry with email {email} already exists")
        self.email = email


class NotificationError(Exception):
    """Delivery of a confirmation email failed. Logged, never surfaced."""
