"""Error taxonomy and the Result type returned by managers."""

from dataclasses import dataclass
from typing import Any


class AnynoteError(Exception):
    """Base class for all anynote failures."""

    code = "error"


class NotFound(AnynoteError):
    """Raised when a mutation targets a record that does not exist."""

    code = "not_found"


class ValidationError(AnynoteError):
    """Raised when form data or an import document is malformed."""

    code = "validation_error"


class DuplicateUsername(AnynoteError):
    """Raised when a username is already taken."""

    code = "duplicate_username"


class InvalidCredential(AnynoteError):
    """Raised when a login does not match a stored user."""

    code = "invalid_credential"


class InvalidToken(AnynoteError):
    """Raised when no user holds a recovery token."""

    code = "invalid_token"


class NotAuthenticated(AnynoteError):
    """Raised when an operation needs an active session."""

    code = "not_authenticated"


class StorageError(AnynoteError):
    """Raised when the record store cannot read or write a namespace."""

    code = "storage_error"


@dataclass
class Result:
    """Outcome of a manager operation: a success flag plus value or message."""

    ok: bool
    value: Any = None
    error: str | None = None
    code: str | None = None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc: AnynoteError) -> "Result":
        return cls(ok=False, error=str(exc), code=exc.code)

    def __bool__(self) -> bool:
        return self.ok
