"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.

RemoteUnavailable and MalformedLocalData are recovered inside the note
store and never reach the user. The remaining classes signal caller misuse.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class NoActiveNoteError(ApplicationError):
    """Raised when an editor action needs an active note and there is none."""

    def __init__(self, message: str = "Select or create a note first") -> None:
        super().__init__(message, code="NOTE_NO_ACTIVE")


class RemoteUnavailable(ApplicationError):
    """Raised when the notes API cannot be reached or answers unusably."""

    def __init__(self, message: str = "Notes service unavailable") -> None:
        super().__init__(message, code="SYS_EXTERNAL_SERVICE_ERROR")


class RemoteError(RemoteUnavailable):
    """Raised when the notes API answers with a non-success status."""

    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"API error {status}: {body}")


class MalformedLocalData(ApplicationError):
    """Raised when a local slot holds content that cannot be decoded."""

    def __init__(self, message: str = "Malformed local data") -> None:
        super().__init__(message, code="SYS_LOCAL_DATA_ERROR")
