"""Exceptions raised by the clone pipeline.

Every failure is terminal for one invocation; the CLI maps any CloneError
to exit code 1.
"""


class CloneError(Exception):
    """Base class for clone failures."""


class InvalidSessionIdError(CloneError, ValueError):
    """Raised when a session id is not a canonical lowercase UUID."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            f"Invalid session ID format: {session_id!r}. "
            "Expected UUID like: d96c899d-7501-4e81-a31b-e0095bb3b501"
        )


class BaseDirectoryMissingError(CloneError):
    """Raised when the Claude state directory does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Claude directory not found at {path}")


class TranscriptNotFoundError(CloneError):
    """Raised when no transcript exists for a session id.

    Carries the session ids that do exist so callers can suggest one.
    """

    def __init__(self, session_id: str, searched, available: list[str] | None = None):
        self.session_id = session_id
        self.searched = searched
        self.available = available or []
        super().__init__(f"Could not find conversation file for session: {session_id}")


class TranscriptIOError(CloneError):
    """Raised when the source cannot be read or the target cannot be written."""

    def __init__(self, message: str, path=None):
        self.path = path
        super().__init__(message)


class IdentifierExhaustedError(CloneError):
    """Raised when the fresh identifier source cannot produce a usable value."""
