from enum import Enum


class ErrorKind(Enum):
    """Failure categories surfaced to API callers, with their HTTP status."""

    INVALID_INPUT = 400
    UNAUTHORIZED = 401
    NOT_FOUND = 404
    MATCH_FULL = 409
    STORE_FAILURE = 500

    @property
    def status_code(self) -> int:
        return self.value


class MatchmakingError(Exception):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class StoreError(Exception):
    """Raised by a MatchStore when the backend rejects or fails an operation."""
