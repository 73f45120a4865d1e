"""Error kinds shared by stores, the session cache and the application core."""

from enum import Enum


class ErrorCode(Enum):
    """Stable error codes surfaced to callers."""

    CONFIGURATION = "CONFIGURATION"
    SCHEMA = "SCHEMA"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    VALIDATION = "VALIDATION"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    QUERY = "QUERY"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"


class MemberHubError(Exception):
    """Base error with code and user-safe message."""

    code = ErrorCode.QUERY

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ConfigurationError(MemberHubError):
    """Missing or placeholder backend configuration. Fatal at startup."""

    code = ErrorCode.CONFIGURATION


class SchemaError(MemberHubError):
    """Relations could not be declared or seeded. Fatal at startup."""

    code = ErrorCode.SCHEMA


class NotFoundError(MemberHubError):
    code = ErrorCode.NOT_FOUND


class ConflictError(MemberHubError):
    """Unique or primary key violation."""

    code = ErrorCode.CONFLICT


class ValidationError(MemberHubError):
    """Malformed input rejected before any query is issued."""

    code = ErrorCode.VALIDATION


class BackendUnavailableError(MemberHubError):
    """Network/engine failure or timeout; the caller may retry."""

    code = ErrorCode.BACKEND_UNAVAILABLE


class QueryError(MemberHubError):
    """Malformed statement or unknown relation."""

    code = ErrorCode.QUERY


class NotAuthenticatedError(MemberHubError):
    code = ErrorCode.NOT_AUTHENTICATED

    def __init__(self, message: str = "Login required"):
        super().__init__(message)


class InvalidCredentialsError(MemberHubError):
    code = ErrorCode.INVALID_CREDENTIALS

    def __init__(self, message: str = "Invalid email/mobile or password"):
        super().__init__(message)
