"""
Exception hierarchy for the PurpleAir API client.
"""

from typing import Optional


class PurpleAirError(Exception):
    """Base exception for PurpleAir client errors."""
    pass


class ValidationError(PurpleAirError):
    """Raised locally when a request cannot be built from the given arguments."""
    pass


class ParamValidationError(ValidationError):
    """Raised when a sensor query parameter is invalid."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class ParamNotAllowedError(ParamValidationError):
    """Raised when a parameter is not permitted for the operation."""
    pass


class ParamTypeError(ParamValidationError):
    """Raised when a parameter value has the wrong type for its key."""
    pass


class MissingParamError(ParamValidationError):
    """Raised when a required parameter is not supplied."""
    pass


class AuthError(PurpleAirError):
    """
    Raised when no suitable key is retained or the service rejects a key.

    Key checks attach the KeyType they report (always unknown) as key_type.
    """

    def __init__(self, message: str, key_type=None):
        super().__init__(message)
        self.key_type = key_type


class RemoteError(PurpleAirError):
    """Raised when the service answers with an unexpected status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
        description: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.description = description


class DecodeError(PurpleAirError):
    """Raised when a response body does not have the expected shape."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class TransportError(PurpleAirError):
    """Raised when the HTTP request itself fails (DNS, connection, timeout)."""
    pass


def format_error_message(error: str, description: Optional[str] = None) -> str:
    """
    Combine the error code and description of a service error payload.

    Args:
        error: Error code string from the payload
        description: Optional human-readable description

    Returns:
        "[error]: description" when a description exists, else "error"
    """
    if description:
        return f"[{error}]: {description}"
    return error
