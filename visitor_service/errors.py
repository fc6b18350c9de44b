"""
Error types raised by the job runner.

The HTTP layer maps these onto status codes in app.py; SessionError never
reaches a caller and only ends up in RunState.last_error.
"""


class VisitorError(Exception):
    """Base class for visitor service errors."""


class AuthError(VisitorError):
    """Missing or mismatched shared secret (HTTP 401)."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationError(VisitorError):
    """No target URL could be resolved (HTTP 400)."""

    def __init__(self, message: str = "Missing url"):
        super().__init__(message)


class AlreadyRunningError(VisitorError):
    """A session is already in flight; the trigger is not accepted (HTTP 202)."""

    def __init__(self, message: str = "already running"):
        super().__init__(message)


class SessionError(VisitorError):
    """Browser launch, navigation or the stay wait failed."""
