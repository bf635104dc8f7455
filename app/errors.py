"""Typed outcomes raised by the RSVP core.

Each error carries the HTTP status and the message that is safe to show a
guest. The HTTP layer renders them through a single exception handler; the
core never builds responses itself.
"""

from fastapi import status


class RSVPError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Something went wrong. Please try again later."

    def __init__(self, message: str | None = None):
        self.message = message or self.public_message
        super().__init__(self.message)


class ConfigError(RSVPError):
    public_message = "Server is misconfigured."


class InvalidCredential(RSVPError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Invalid invitation. Please check and try again."


class SessionExpired(RSVPError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Please enter your invitation to continue."


class RateLimitExceeded(RSVPError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    public_message = "Too many attempts. Please try again later."

    def __init__(self, retry_after: int, message: str | None = None):
        self.retry_after = retry_after
        super().__init__(message)


class Unauthorized(RSVPError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Guest not found."


class CapacityExceeded(RSVPError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Maximum number of guests reached."


class InvalidSubmission(RSVPError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid form data."


class InternalError(RSVPError):
    pass
