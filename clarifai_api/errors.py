from __future__ import annotations

from typing import Optional


class ClarifaiError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(ClarifaiError):
    """Request shape rejected before anything is sent."""


class DecodeError(ClarifaiError):
    """Response body does not match the expected schema."""


class TransportError(ClarifaiError):
    """
    Failure talking to the service.

    `status_code` is the HTTP status when a response was received, `None`
    for connection-level failures. `status_msg` is the service's own
    message when the error body carried one.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        status_msg: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.status_msg = status_msg


class AuthenticationError(TransportError):
    """Missing credentials, failed token exchange, or 401 from the service."""


class ThrottledError(TransportError):
    pass


class BadRequestError(TransportError):
    pass


class ServerError(TransportError):
    pass
