from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ForbiddenError(AppError):
    pass


class ValidationError(AppError):
    """The message cannot be created as requested; nothing was sent."""


class ResolutionError(AppError):
    """One or more relationship sources could not be loaded."""


class GatewayError(AppError):
    """A read through the HTTP gateway failed."""


class TransportError(AppError):
    """The realtime channel is not connected; callers fall back to HTTP."""


class DeliveryError(AppError):
    """The synchronous create-message call failed. Not retried."""
