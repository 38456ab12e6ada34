"""Typed failures raised by image provider adapters."""
from __future__ import annotations

from typing import Optional


class ImageProviderError(RuntimeError):
    """Base class for adapter failures surfaced to the caller of ``generate``.

    ``status_code`` is the HTTP status the API layer should answer with.
    """

    status_code: int = 502

    def __init__(self, message: str, *, provider: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider


class UnknownProvider(ImageProviderError):
    status_code = 400


class MissingCredential(ImageProviderError):
    status_code = 401


class QueueError(ImageProviderError):
    """The Gradio queue refused the job or did not hand back an event id."""


class QuotaExhausted(ImageProviderError):
    status_code = 429


class MalformedStream(ImageProviderError):
    """The event stream never produced a usable ``complete`` payload."""


class NoImageReturned(ImageProviderError):
    pass


class ApiError(ImageProviderError):
    """Non-successful response from a REST provider, with its raw body."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str,
        provider: Optional[str] = None,
    ) -> None:
        super().__init__(message, provider=provider)
        self.status_code = status_code
        self.body = body


__all__ = [
    "ApiError",
    "ImageProviderError",
    "MalformedStream",
    "MissingCredential",
    "NoImageReturned",
    "QueueError",
    "QuotaExhausted",
    "UnknownProvider",
]
