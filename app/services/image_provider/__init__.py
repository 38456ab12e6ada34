"""Image provider adapters sharing the ``generate(request) -> {url, seed}`` contract."""
from __future__ import annotations

from .base import ImageProvider, resolve_seed
from .errors import (
    ApiError,
    ImageProviderError,
    MalformedStream,
    MissingCredential,
    NoImageReturned,
    QueueError,
    QuotaExhausted,
    UnknownProvider,
)
from .factory import get_provider, list_providers
from .huggingface import HuggingFaceProvider
from .modelscope import ModelScopeProvider

__all__ = [
    "ApiError",
    "HuggingFaceProvider",
    "ImageProvider",
    "ImageProviderError",
    "MalformedStream",
    "MissingCredential",
    "ModelScopeProvider",
    "NoImageReturned",
    "QueueError",
    "QuotaExhausted",
    "UnknownProvider",
    "get_provider",
    "list_providers",
    "resolve_seed",
]
