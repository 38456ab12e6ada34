"""Provider registry keyed by provider id."""
from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping

from .base import ImageProvider
from .errors import UnknownProvider
from .huggingface import HuggingFaceProvider
from .modelscope import ModelScopeProvider

_PROVIDERS: Mapping[str, ImageProvider] = MappingProxyType(
    {
        HuggingFaceProvider.id: HuggingFaceProvider(),
        ModelScopeProvider.id: ModelScopeProvider(),
    }
)


def get_provider(provider_id: str) -> ImageProvider:
    """Return the adapter registered under ``provider_id``."""

    provider = _PROVIDERS.get((provider_id or "").strip().lower())
    if provider is None:
        raise UnknownProvider(f"Unknown provider: {provider_id}", provider=provider_id)
    return provider


def list_providers() -> List[ImageProvider]:
    return list(_PROVIDERS.values())
