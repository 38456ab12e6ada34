from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _CompatModel(BaseModel):
    """Base model configured to ignore unknown fields and accept wire aliases."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def _strip_optional(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# -----------------------------------------------------------------------------
# Generation contract shared by every provider
# -----------------------------------------------------------------------------


class GenerateRequest(_CompatModel):
    """Normalised text-to-image request handed to a provider adapter."""

    prompt: str = Field(..., min_length=1, description="Text prompt for generation.")
    width: int = Field(1024, gt=0, description="Requested output width in pixels.")
    height: int = Field(1024, gt=0, description="Requested output height in pixels.")
    steps: Optional[int] = Field(None, gt=0, description="Inference steps; provider default when omitted.")
    seed: Optional[int] = Field(None, description="Fixed seed; randomised when omitted.")
    guidance_scale: Optional[float] = Field(
        None,
        alias="guidanceScale",
        description="Classifier-free guidance; only forwarded when supplied.",
    )
    model: Optional[str] = Field(None, description="Provider-specific model identifier.")
    auth_token: Optional[str] = Field(
        None,
        alias="authToken",
        repr=False,
        description="Bearer token forwarded to the upstream provider.",
    )

    @field_validator("prompt")
    @classmethod
    def _ensure_prompt(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be blank")
        return value

    @field_validator("model", "auth_token", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        return _strip_optional(value) if value is not None else None


class GenerateSuccessResponse(_CompatModel):
    """Provider-independent success result."""

    url: str = Field(..., min_length=1, description="Resolvable location of the generated image.")
    seed: Optional[int] = Field(
        None,
        description="Seed actually used; absent when the provider does not report one.",
    )


# -----------------------------------------------------------------------------
# HTTP API payloads
# -----------------------------------------------------------------------------


class ApiGenerateRequest(GenerateRequest):
    """``POST /api/generate`` body: a generation request plus provider selection."""

    provider: Optional[str] = Field(
        None, description="Provider id; falls back to DEFAULT_PROVIDER when omitted."
    )

    @field_validator("provider", mode="before")
    @classmethod
    def _normalise_provider(cls, value: Any) -> Optional[str]:
        text = _strip_optional(value)
        return text.lower() if text else None

    def to_generate_request(self, auth_token: Optional[str] = None) -> GenerateRequest:
        payload = self.model_dump(exclude={"provider"})
        if not payload.get("auth_token") and auth_token:
            payload["auth_token"] = auth_token
        return GenerateRequest(**payload)


class ProviderInfo(_CompatModel):
    id: str
    name: str
    models: List[str] = Field(default_factory=list)


class ProviderCollection(_CompatModel):
    providers: List[ProviderInfo] = Field(default_factory=list)


class ErrorResponse(_CompatModel):
    error: str
    message: str
    provider: Optional[str] = None


__all__ = [
    "ApiGenerateRequest",
    "ErrorResponse",
    "GenerateRequest",
    "GenerateSuccessResponse",
    "ProviderCollection",
    "ProviderInfo",
]
