from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.config import get_settings
from app.schemas import GenerateRequest, GenerateSuccessResponse

from .base import resolve_seed
from .errors import ApiError, MissingCredential, NoImageReturned

log = logging.getLogger("z-image.modelscope")

PROVIDER_ID = "modelscope"
BASE_URL = "https://api-inference.modelscope.cn/v1"
DEFAULT_MODEL = "Tongyi-MAI/Z-Image-Turbo"
DEFAULT_STEPS = 9


class _ModelScopeImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None


class _ModelScopeResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    images: List[_ModelScopeImage] = Field(default_factory=list)


def build_payload(request: GenerateRequest) -> Dict[str, Any]:
    """Shape the ``/images/generations`` body; ``guidance`` only when supplied."""

    payload: Dict[str, Any] = {
        "prompt": request.prompt,
        "model": request.model or DEFAULT_MODEL,
        "size": f"{request.width}x{request.height}",
        "seed": resolve_seed(request.seed),
        "steps": request.steps if request.steps is not None else DEFAULT_STEPS,
    }
    if request.guidance_scale is not None:
        payload["guidance"] = request.guidance_scale
    return payload


def _extract_image_url(data: Any) -> str:
    try:
        parsed = _ModelScopeResponse.model_validate(data)
    except ValidationError as exc:
        raise NoImageReturned("No image returned from ModelScope", provider=PROVIDER_ID) from exc

    url = parsed.images[0].url if parsed.images else None
    if not url:
        raise NoImageReturned("No image returned from ModelScope", provider=PROVIDER_ID)
    return url


class ModelScopeProvider:
    """ModelScope API-Inference adapter (synchronous OpenAI-style endpoint)."""

    id = PROVIDER_ID
    name = "ModelScope"

    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url.rstrip("/")

    @property
    def models(self) -> List[str]:
        return [DEFAULT_MODEL]

    def generate(self, request: GenerateRequest) -> GenerateSuccessResponse:
        token = (request.auth_token or "").strip()
        if not token:
            raise MissingCredential("API Token is required for ModelScope", provider=PROVIDER_ID)

        payload = build_payload(request)
        log.info(
            "[modelscope.generate] model=%s size=%s steps=%s seed=%s guidance=%s",
            payload["model"],
            payload["size"],
            payload["steps"],
            payload["seed"],
            payload.get("guidance"),
        )

        http = get_settings().http
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }
        with httpx.Client(timeout=http.timeout, verify=http.verify_tls) as client:
            r = client.post(f"{self.base_url}/images/generations", json=payload, headers=headers)
            if not 200 <= r.status_code < 300:
                text = r.text
                log.warning("[modelscope.generate] upstream status=%s", r.status_code)
                raise ApiError(
                    f"ModelScope API error: {r.status_code} - {text}",
                    status_code=r.status_code,
                    body=text,
                    provider=PROVIDER_ID,
                )
            try:
                data = r.json()
            except ValueError as exc:
                raise NoImageReturned(
                    "ModelScope returned a non-JSON body", provider=PROVIDER_ID
                ) from exc

        # The request seed is not echoed back; only the url is reported.
        return GenerateSuccessResponse(url=_extract_image_url(data))


__all__ = ["BASE_URL", "DEFAULT_MODEL", "ModelScopeProvider", "build_payload"]
