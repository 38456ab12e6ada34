from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from fastapi import FastAPI, Header, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.schemas import (
    ApiGenerateRequest,
    ErrorResponse,
    GenerateSuccessResponse,
    ProviderCollection,
    ProviderInfo,
)
from app.services.image_provider import (
    ApiError,
    ImageProviderError,
    get_provider,
    list_providers,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("uvicorn").setLevel(settings.log_level)
logging.getLogger("uvicorn.error").setLevel(settings.log_level)
logging.getLogger("uvicorn.access").setLevel(settings.log_level)
logging.getLogger("z-image").setLevel(settings.log_level)

logger = logging.getLogger("z-image")
app = FastAPI(title="Z-Image API", version="1.0.0")

allow_all = settings.allowed_origins == ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=not allow_all,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)
logger.info("CORS configured", extra={"allowed_origins": settings.allowed_origins})


def _error_status(exc: ImageProviderError) -> int:
    if isinstance(exc, ApiError):
        # Upstream client/server errors are relayed; anything else is a bad gateway.
        return exc.status_code if 400 <= exc.status_code < 600 else 502
    return exc.status_code


@app.exception_handler(ImageProviderError)
async def image_provider_error_handler(request: Request, exc: ImageProviderError) -> JSONResponse:
    status_code = _error_status(exc)
    logger.warning(
        "Image generation failed",
        extra={
            "error": type(exc).__name__,
            "provider": exc.provider,
            "status_code": status_code,
            "path": request.url.path,
        },
    )
    payload = ErrorResponse(error=type(exc).__name__, message=exc.message, provider=exc.provider)
    return JSONResponse(payload.model_dump(exclude_none=True), status_code=status_code)


@app.get("/", include_in_schema=False)
def root() -> dict[str, Any]:
    return {"service": "z-image-api", "ok": True}


@app.head("/", include_in_schema=False)
def root_head() -> Response:
    return Response(status_code=200)


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.get("/api/providers", response_model=ProviderCollection)
def providers() -> ProviderCollection:
    return ProviderCollection(
        providers=[
            ProviderInfo(id=provider.id, name=provider.name, models=list(provider.models))
            for provider in list_providers()
        ]
    )


@app.post("/api/generate", response_model=GenerateSuccessResponse)
def api_generate(
    request: Request,
    request_data: ApiGenerateRequest,
    x_api_key: Optional[str] = Header(default=None),
) -> JSONResponse:
    provider = get_provider(request_data.provider or settings.default_provider)
    generate_request = request_data.to_generate_request(auth_token=x_api_key)

    rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
    logger.info(
        "[payload] rid=%s provider=%s model=%s prompt_len=%s w=%s h=%s steps=%s has_seed=%s guidance=%s",
        rid,
        provider.id,
        generate_request.model,
        len(generate_request.prompt),
        generate_request.width,
        generate_request.height,
        generate_request.steps,
        generate_request.seed is not None,
        generate_request.guidance_scale,
    )

    result = provider.generate(generate_request)

    logger.info("[result] rid=%s provider=%s seed=%s", rid, provider.id, result.seed)
    headers = {"X-Image-Provider": provider.id, "X-Request-ID": rid}
    return JSONResponse(result.model_dump(exclude_none=True), headers=headers)


__all__ = ["app"]
