from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List
from urllib.parse import urlparse


def _as_bool(value: str | None, default: bool) -> bool:
    """Interpret common truthy / falsy strings while providing a default."""

    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_timeout(value: str | None, default: float | None) -> float | None:
    """Parse a timeout in seconds; ``0``/``none`` disables the client timeout."""

    if value is None:
        return default
    text = value.strip().lower()
    if text in {"", "0", "none", "off"}:
        return None
    try:
        seconds = float(text)
    except ValueError:
        return default
    return seconds if seconds > 0 else None


def _normalise_origin(value: str) -> str | None:
    """
    Normalise a single origin:
    - "*" passes through
    - bare hosts (``localhost:5173``) get an ``http://`` scheme
    - paths are dropped, only scheme://host[:port] is kept
    - invalid values return None
    """
    v = value.strip()
    if not v:
        return None
    if v == "*":
        return "*"
    if "://" not in v:
        v = "http://" + v
    p = urlparse(v)
    if not (p.scheme and p.netloc):
        return None
    return f"{p.scheme}://{p.netloc}"


def _parse_allowed_origins(raw: str | None) -> List[str]:
    """Normalise comma-separated origins into values accepted by CORSMiddleware."""

    if not raw:
        return ["*"]

    cleaned: List[str] = []
    for token in raw.split(","):
        origin = _normalise_origin(token)
        if origin == "*":
            return ["*"]
        if origin and origin not in cleaned:
            cleaned.append(origin)

    return cleaned or ["*"]


@dataclass
class HttpConfig:
    timeout: float | None = 120.0
    verify_tls: bool = True


@dataclass
class Settings:
    environment: str
    log_level: str
    allowed_origins: List[str]
    default_provider: str
    http: HttpConfig


@lru_cache()
def get_settings() -> Settings:
    def _get(name: str, default: str | None = None) -> str | None:
        v = os.getenv(name)
        return v if v is not None else default

    http = HttpConfig(
        timeout=_as_timeout(_get("IMAGE_HTTP_TIMEOUT"), 120.0),
        verify_tls=_as_bool(_get("IMAGE_HTTP_VERIFY_TLS"), True),
    )

    return Settings(
        environment=_get("ENVIRONMENT", "development") or "development",
        log_level=(_get("LOG_LEVEL", "INFO") or "INFO").upper(),
        allowed_origins=_parse_allowed_origins(_get("ALLOWED_ORIGINS", "*")),
        default_provider=(_get("DEFAULT_PROVIDER", "huggingface") or "huggingface").strip().lower(),
        http=http,
    )
