"""HuggingFace Spaces provider driving the Gradio ``/gradio_api/call`` queue.

A generation is two sequential requests: enqueue the positional argument list
for the model's endpoint, then fetch the job's event stream and read the data
line that follows the ``complete`` event.
"""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from app.config import get_settings
from app.schemas import GenerateRequest, GenerateSuccessResponse

from .base import resolve_seed
from .errors import MalformedStream, NoImageReturned, QueueError, QuotaExhausted

log = logging.getLogger("z-image.huggingface")

PROVIDER_ID = "huggingface"
STREAM_SNIPPET_CHARS = 200


class HFModel(str, Enum):
    Z_IMAGE_TURBO = "z-image-turbo"
    QWEN_IMAGE_FAST = "qwen-image-fast"
    OVIS_IMAGE = "ovis-image"
    FLUX_1_SCHNELL = "flux-1-schnell"

    @classmethod
    def resolve(cls, value: Optional[str]) -> "HFModel":
        """Map a model id to a known model, falling back to the default one."""

        if value:
            try:
                return cls(value)
            except ValueError:
                log.info("Unknown HuggingFace model '%s', using %s", value, DEFAULT_MODEL.value)
        return DEFAULT_MODEL


DEFAULT_MODEL = HFModel.Z_IMAGE_TURBO

BuildData = Callable[[GenerateRequest, int], List[Any]]


@dataclass(frozen=True)
class GradioModelConfig:
    space_url: str
    endpoint: str
    build_data: BuildData


def _steps(request: GenerateRequest, default: int) -> int:
    return request.steps if request.steps is not None else default


def _z_image_turbo_data(request: GenerateRequest, seed: int) -> List[Any]:
    return [request.prompt, request.height, request.width, _steps(request, 9), seed, False]


def _qwen_image_fast_data(request: GenerateRequest, seed: int) -> List[Any]:
    # Space only exposes aspect presets; width/height are not forwarded.
    return [request.prompt, seed, True, "1:1", 3, _steps(request, 8)]


def _ovis_image_data(request: GenerateRequest, seed: int) -> List[Any]:
    return [request.prompt, request.height, request.width, seed, _steps(request, 24), 4]


def _flux_1_schnell_data(request: GenerateRequest, seed: int) -> List[Any]:
    return [request.prompt, seed, False, request.width, request.height, _steps(request, 8)]


MODEL_CONFIGS: Mapping[HFModel, GradioModelConfig] = MappingProxyType(
    {
        HFModel.Z_IMAGE_TURBO: GradioModelConfig(
            space_url="https://tongyi-mai-z-image-turbo.hf.space",
            endpoint="generate_image",
            build_data=_z_image_turbo_data,
        ),
        HFModel.QWEN_IMAGE_FAST: GradioModelConfig(
            space_url="https://mcp-tools-qwen-image-fast.hf.space",
            endpoint="generate_image",
            build_data=_qwen_image_fast_data,
        ),
        HFModel.OVIS_IMAGE: GradioModelConfig(
            space_url="https://aidc-ai-ovis-image-7b.hf.space",
            endpoint="generate",
            build_data=_ovis_image_data,
        ),
        HFModel.FLUX_1_SCHNELL: GradioModelConfig(
            space_url="https://black-forest-labs-flux-1-schnell.hf.space",
            endpoint="infer",
            build_data=_flux_1_schnell_data,
        ),
    }
)


# -----------------------------------------------------------------------------
# Event stream
# -----------------------------------------------------------------------------


def extract_complete_event_data(stream: str) -> Any:
    """Return the JSON payload of the first ``complete`` event in ``stream``.

    ``event:`` lines switch the current event kind; a ``data:`` line is only
    decoded while the current kind is ``complete``. An ``error`` event aborts
    the scan with :class:`QuotaExhausted`.
    """

    in_complete_event = False
    # Only "\n" separates lines; JSON payloads may carry U+2028 and friends unescaped.
    for line in stream.split("\n"):
        line = line.removesuffix("\r")
        if line.startswith("event:"):
            kind = line[len("event:"):].strip()
            if kind == "complete":
                in_complete_event = True
            elif kind == "error":
                raise QuotaExhausted("Quota exhausted, please set HF Token", provider=PROVIDER_ID)
            else:
                in_complete_event = False
        elif line.startswith("data:") and in_complete_event:
            raw = line[len("data:"):].strip()
            try:
                return json.loads(raw)
            except ValueError as exc:
                raise MalformedStream(
                    f"Invalid JSON in complete event: {raw[:STREAM_SNIPPET_CHARS]}",
                    provider=PROVIDER_ID,
                ) from exc

    raise MalformedStream(
        f"No complete event in response: {stream[:STREAM_SNIPPET_CHARS]}",
        provider=PROVIDER_ID,
    )


class _GradioImage(BaseModel):
    """First element of a Gradio image result (a FileData-like object)."""

    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None


def unwrap_result(data: Any, seed: int) -> GenerateSuccessResponse:
    """Turn the ``[image, seed?]`` result array into a success response."""

    if not isinstance(data, list) or not data:
        raise NoImageReturned("No image returned from HuggingFace", provider=PROVIDER_ID)

    try:
        image = _GradioImage.model_validate(data[0])
    except ValidationError as exc:
        raise NoImageReturned(
            "No image returned from HuggingFace", provider=PROVIDER_ID
        ) from exc

    if not image.url:
        raise NoImageReturned("No image returned from HuggingFace", provider=PROVIDER_ID)

    reported = data[1] if len(data) > 1 else None
    # NaN/Infinity decode as floats and have no integer value.
    if isinstance(reported, float):
        if math.isfinite(reported):
            seed = int(reported)
    elif isinstance(reported, int) and not isinstance(reported, bool):
        seed = reported

    return GenerateSuccessResponse(url=image.url, seed=seed)


# -----------------------------------------------------------------------------
# Transport
# -----------------------------------------------------------------------------


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def call_gradio_api(
    base_url: str,
    endpoint: str,
    data: Sequence[Any],
    hf_token: Optional[str] = None,
) -> Any:
    """Enqueue ``data`` on ``endpoint`` and return the decoded ``complete`` payload."""

    http = get_settings().http
    headers = {"Content-Type": "application/json"}
    if hf_token:
        headers["Authorization"] = f"Bearer {hf_token}"

    call_url = f"{base_url.rstrip('/')}/gradio_api/call/{endpoint}"

    with httpx.Client(timeout=http.timeout, verify=http.verify_tls) as client:
        queue = client.post(call_url, json={"data": list(data)}, headers=headers)
        if not _is_success(queue.status_code):
            log.warning("[hf.queue] %s rejected with status %s", call_url, queue.status_code)
            raise QueueError(f"Queue request failed: {queue.status_code}", provider=PROVIDER_ID)

        try:
            queue_data = queue.json()
        except ValueError:
            queue_data = None
        event_id = queue_data.get("event_id") if isinstance(queue_data, dict) else None
        if not event_id:
            raise QueueError("No event_id returned", provider=PROVIDER_ID)

        log.debug("[hf.queue] event_id=%s endpoint=%s", event_id, endpoint)
        result = client.get(f"{call_url}/{event_id}", headers=headers)
        text = result.text

    return extract_complete_event_data(text)


class HuggingFaceProvider:
    """Gradio queue adapter for the HuggingFace Spaces listed in ``MODEL_CONFIGS``."""

    id = PROVIDER_ID
    name = "HuggingFace"

    @property
    def models(self) -> List[str]:
        return [model.value for model in MODEL_CONFIGS]

    def generate(self, request: GenerateRequest) -> GenerateSuccessResponse:
        seed = resolve_seed(request.seed)
        model = HFModel.resolve(request.model)
        config = MODEL_CONFIGS[model]

        log.info(
            "[hf.generate] model=%s endpoint=%s w=%s h=%s steps=%s seed=%s has_token=%s",
            model.value,
            config.endpoint,
            request.width,
            request.height,
            request.steps,
            seed,
            bool(request.auth_token),
        )

        data = call_gradio_api(
            config.space_url,
            config.endpoint,
            config.build_data(request, seed),
            request.auth_token,
        )
        return unwrap_result(data, seed)


__all__ = [
    "DEFAULT_MODEL",
    "GradioModelConfig",
    "HFModel",
    "HuggingFaceProvider",
    "MODEL_CONFIGS",
    "call_gradio_api",
    "extract_complete_event_data",
    "unwrap_result",
]
