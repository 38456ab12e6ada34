import pytest
from pydantic import ValidationError

from app.schemas import ApiGenerateRequest, GenerateRequest, GenerateSuccessResponse


def test_generate_request_accepts_wire_aliases() -> None:
    request = GenerateRequest.model_validate(
        {
            "prompt": "a red fox",
            "width": 768,
            "height": 512,
            "guidanceScale": 4.5,
            "authToken": " hf_token ",
            "unknown": "ignored",
        }
    )

    assert request.guidance_scale == 4.5
    assert request.auth_token == "hf_token"
    assert request.steps is None
    assert request.seed is None


def test_generate_request_blank_model_is_none() -> None:
    assert GenerateRequest(prompt="x", model="  ").model is None


@pytest.mark.parametrize(
    "payload",
    [
        {"prompt": ""},
        {"prompt": "   "},
        {"prompt": "x", "width": 0},
        {"prompt": "x", "height": -1},
        {"prompt": "x", "steps": 0},
    ],
)
def test_generate_request_rejects_invalid_values(payload) -> None:
    with pytest.raises(ValidationError):
        GenerateRequest.model_validate(payload)


def test_auth_token_is_hidden_from_repr() -> None:
    request = GenerateRequest(prompt="x", auth_token="secret")
    assert "secret" not in repr(request)


def test_api_request_header_token_only_fills_missing_token() -> None:
    body = ApiGenerateRequest(prompt="x", provider=" ModelScope ")
    assert body.provider == "modelscope"
    assert body.to_generate_request(auth_token="from-header").auth_token == "from-header"

    explicit = ApiGenerateRequest(prompt="x", authToken="from-body")
    assert explicit.to_generate_request(auth_token="from-header").auth_token == "from-body"


def test_success_response_requires_url() -> None:
    with pytest.raises(ValidationError):
        GenerateSuccessResponse(url="")
    assert GenerateSuccessResponse(url="https://x").model_dump(exclude_none=True) == {"url": "https://x"}
