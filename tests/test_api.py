import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.schemas import GenerateSuccessResponse
from app.services.image_provider import HuggingFaceProvider, QuotaExhausted, UnknownProvider, get_provider


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        return self._payload


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def test_health_and_root(client: TestClient) -> None:
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/").json()["ok"] is True


def test_providers_lists_registered_adapters(client: TestClient) -> None:
    body = client.get("/api/providers").json()
    ids = [item["id"] for item in body["providers"]]
    assert ids == ["huggingface", "modelscope"]
    assert "flux-1-schnell" in body["providers"][0]["models"]


def test_get_provider_rejects_unknown_ids() -> None:
    assert get_provider(" HuggingFace ").id == "huggingface"
    with pytest.raises(UnknownProvider):
        get_provider("midjourney")


def test_generate_uses_default_provider_and_header_token(monkeypatch, client: TestClient) -> None:
    seen = {}

    def fake_generate(self, request):
        seen["request"] = request
        return GenerateSuccessResponse(url="https://x/img.png", seed=42)

    monkeypatch.setattr(HuggingFaceProvider, "generate", fake_generate)

    response = client.post(
        "/api/generate",
        json={"prompt": "cat", "width": 512, "height": 512},
        headers={"X-API-Key": "hf_header"},
    )

    assert response.status_code == 200
    assert response.json() == {"url": "https://x/img.png", "seed": 42}
    assert response.headers["X-Image-Provider"] == "huggingface"
    assert seen["request"].auth_token == "hf_header"


def test_generate_relays_modelscope_upstream_error(monkeypatch, client: TestClient) -> None:
    class DummyClient:
        def __init__(self, *args, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            pass

        def post(self, url, json, headers):
            return DummyResponse(status_code=429, text="rate limited")

    monkeypatch.setattr("app.services.image_provider.modelscope.httpx.Client", DummyClient)

    response = client.post(
        "/api/generate",
        json={"prompt": "cat", "provider": "modelscope", "authToken": "ms"},
    )

    assert response.status_code == 429
    body = response.json()
    assert body["error"] == "ApiError"
    assert body["provider"] == "modelscope"
    assert "rate limited" in body["message"]


def test_generate_missing_modelscope_token_is_unauthorized(client: TestClient) -> None:
    response = client.post("/api/generate", json={"prompt": "cat", "provider": "modelscope"})

    assert response.status_code == 401
    assert response.json()["error"] == "MissingCredential"


def test_generate_quota_exhausted_maps_to_429(monkeypatch, client: TestClient) -> None:
    def fake_generate(self, request):
        raise QuotaExhausted("Quota exhausted, please set HF Token", provider="huggingface")

    monkeypatch.setattr(HuggingFaceProvider, "generate", fake_generate)

    response = client.post("/api/generate", json={"prompt": "cat", "provider": "huggingface"})

    assert response.status_code == 429
    assert response.json() == {
        "error": "QuotaExhausted",
        "message": "Quota exhausted, please set HF Token",
        "provider": "huggingface",
    }


def test_generate_unknown_provider_is_bad_request(client: TestClient) -> None:
    response = client.post("/api/generate", json={"prompt": "cat", "provider": "nope"})
    assert response.status_code == 400
    assert response.json()["error"] == "UnknownProvider"


def test_generate_validates_body(client: TestClient) -> None:
    assert client.post("/api/generate", json={"prompt": ""}).status_code == 422
