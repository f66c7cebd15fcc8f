from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Callable, Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from chat_proxy.domain.entities import DEFAULT_CONFIG, LLMConfig
from chat_proxy.infrastructure.config import Settings
from chat_proxy.infrastructure.json_config_repository import JsonFileConfigRepository
from chat_proxy.interface.app import create_app
from chat_proxy.services.config_store import ConfigStore

TOKEN = "hf_secret_token_value_123456"
UPSTREAM = "https://llm.example/v1/completions"

Handler = Callable[[httpx.Request], httpx.Response]


def _ok(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(
        200,
        json={
            "id": "cmpl-42",
            "model": body["model"],
            "choices": [{"index": 0, "text": f"echo: {body['prompt']}"}],
            "usage": {"total_tokens": 9},
        },
    )


class _Upstream:
    def __init__(self) -> None:
        self.handler: Handler = _ok
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def upstream() -> _Upstream:
    return _Upstream()


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(JsonFileConfigRepository(tmp_path / "config.json"))


@pytest.fixture
def client(tmp_path: Path, store: ConfigStore, upstream: _Upstream) -> Iterator[TestClient]:
    app = create_app(
        Settings(config_file=tmp_path / "config.json"),
        config_store=store,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
    )
    with TestClient(app) as test_client:
        yield test_client


def _configure(client: TestClient) -> None:
    resp = client.post("/api/config/api", json={"apiUrl": UPSTREAM, "apiToken": TOKEN})
    assert resp.status_code == 200


# ── Configuration ───────────────────────────────────────────────────────────


def test_health(client: TestClient) -> None:
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_get_config_unconfigured(client: TestClient) -> None:
    body = client.get("/api/config").json()

    assert body["success"] is True
    assert body["config"]["endpointUrl"] == "[Not configured]"
    assert body["config"]["authToken"] == ""
    assert body["config"]["maxTokens"] == DEFAULT_CONFIG.max_tokens
    assert body["status"] == {"configured": False, "missingFields": ["endpointUrl", "authToken"]}
    assert "timestamp" in body


def test_set_api_config_then_status(client: TestClient) -> None:
    _configure(client)

    body = client.get("/api/config/status").json()
    assert body["configured"] is True
    assert body["missingFields"] == []

    masked = client.get("/api/config").json()["config"]
    assert masked["authToken"] == TOKEN[:10] + "..."
    assert TOKEN not in json.dumps(masked)


def test_set_api_config_requires_both_fields(client: TestClient) -> None:
    resp = client.post("/api/config/api", json={"apiUrl": UPSTREAM})

    assert resp.status_code == 400
    assert resp.json()["message"] == "Both apiUrl and apiToken are required"


def test_set_api_config_rejects_bad_scheme(client: TestClient, store: ConfigStore) -> None:
    before = store.get_config()

    resp = client.post("/api/config/api", json={"apiUrl": "ftp://bad", "apiToken": "tok"})

    assert resp.status_code == 400
    assert "http://" in resp.json()["message"]
    assert store.get_config() == before


def test_update_config(client: TestClient, store: ConfigStore) -> None:
    resp = client.post("/api/config", json={"maxTokens": 300, "temperature": 1.2, "enableLogging": True})

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Configuration updated successfully"
    assert body["config"]["maxTokens"] == 300
    assert store.get_config().temperature == 1.2
    assert store.get_config().enable_logging is True


def test_update_config_out_of_bounds_is_rejected(client: TestClient, store: ConfigStore) -> None:
    before = store.get_config()

    resp = client.post("/api/config", json={"maxTokens": 5000})

    assert resp.status_code == 400
    assert resp.json()["message"] == "maxTokens must be between 1 and 4000"
    assert store.get_config() == before


def test_update_config_api_fields_must_come_together(client: TestClient) -> None:
    resp = client.post("/api/config", json={"endpointUrl": UPSTREAM})

    assert resp.status_code == 400
    assert "Both endpointUrl and authToken" in resp.json()["message"]


def test_update_config_wrong_type_is_400(client: TestClient) -> None:
    resp = client.post("/api/config", json={"maxTokens": "many"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request"


def test_reset_config(client: TestClient, store: ConfigStore) -> None:
    _configure(client)
    client.post("/api/config", json={"maxTokens": 10})

    resp = client.post("/api/config/reset")

    assert resp.status_code == 200
    assert resp.json()["config"]["endpointUrl"] == "[Not configured]"
    assert store.get_config() == LLMConfig()


def test_dotenv_seeds_first_run(tmp_path: Path, monkeypatch, upstream: _Upstream) -> None:
    for name in [n for n in os.environ if n.upper().startswith("LLM_")]:
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(
        f"LLM_API_URL=https://llm.example/v1\nLLM_API_TOKEN={TOKEN}\n", encoding="utf-8"
    )
    app = create_app(
        Settings(config_file=tmp_path / "config.json"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
    )

    with TestClient(app) as test_client:
        resp = test_client.get("/api/config/status")

    assert resp.status_code == 200
    assert resp.json()["configured"] is True
    assert json.loads((tmp_path / "config.json").read_text())["endpointUrl"] == "https://llm.example/v1"


# ── Chat ────────────────────────────────────────────────────────────────────


def test_completion_round_trip(client: TestClient, upstream: _Upstream) -> None:
    _configure(client)

    resp = client.post("/api/chat/completion", json={"prompt": "Hello", "max_tokens": 5})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"] == {
        "id": "cmpl-42",
        "model": DEFAULT_CONFIG.default_model,
        "text": "echo: Hello",
        "totalTokens": 9,
    }
    [request] = upstream.requests
    assert request.headers["Authorization"] == f"Bearer {TOKEN}"
    assert json.loads(request.content)["max_tokens"] == 5


def test_completion_validation_reports_all_errors(client: TestClient, upstream: _Upstream) -> None:
    _configure(client)

    resp = client.post(
        "/api/chat/completion", json={"prompt": "", "maxTokens": 5000, "temperature": 3}
    )

    assert resp.status_code == 400
    assert resp.json()["details"] == [
        "Prompt is required and cannot be empty",
        "max_tokens must be between 1 and 4000",
        "temperature must be between 0 and 2",
    ]
    assert upstream.requests == []


def test_completion_unconfigured_is_500_without_upstream_call(
    client: TestClient, upstream: _Upstream
) -> None:
    resp = client.post("/api/chat/completion", json={"prompt": "hi"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "LLM API not configured"
    assert upstream.requests == []


def test_completion_upstream_404(client: TestClient, upstream: _Upstream) -> None:
    _configure(client)
    upstream.handler = lambda request: httpx.Response(
        404, json={"error": {"message": "model not found"}}
    )

    resp = client.post("/api/chat/completion", json={"prompt": "hi"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "LLM API error"
    assert "404" in body["message"]
    assert "model not found" in body["message"]
    assert TOKEN not in body["message"]


def test_simple_completion(client: TestClient) -> None:
    _configure(client)

    resp = client.post("/api/chat/simple", json={"prompt": "ping", "maxTokens": 3})

    assert resp.status_code == 200
    assert resp.json()["response"] == "echo: ping"


def test_simple_completion_requires_prompt(client: TestClient) -> None:
    resp = client.post("/api/chat/simple", json={"prompt": "   "})

    assert resp.status_code == 400


def test_connection_test_success(client: TestClient) -> None:
    _configure(client)

    resp = client.post("/api/chat/test")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"].startswith("Connection successful!")
    assert isinstance(body["responseTimeMs"], int)


def test_connection_test_network_failure(client: TestClient, upstream: _Upstream) -> None:
    _configure(client)

    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    upstream.handler = _refuse

    resp = client.post("/api/chat/test")

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert "failed" in body["message"]
