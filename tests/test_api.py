from __future__ import annotations

from fastapi.testclient import TestClient

from chat_relay.config.app_config import AppConfig
from chat_relay.models import MessageRole
from chat_relay.utils.error_handler import ProviderError


def _body(**extra: object) -> dict[str, object]:
    return {"messages": [{"role": "user", "content": "Describe the service config"}], **extra}


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_chat_returns_enriched_reply(client: TestClient, relay) -> None:
    stub = relay('{"a":1,"b":{"c":2}}')

    response = client.post("/chat", json=_body(responseFormat="json", systemPrompt="You are terse."))

    assert response.status_code == 200
    payload = response.json()
    assert payload["reply"] == '{"a":1,"b":{"c":2}}'
    assert payload["responseType"] == "json"
    assert payload["metadata"]["isJson"] is True
    assert payload["metadata"]["isCode"] is False
    assert payload["metadata"]["jsonKeys"] == ["a", "b"]
    assert payload["metadata"]["jsonDepth"] == 2
    assert "language" not in payload["metadata"]
    assert payload["usage"]["total_tokens"] == 10
    assert payload["model"] == "stub-model"

    system_message = stub.calls[0][0]
    assert system_message.role is MessageRole.SYSTEM
    assert system_message.content == "You are terse.\n\nAlways respond with valid JSON. No extra text."


def test_chat_reports_code_language(client: TestClient, relay) -> None:
    relay("```python\nprint('hi')\n```")
    payload = client.post("/chat", json=_body()).json()
    assert payload["responseType"] == "code"
    assert payload["metadata"]["language"] == "python"


def test_empty_history_is_a_client_error(client: TestClient, relay) -> None:
    stub = relay("unused")
    response = client.post("/chat", json={"messages": []})
    assert response.status_code == 400
    assert "messages" in response.json()["error"]
    assert stub.calls == []


def test_blank_content_is_a_client_error(client: TestClient, relay) -> None:
    relay("unused")
    response = client.post("/chat", json={"messages": [{"role": "user", "content": "   "}]})
    assert response.status_code == 400
    assert "Message content cannot be empty" in response.json()["error"]


def test_unknown_role_is_a_client_error(client: TestClient, relay) -> None:
    relay("unused")
    response = client.post("/chat", json={"messages": [{"role": "robot", "content": "hi"}]})
    assert response.status_code == 400
    assert "role" in response.json()["error"]


def test_provider_failure_returns_generic_server_error(client: TestClient, relay) -> None:
    relay(error=ProviderError())
    response = client.post("/chat", json=_body())
    assert response.status_code == 502
    assert response.json() == {"error": "Failed to get AI response. Please try again."}


def test_unexpected_failure_uses_error_envelope(app, relay) -> None:
    relay(error=RuntimeError("boom"))
    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.post("/chat", json=_body())
    assert response.status_code == 500
    assert response.json() == {"error": "boom"}


def test_unknown_route_returns_not_found_envelope(client: TestClient) -> None:
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found", "path": "/does-not-exist"}


def test_unexpected_failure_hides_details_in_production(app, relay, monkeypatch) -> None:
    monkeypatch.setattr(
        "chat_relay.utils.error_handler.get_app_config",
        lambda: AppConfig(app_env="production"),
    )
    relay(error=RuntimeError("database password leaked in traceback"))
    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.post("/chat", json=_body())
    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
