from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Sequence

import pytest
from fastapi.testclient import TestClient

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

# Must be set before the app module creates its configuration.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from chat_relay.config.app_config import AppConfig
from chat_relay.models.chat_message import ChatMessage
from chat_relay.services.chat_service import ChatService, get_chat_service
from chat_relay.services.llm_service import LlmCompletion


class StubLLMService:
    """Stands in for the provider; records every outbound conversation."""

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[list[ChatMessage]] = []

    async def agenerate(self, messages: Sequence[ChatMessage]) -> LlmCompletion:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return LlmCompletion(
            text=self.reply,
            model="stub-model",
            usage={"prompt_tokens": 7, "completion_tokens": 3, "total_tokens": 10},
        )


def make_service(reply: str = "", error: Exception | None = None, **config: object) -> ChatService:
    return ChatService(app_config=AppConfig(**config), llm_service=StubLLMService(reply, error))


@pytest.fixture(scope="session")
def app():
    from chat_relay.main import app as fastapi_app

    return fastapi_app


@pytest.fixture()
def relay(app):
    """Install a ChatService backed by a stub provider; returns a setter."""

    def install(reply: str = "", error: Exception | None = None) -> StubLLMService:
        service = make_service(reply, error)
        app.dependency_overrides[get_chat_service] = lambda: service
        return service.llm_service

    yield install
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client
