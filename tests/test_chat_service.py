from __future__ import annotations

import asyncio

import pytest

from chat_relay.models import ChatMessage, ChatRequest, MessageRole, ResponseFormat, ResponseType
from chat_relay.prompts import RESPONSE_FORMAT_INSTRUCTIONS, build_system_prompt
from chat_relay.services.chat_service import ChatService
from chat_relay.utils.error_handler import InvalidConversationError, ProviderError

from conftest import make_service


def _history() -> list[ChatMessage]:
    return [
        ChatMessage(role="user", content="Hi"),
        ChatMessage(role="assistant", content="Hello! How can I help?"),
        ChatMessage(role="user", content="Give me the config as JSON"),
    ]


def test_every_format_has_an_instruction() -> None:
    assert set(RESPONSE_FORMAT_INSTRUCTIONS) == set(ResponseFormat)
    assert RESPONSE_FORMAT_INSTRUCTIONS[ResponseFormat.JSON] == "Always respond with valid JSON. No extra text."


def test_build_system_prompt_combines_parts() -> None:
    assert build_system_prompt() is None
    assert build_system_prompt(system_prompt="   ") is None
    assert build_system_prompt(ResponseFormat.JSON, "Be brief") == (
        "Be brief\n\nAlways respond with valid JSON. No extra text."
    )


def test_build_messages_prepends_system_message() -> None:
    history = _history()
    outbound = ChatService.build_messages(history, ResponseFormat.JSON)
    assert outbound[0].role is MessageRole.SYSTEM
    assert outbound[0].content == "Always respond with valid JSON. No extra text."
    assert outbound[1:] == history


def test_build_messages_without_options_keeps_history() -> None:
    history = _history()
    assert ChatService.build_messages(history) == history


def test_chat_returns_classified_reply() -> None:
    service = make_service('{"name": "relay", "limits": {"rpm": 60}}')
    request = ChatRequest(messages=_history(), response_format=ResponseFormat.JSON)

    response = asyncio.run(service.chat(request))

    assert response.response_type is ResponseType.JSON
    assert response.metadata.json_keys == ["name", "limits"]
    assert response.metadata.json_depth == 2
    assert response.usage == {"prompt_tokens": 7, "completion_tokens": 3, "total_tokens": 10}
    assert response.model == "stub-model"
    sent = service.llm_service.calls[0]
    assert sent[0].role is MessageRole.SYSTEM
    assert len(sent) == 4


def test_reply_text_is_trimmed() -> None:
    service = make_service("\n\n  Sure thing.  \n")
    response = asyncio.run(service.relay(_history()))
    assert response.reply == "Sure thing."
    assert response.response_type is ResponseType.TEXT


def test_trusted_format_comes_from_app_config() -> None:
    service = make_service("print hello", trust_response_format=True)
    response = asyncio.run(service.relay(_history(), response_format=ResponseFormat.CODE))
    assert response.response_type is ResponseType.CODE
    assert response.metadata.is_code is True


def test_relay_rejects_empty_history() -> None:
    service = make_service("unused")
    with pytest.raises(InvalidConversationError):
        asyncio.run(service.relay([]))
    assert service.llm_service.calls == []


def test_provider_failure_propagates() -> None:
    service = make_service(error=ProviderError())
    with pytest.raises(ProviderError):
        asyncio.run(service.relay(_history()))
