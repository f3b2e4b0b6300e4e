"""Orchestration service relaying conversations to the language model.

The ChatService receives the conversation history, optionally prepends
a system message describing the requested reply format, asks the LLM
for a response and classifies the reply so the client knows how to
render it.  Nothing is stored between requests.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Sequence

from loguru import logger

from ..config.app_config import AppConfig, get_app_config
from ..config.llm_config import LlmConfig, get_llm_config
from ..models.chat_message import ChatMessage
from ..models.chat_request import ChatRequest
from ..models.chat_response import ChatResponse
from ..models.enums import MessageRole, ResponseFormat
from ..prompts import build_system_prompt
from ..utils.error_handler import InvalidConversationError
from ..utils.structured_output import classify
from .llm_service import LLMService


class ChatService:
    """Relays a conversation to the LLM and annotates the reply.

    The service composes an :class:`LLMService` with the reply
    classifier.  Provider failures surface as
    :class:`~chat_relay.utils.error_handler.ProviderError` and never
    reach the classifier.
    """

    def __init__(
        self,
        llm_config: LlmConfig | None = None,
        app_config: AppConfig | None = None,
        llm_service: LLMService | None = None,
    ) -> None:
        self.app_config = app_config or get_app_config()
        if llm_service is None:
            llm_service = LLMService(llm_config=llm_config or get_llm_config())
        self.llm_service = llm_service

    async def chat(self, chat_request: ChatRequest) -> ChatResponse:
        """Generate a classified reply to a validated chat request."""
        return await self.relay(
            chat_request.messages,
            response_format=chat_request.response_format,
            system_prompt=chat_request.system_prompt,
        )

    async def relay(
        self,
        messages: Sequence[ChatMessage],
        response_format: ResponseFormat | None = None,
        system_prompt: str | None = None,
    ) -> ChatResponse:
        """Send ``messages`` to the model and return the classified reply.

        Parameters
        ----------
        messages: Sequence[ChatMessage]
            Conversation history in chronological order.
        response_format: ResponseFormat, optional
            Preferred reply format; adds a format instruction to the
            synthesized system message.
        system_prompt: str, optional
            Caller instructions placed before the format instruction.

        Raises
        ------
        InvalidConversationError
            If ``messages`` is empty.
        ProviderError
            If the provider call fails.
        """
        if not messages:
            raise InvalidConversationError("At least one message is required")

        outbound = self.build_messages(messages, response_format, system_prompt)
        logger.info(
            "Relaying {} message(s) (format={})",
            len(outbound),
            response_format.value if response_format else None,
        )
        completion = await self.llm_service.agenerate(outbound)

        classified = classify(
            completion.text,
            response_format,
            trust_format=self.app_config.trust_response_format,
        )
        logger.info("Reply classified as {}", classified.content_type.value)
        return ChatResponse(
            reply=classified.content,
            response_type=classified.content_type,
            metadata=classified.metadata,
            usage=completion.usage,
            model=completion.model,
        )

    @staticmethod
    def build_messages(
        messages: Sequence[ChatMessage],
        response_format: ResponseFormat | None = None,
        system_prompt: str | None = None,
    ) -> list[ChatMessage]:
        """Return the history with the synthesized system message first, if any."""
        instructions = build_system_prompt(response_format, system_prompt)
        if instructions is None:
            return list(messages)
        return [ChatMessage(role=MessageRole.SYSTEM, content=instructions), *messages]


@lru_cache()
def get_chat_service() -> ChatService:
    """Dependency injector for ChatService instances.

    FastAPI will call this function to obtain a singleton
    ChatService.  The lru_cache decorator ensures only one
    instance exists.
    """
    return ChatService()
