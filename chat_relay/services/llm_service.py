"""Service encapsulating interactions with the language model.

Uses LangChain's ChatOpenAI integration to talk to an OpenAI-compatible
chat completions endpoint (Groq by default).  The service accepts the
conversation history and returns the reply text together with the
usage and model name the provider reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from loguru import logger
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from ..config.llm_config import LlmConfig, get_llm_config
from ..models.chat_message import ChatMessage
from ..models.enums import MessageRole
from ..utils.error_handler import ProviderError

_USAGE_KEYS = ("prompt_tokens", "completion_tokens", "total_tokens")


@dataclass(frozen=True)
class LlmCompletion:
    """Raw provider output before classification."""

    text: str
    model: str | None = None
    usage: dict[str, int] | None = field(default=None)


class LLMService:
    """Service for generating responses from the language model.

    This service wraps LangChain's :class:`~langchain_openai.ChatOpenAI` class and
    constructs it from a single :class:`LlmConfig` instance.  If a ``base_url``
    is configured the client talks to that endpoint, otherwise to the default
    OpenAI endpoint.  ``temperature``, ``max_tokens`` and ``timeout`` are
    forwarded verbatim to the ChatOpenAI constructor.
    """

    def __init__(
        self,
        llm_config: LlmConfig | None = None,
        llm: BaseChatModel | None = None,
    ) -> None:
        """Initialise the LLM service with the provided configuration.

        Parameters
        ----------
        llm_config: LlmConfig, optional
            A configuration instance specifying API credentials, base URL,
            model name and tuning parameters.  If omitted, the configuration
            will be loaded from environment variables via :func:`get_llm_config`.
        llm: BaseChatModel, optional
            A pre-built chat model.  Mostly useful for tests; when omitted a
            ChatOpenAI client is created from the configuration.
        """
        self.llm_config = llm_config or get_llm_config()

        if llm is not None:
            self.llm = llm
            return

        llm_kwargs: dict[str, object] = {
            "api_key": self.llm_config.api_key,
            "model": self.llm_config.model,
            "temperature": self.llm_config.temperature,
        }
        if self.llm_config.base_url:
            llm_kwargs["base_url"] = self.llm_config.base_url
        if self.llm_config.max_tokens:
            llm_kwargs["max_tokens"] = self.llm_config.max_tokens
        if self.llm_config.timeout:
            llm_kwargs["timeout"] = self.llm_config.timeout

        self.llm = ChatOpenAI(**llm_kwargs)

    async def agenerate(self, messages: Sequence[ChatMessage]) -> LlmCompletion:
        """Send the conversation to the provider and return its reply.

        Raises
        ------
        ProviderError
            If the provider call fails for any reason.  The original
            exception is logged and chained; the error message stays generic.
        """
        logger.debug(
            "Requesting completion for {} message(s) from model={}",
            len(messages),
            self.llm_config.model,
        )
        try:
            result = await self.llm.ainvoke(to_langchain_messages(messages))
        except Exception as exc:
            logger.exception("LLM provider call failed")
            raise ProviderError() from exc

        completion = LlmCompletion(
            text=_message_text(result),
            model=_reported_model(result) or self.llm_config.model,
            usage=_reported_usage(result),
        )
        logger.debug("Provider returned {} characters (usage={})", len(completion.text), completion.usage)
        return completion


def to_langchain_messages(messages: Sequence[ChatMessage]) -> list[BaseMessage]:
    """Map conversation messages onto LangChain message classes."""
    lc_messages: list[BaseMessage] = []
    for message in messages:
        if message.role == MessageRole.USER:
            lc_messages.append(HumanMessage(content=message.content))
        elif message.role == MessageRole.ASSISTANT:
            lc_messages.append(AIMessage(content=message.content))
        else:
            lc_messages.append(SystemMessage(content=message.content))
    return lc_messages


def _message_text(result: Any) -> str:
    content = getattr(result, "content", result)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts)
    return "" if content is None else str(content)


def _reported_model(result: Any) -> str | None:
    metadata = getattr(result, "response_metadata", None) or {}
    model = metadata.get("model_name") or metadata.get("model")
    return str(model) if model else None


def _reported_usage(result: Any) -> dict[str, int] | None:
    metadata = getattr(result, "response_metadata", None) or {}
    token_usage = metadata.get("token_usage")
    if isinstance(token_usage, dict):
        usage = {key: int(token_usage[key]) for key in _USAGE_KEYS if isinstance(token_usage.get(key), int)}
        if usage:
            return usage

    usage_metadata = getattr(result, "usage_metadata", None)
    if usage_metadata:
        return {
            "prompt_tokens": int(usage_metadata.get("input_tokens", 0)),
            "completion_tokens": int(usage_metadata.get("output_tokens", 0)),
            "total_tokens": int(usage_metadata.get("total_tokens", 0)),
        }
    return None
