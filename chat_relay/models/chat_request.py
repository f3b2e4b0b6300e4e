"""Request model for the chat API."""

from pydantic import BaseModel, ConfigDict, Field

from .chat_message import ChatMessage
from .enums import ResponseFormat


class ChatRequest(BaseModel):
    """Represents a request payload for the chat endpoint.

    ``messages`` is the full conversation history in chronological order
    and must contain at least one entry.  ``response_format`` optionally
    asks the model to prefer a given output shape and ``system_prompt``
    adds caller-supplied instructions.  Both are accepted under their
    camelCase names (``responseFormat``, ``systemPrompt``) as sent by the
    browser client.  Pydantic validates incoming requests against these
    constraints; failures are reported as a 400 error envelope.
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(
        ...,
        min_length=1,
        description="Ordered conversation history; at least one message is required.",
    )
    response_format: ResponseFormat | None = Field(
        default=None,
        alias="responseFormat",
        description="Optional hint describing the preferred reply format.",
    )
    system_prompt: str | None = Field(
        default=None,
        alias="systemPrompt",
        description="Optional extra instructions prepended as a system message.",
    )
