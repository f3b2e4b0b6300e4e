"""Models representing chat messages."""

from pydantic import BaseModel, ConfigDict, field_validator

from .enums import MessageRole


class ChatMessage(BaseModel):
    """Represents a single message in a conversation.

    Messages are immutable once created.  The ``content`` field is
    trimmed on validation and must still contain text afterwards, so a
    whitespace-only message is rejected before it reaches the model.
    """

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Message content cannot be empty")
        return stripped
