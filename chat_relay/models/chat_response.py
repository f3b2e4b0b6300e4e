"""Response model for the chat API."""

from pydantic import BaseModel, ConfigDict, Field

from .classified_reply import ReplyMetadata
from .enums import ResponseType


class ChatResponse(BaseModel):
    """Represents the assistant's reply to a chat request.

    The response includes the reply text, the classifier's verdict on its
    shape and the derived metadata so the client can pick a renderer
    without re-parsing the text.  ``usage`` and ``model`` are copied from
    the provider when it reports them.
    """

    model_config = ConfigDict(populate_by_name=True)

    reply: str
    response_type: ResponseType = Field(
        default=ResponseType.TEXT,
        alias="responseType",
        description="Classification of the assistant's reply content.",
    )
    metadata: ReplyMetadata = Field(default_factory=ReplyMetadata)
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage reported by the provider.",
    )
    model: str | None = Field(
        default=None,
        description="Model that produced the reply.",
    )
