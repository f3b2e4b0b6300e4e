"""Enumerations used across models."""

from enum import Enum


class MessageRole(str, Enum):
    """Enum for message roles in a conversation.

    The role field distinguishes between the sender of each message in the
    conversation.  ``USER`` denotes a human message, ``ASSISTANT`` denotes
    a reply from the AI model, and ``SYSTEM`` carries instructions for the
    model such as the requested response format.
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ResponseType(str, Enum):
    """Enum describing the content type of an assistant reply for frontend rendering."""

    TEXT = "text"
    JSON = "json"
    CODE = "code"
    MARKDOWN = "markdown"
    TABLE = "table"
    HTML_TABLE = "html-table"
    MIXED = "mixed"
    RAW = "raw"


class ResponseFormat(str, Enum):
    """Formats a client may ask the model to answer in.

    The hint is advisory; the reply is still classified from its content.
    """

    TEXT = "text"
    JSON = "json"
    CODE = "code"
    MARKDOWN = "markdown"
    TABLE = "table"
    MIXED = "mixed"
    RAW = "raw"

    def as_response_type(self) -> ResponseType:
        return ResponseType(self.value)


class JsonKind(str, Enum):
    """Shape of a decoded JSON value."""

    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"
