"""Expose commonly used model classes at the package level.

Importing these classes here allows consumers to write concise imports like::

    from chat_relay.models import ChatRequest, ChatResponse, ClassifiedReply

These names refer to the underlying Pydantic models defined in their
respective modules.
"""

from .chat_request import ChatRequest  # noqa: F401
from .chat_response import ChatResponse  # noqa: F401
from .chat_message import ChatMessage  # noqa: F401
from .classified_reply import ClassifiedReply, ReplyMetadata  # noqa: F401
from .enums import JsonKind, MessageRole, ResponseFormat, ResponseType  # noqa: F401
