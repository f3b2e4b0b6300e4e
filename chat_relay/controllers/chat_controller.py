"""Controllers for chat endpoints.

Defines the route relaying a conversation to the ChatService.  The
router is registered in ``chat_relay.main``.
"""

from fastapi import APIRouter, Depends
from loguru import logger

from ..models.chat_request import ChatRequest
from ..models.chat_response import ChatResponse
from ..services.chat_service import ChatService, get_chat_service

router = APIRouter(prefix="", tags=["Chat"])


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat_endpoint(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Relay the conversation and return the classified reply.

    ``messages`` must hold at least one entry with a valid role and
    non-blank content; ``responseFormat`` and ``systemPrompt`` are
    optional.  Validation failures produce a 400 error envelope and
    provider failures a 502, both handled by the app's exception
    handlers.
    """
    logger.info(
        "Received chat request with {} message(s), responseFormat={}",
        len(request.messages),
        request.response_format.value if request.response_format else None,
    )
    response = await service.chat(request)
    logger.info("Answer generated successfully ({})", response.response_type.value)
    return response
