"""FastAPI route for follow-up chat on a conversation thread.

Endpoints:
    POST /chat — send one message, wait for the assistant's reply
"""

import logging

from fastapi import APIRouter, Depends

from src.api.dependencies import get_orchestrator
from src.api.schemas import ChatRequest, ChatResponse
from src.services.conversation_orchestrator import ConversationOrchestrator
from src.utils.redaction import redact_for_logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> ChatResponse:
    """Send a chat message and return the reply.

    Raises:
        ClientInputError: 400 when no message text was supplied.
        ConfigurationError: 500 when the chat assistant is not configured.
        RemoteFailure: 500 on run or connectivity failure.
    """
    logger.debug(
        "Chat request body: %s",
        redact_for_logging(payload.model_dump(exclude_none=True)),
    )
    result = await orchestrator.chat(
        payload.resolve_input_text(),
        thread_id=payload.threadId,
        assistant_id=payload.assistantId,
    )
    logger.info("Chat reply on thread %s: %d chars", result.thread_id, len(result.reply))
    return ChatResponse(threadId=result.thread_id, reply=result.reply)
