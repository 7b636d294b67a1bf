"""Chat endpoint - streams assistant replies as server-sent events."""

import json
import logging
from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from ..config import AIConfig
from ..dependencies import get_ai_config, get_generative_client
from ..errors import ConfigurationError
from ..models import ChatTurn
from ..services.gemini import GenerativeClient, open_chat_stream

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    """A new message plus the conversation so far."""
    history: list[ChatTurn] = Field(default_factory=list)
    message: str = Field(..., min_length=1, max_length=4000)


def sse(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


@router.post("/chat/stream")
async def chat_stream(
    request: ChatRequest,
    config: AIConfig = Depends(get_ai_config),
    client: GenerativeClient = Depends(get_generative_client),
):
    """Stream the assistant reply chunk by chunk."""
    try:
        stream = open_chat_stream(config, request.history, request.message, client=client)
    except ConfigurationError:
        raise HTTPException(
            status_code=400,
            detail="API key not configured. Set VITE_API_KEY or API_KEY in .env file.",
        )

    async def event_generator():
        try:
            async for text in stream:
                yield sse({"text": text})
            yield sse({"done": True})
        except Exception as e:
            logger.warning("chat_stream_failed", extra={"err": str(e)})
            yield sse({"error": str(e)})

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
