"""Bridge route for clients built on the AI SDK ``useChat`` hook.

Accepts the hook's request body, forwards the last message to the chat
endpoint and re-encodes the response as a data stream.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from docutalk.infrastructure.app_factory import app_factory
from docutalk.infrastructure.events.data_stream_encoder import DATA_STREAM_HEADER, DATA_STREAM_VERSION

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bridge", tags=["bridge"])

DATA_STREAM_HEADERS = {DATA_STREAM_HEADER: DATA_STREAM_VERSION}


def extract_last_message(body: Any) -> str:
    """Content of the last entry in ``messages``; empty when there is none."""
    if not isinstance(body, dict):
        return ""
    messages = body.get("messages")
    if not isinstance(messages, list) or not messages:
        return ""
    last = messages[-1]
    content = last.get("content") if isinstance(last, dict) else None
    return content if isinstance(content, str) else ""


@router.post("/chat")
async def bridge_chat(request: Request):
    try:
        body = await request.json()
    except ValueError:
        body = None

    message = extract_last_message(body)
    if not message:
        return JSONResponse(status_code=400, content={"error": "No message provided"})

    payload: Dict[str, Any] = {"message": message}
    for key in ("sessionId", "context"):
        if body.get(key) is not None:
            payload[key] = body[key]

    return StreamingResponse(
        app_factory.get_bridge().stream(payload),
        media_type="text/plain; charset=utf-8",
        headers=DATA_STREAM_HEADERS,
    )
