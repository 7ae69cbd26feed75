"""Chat routes: the streaming turn endpoint and session lifecycle.

The turn endpoint speaks the stage-1 protocol: ``text/event-stream`` with one
``data: <json>`` frame per event.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from docutalk.application.chat.orchestrator import TurnRequest
from docutalk.core.log_sanitizer import preview_for_logging, sanitize_for_logging
from docutalk.domain.errors import SessionNotFoundError, ValidationError
from docutalk.infrastructure.app_factory import app_factory
from docutalk.infrastructure.events.sse_encoder import encode_events

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@router.get("/health")
async def chat_health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "service": "chat",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("")
async def chat(request: Request):
    """Run one conversation turn and stream its events."""
    try:
        payload = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Request body must be valid JSON"})

    try:
        turn = TurnRequest.from_payload(payload)
    except ValidationError as e:
        logger.info("Rejected chat request: %s", e.message)
        return JSONResponse(status_code=400, content={"error": e.message})

    logger.info(
        "Chat request for session %s: %s",
        sanitize_for_logging(turn.session_id), preview_for_logging(turn.message),
    )
    orchestrator = app_factory.create_orchestrator()
    return StreamingResponse(
        encode_events(orchestrator.run_turn(turn)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.delete("/session/{session_id}")
async def clear_session(session_id: str) -> Dict[str, Any]:
    """Clear a session; succeeds whether or not it exists."""
    await app_factory.get_session_store().clear(session_id)
    return {
        "success": True,
        "message": f"Session {session_id} cleared successfully",
    }


@router.get("/session/{session_id}")
async def get_session_info(session_id: str):
    try:
        info = await app_factory.get_session_store().get_info(session_id)
    except SessionNotFoundError:
        return JSONResponse(status_code=404, content={"success": False, "error": "Session not found"})
    return {"success": True, "session": info}
