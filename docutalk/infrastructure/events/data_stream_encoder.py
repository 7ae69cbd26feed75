"""
Stage-2 wire encoding for clients that speak the AI SDK data stream protocol.

    token          -> 0:"<text>"
    tool_executing -> 2:[{type, tools}]
    tool_result    -> 2:[{type, tool, result}]
    tool_error     -> 2:[{type, tool, error}]
    session        -> 2:[{type, sessionId}]
    error          -> 3:"<message>"
    done           -> d:{finishReason, usage}

Everything here is a pure function of its input.
"""

from typing import Any, Dict, Optional

from .sse_encoder import decode_line, dump_json

DATA_STREAM_HEADER = "X-Vercel-AI-Data-Stream"
DATA_STREAM_VERSION = "v1"

FINISH_LINE = 'd:{"finishReason":"stop","usage":{"promptTokens":0,"completionTokens":0}}\n'


def text_line(text: str) -> str:
    return f"0:{dump_json(text)}\n"


def annotation_line(annotation: Dict[str, Any]) -> str:
    return f"2:{dump_json([annotation])}\n"


def error_line(message: Optional[str]) -> str:
    return f"3:{dump_json(message or 'Unknown error')}\n"


def translate_event(event: Dict[str, Any]) -> Optional[str]:
    """Map one decoded stage-1 event to its stage-2 line; unknown types give None."""
    event_type = event.get("type")
    if event_type == "token":
        return text_line(str(event.get("content") or ""))
    if event_type == "tool_executing":
        return annotation_line({"type": "tool_executing", "tools": event.get("tools")})
    if event_type == "tool_result":
        return annotation_line({"type": "tool_result", "tool": event.get("tool"), "result": event.get("result")})
    if event_type == "tool_error":
        return annotation_line({"type": "tool_error", "tool": event.get("tool"), "error": event.get("error")})
    if event_type == "session":
        return annotation_line({"type": "session", "sessionId": event.get("sessionId")})
    if event_type == "error":
        return error_line(event.get("message"))
    if event_type == "done":
        return FINISH_LINE
    return None


def translate_line(line: str) -> Optional[str]:
    """Stage-1 line in, stage-2 line out; malformed or irrelevant lines give None."""
    event = decode_line(line)
    if event is None:
        return None
    return translate_event(event)


def is_terminal(stage2_line: str) -> bool:
    return stage2_line == FINISH_LINE
