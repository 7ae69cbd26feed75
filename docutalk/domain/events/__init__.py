"""Turn event models."""

from .models import (
    DoneEvent,
    ErrorEvent,
    SessionEvent,
    TokenEvent,
    ToolErrorEvent,
    ToolExecutingEvent,
    ToolResultEvent,
    TurnEvent,
)

__all__ = [
    "TurnEvent",
    "TokenEvent",
    "ToolExecutingEvent",
    "ToolResultEvent",
    "ToolErrorEvent",
    "SessionEvent",
    "ErrorEvent",
    "DoneEvent",
]
