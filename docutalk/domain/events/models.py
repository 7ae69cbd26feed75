"""Turn events: the only values ever placed on the chat wire.

Each concrete event knows its ``type`` discriminator and the type-specific
fields it carries. Field names in ``payload()`` are the wire names.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List


@dataclass(frozen=True)
class TurnEvent:
    """Base class for turn events."""
    type: ClassVar[str] = ""

    def payload(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, **self.payload()}


@dataclass(frozen=True)
class TokenEvent(TurnEvent):
    content: str
    type: ClassVar[str] = "token"

    def payload(self) -> Dict[str, Any]:
        return {"content": self.content}


@dataclass(frozen=True)
class ToolExecutingEvent(TurnEvent):
    tools: List[str] = field(default_factory=list)
    type: ClassVar[str] = "tool_executing"

    def payload(self) -> Dict[str, Any]:
        return {"tools": list(self.tools)}


@dataclass(frozen=True)
class ToolResultEvent(TurnEvent):
    tool: str
    result: str
    type: ClassVar[str] = "tool_result"

    def payload(self) -> Dict[str, Any]:
        return {"tool": self.tool, "result": self.result}


@dataclass(frozen=True)
class ToolErrorEvent(TurnEvent):
    tool: str
    error: str
    type: ClassVar[str] = "tool_error"

    def payload(self) -> Dict[str, Any]:
        return {"tool": self.tool, "error": self.error}


@dataclass(frozen=True)
class SessionEvent(TurnEvent):
    session_id: str
    type: ClassVar[str] = "session"

    def payload(self) -> Dict[str, Any]:
        return {"sessionId": self.session_id}


@dataclass(frozen=True)
class ErrorEvent(TurnEvent):
    message: str
    type: ClassVar[str] = "error"

    def payload(self) -> Dict[str, Any]:
        return {"message": self.message}


@dataclass(frozen=True)
class DoneEvent(TurnEvent):
    type: ClassVar[str] = "done"
