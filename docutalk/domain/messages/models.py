"""Domain models for messages and tool calls."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class MessageRole(Enum):
    """Message role enumeration."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


@dataclass(frozen=True)
class Message:
    """A single history entry. Frozen once appended to a session."""
    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_llm(self) -> Dict[str, str]:
        """Render as an LLM API message."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class ToolCall:
    """A complete tool-call request assembled from a finished stream."""
    id: str
    name: str
    arguments: Dict[str, Any]

    def to_llm(self) -> Dict[str, Any]:
        """Render in the OpenAI `tool_calls` shape for the assistant placeholder turn.

        Arguments are re-serialized from the parsed dict so the placeholder
        always carries the valid JSON the tool actually ran with.
        """
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.name,
                "arguments": json.dumps(self.arguments),
            },
        }


@dataclass
class ToolResult:
    """Outcome of one tool invocation; exactly one of output/error is set."""
    tool_call_id: str
    name: str
    output: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def content_for_llm(self) -> str:
        if self.error is not None:
            return f"Error: {self.error}"
        return self.output or ""

    def to_llm(self) -> Dict[str, Any]:
        """Render as a `tool` role message keyed by the originating call id."""
        return {
            "role": MessageRole.TOOL.value,
            "tool_call_id": self.tool_call_id,
            "name": self.name,
            "content": self.content_for_llm(),
        }
