"""Message domain models."""

from .models import Message, MessageRole, ToolCall, ToolResult

__all__ = [
    "Message",
    "MessageRole",
    "ToolCall",
    "ToolResult",
]
