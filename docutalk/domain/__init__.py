"""Domain layer - pure business models and logic."""

from .errors import (
    BridgeUpstreamError,
    ConfigurationError,
    DomainError,
    GenerationError,
    LLMError,
    RetrievalError,
    SessionError,
    SessionNotFoundError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ValidationError,
)
from .messages.models import Message, MessageRole, ToolCall, ToolResult
from .sessions.models import Session

__all__ = [
    # Errors
    "DomainError",
    "ValidationError",
    "SessionError",
    "SessionNotFoundError",
    "RetrievalError",
    "ConfigurationError",
    "LLMError",
    "GenerationError",
    "ToolError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "BridgeUpstreamError",
    # Messages
    "Message",
    "MessageRole",
    "ToolCall",
    "ToolResult",
    # Sessions
    "Session",
]
