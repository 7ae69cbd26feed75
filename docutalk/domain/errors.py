"""Domain-level errors and exceptions."""

from typing import Optional


class DomainError(Exception):
    """Base domain error."""
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(DomainError):
    """Validation error."""
    pass


class SessionError(DomainError):
    """Session-related error."""
    pass


class SessionNotFoundError(SessionError):
    """Raised when a session cannot be found."""
    pass


class RetrievalError(DomainError):
    """Raised when the similarity search service is unreachable or failing."""
    pass


class AuthenticationError(DomainError):
    """Authentication error."""
    pass


class ConfigurationError(DomainError):
    """Configuration error."""
    pass


class LLMError(DomainError):
    """LLM-related error."""
    pass


class GenerationError(LLMError):
    """Raised when a generation call fails before or during streaming."""
    pass


class LLMServiceError(GenerationError):
    """Generic LLM service error."""
    pass


class RateLimitError(GenerationError):
    """Raised when the LLM provider is throttling requests."""
    pass


class LLMTimeoutError(GenerationError):
    """Raised when the LLM provider does not answer in time."""
    pass


class LLMAuthenticationError(AuthenticationError):
    """Raised when the LLM provider rejects our credentials."""
    pass


class ToolError(DomainError):
    """Tool execution error."""
    pass


class ToolNotFoundError(ToolError):
    """Raised when a requested tool is not registered."""
    pass


class ToolExecutionError(ToolError):
    """Raised when a tool implementation fails."""
    pass


class BridgeUpstreamError(DomainError):
    """Raised when the data-stream bridge cannot reach the chat stream."""
    pass
