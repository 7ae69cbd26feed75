"""
Error handling utilities - pure functions for exception classification.
"""

import logging
from typing import Tuple

from docutalk.domain.errors import (
    DomainError,
    LLMAuthenticationError,
    LLMServiceError,
    LLMTimeoutError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


def classify_llm_error(error: Exception) -> Tuple[type, str, str]:
    """
    Classify LLM errors and return appropriate error type, user message, and log message.

    Returns:
        Tuple of (error_class, user_message, log_message).

    NOTE: user_message MUST NOT contain raw exception details or sensitive data.
    """
    error_str = str(error)
    error_type_name = type(error).__name__
    lowered = error_str.lower()

    if isinstance(error, LLMTimeoutError):
        return (LLMTimeoutError, error.message, f"Timeout error: {error_str}")

    # Check for rate limiting errors
    if "RateLimitError" in error_type_name or "rate limit" in lowered or "high traffic" in lowered:
        user_msg = "The AI service is experiencing high traffic. Please try again in a moment."
        log_msg = f"Rate limit error: {error_str}"
        return (RateLimitError, user_msg, log_msg)

    # Check for timeout errors
    if "Timeout" in error_type_name or "timeout" in lowered or "timed out" in lowered:
        user_msg = "The AI service request timed out. Please try again."
        log_msg = f"Timeout error: {error_str}"
        return (LLMTimeoutError, user_msg, log_msg)

    # Check for authentication/authorization errors
    if any(keyword in lowered for keyword in ["unauthorized", "authentication", "invalid api key", "invalid_api_key", "api key"]):
        user_msg = "There was an authentication issue with the AI service. Please contact your administrator."
        log_msg = f"Authentication error: {error_str}"
        return (LLMAuthenticationError, user_msg, log_msg)

    # Generic LLM service error
    user_msg = "The AI service encountered an error. Please try again or contact support if the issue persists."
    log_msg = f"LLM error: {error_str}"
    return (LLMServiceError, user_msg, log_msg)


def user_message_for(error: Exception) -> str:
    """Message safe to put on the wire for a turn-aborting failure."""
    if isinstance(error, DomainError):
        return error.message
    return "An unexpected error occurred while processing your message."
