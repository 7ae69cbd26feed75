"""
Metrics logging for chat turns without capturing conversation content.

Every line carries the [METRIC] prefix and the session id, followed by
metadata about one of the events below:

    turn       - a turn reached DONE (tool_calls, synthesized, duration_ms)
    retrieval  - a similarity search returned (passage_count)
    llm_call   - a generation call finished (model, message_count, chunk_count)
    tool_call  - one tool invocation ended (tool, success, duration_ms)
    error      - a turn ended in ERRORED (error_type, state)

Fields that could hold user or document text (the question, retrieved
passages, tool arguments, answers) are dropped before formatting.

Usage:
    from docutalk.core.metrics_logger import METRIC_TOOL_CALL, log_metric

    log_metric(METRIC_TOOL_CALL, session_id, tool="list_documents", success=True)
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

METRIC_TURN = "turn"
METRIC_RETRIEVAL = "retrieval"
METRIC_LLM_CALL = "llm_call"
METRIC_TOOL_CALL = "tool_call"
METRIC_ERROR = "error"

METRIC_EVENTS = frozenset({
    METRIC_TURN,
    METRIC_RETRIEVAL,
    METRIC_LLM_CALL,
    METRIC_TOOL_CALL,
    METRIC_ERROR,
})

CONTENT_FIELDS = frozenset({
    "message", "query", "content", "context", "passages",
    "arguments", "result", "answer", "prompt",
})


def log_metric(
    event_type: str,
    session_id: Optional[str] = None,
    **kwargs: Any
) -> None:
    """
    Log a metric event for a chat session.

    Respects FEATURE_METRICS_LOGGING_ENABLED; when disabled nothing is logged.

    Args:
        event_type: One of METRIC_EVENTS; anything else is logged as a warning and skipped
        session_id: Conversation id (will be sanitized)
        **kwargs: Metadata; keys in CONTENT_FIELDS are dropped
    """
    # Import here to avoid circular dependencies
    from docutalk.core.log_sanitizer import sanitize_for_logging
    from docutalk.modules.config import config_manager

    if not config_manager.app_settings.feature_metrics_logging_enabled:
        return

    if event_type not in METRIC_EVENTS:
        logger.warning("Unknown metric event %s not logged", sanitize_for_logging(event_type))
        return

    sanitized_session = sanitize_for_logging(session_id) if session_id else "unknown"

    parts = [f"[METRIC] [{sanitized_session}] {event_type}"]

    metadata_parts = [
        f"{key}={sanitize_for_logging(value)}"
        for key, value in kwargs.items()
        if key not in CONTENT_FIELDS
    ]
    if metadata_parts:
        parts.append(" ".join(metadata_parts))

    logger.info(" ".join(parts))
