"""
Tool execution utilities - look up, invoke and wrap a single tool call.

Failures are scoped to the call: a missing tool or a raising implementation
produces an error ToolResult, never an exception to the caller.
"""

import logging
import time
from typing import Any, Dict, Optional

from docutalk.core.log_sanitizer import sanitize_for_logging
from docutalk.core.metrics_logger import METRIC_TOOL_CALL, log_metric
from docutalk.domain.errors import DomainError, ToolNotFoundError
from docutalk.domain.messages.models import ToolCall, ToolResult
from docutalk.interfaces.tools import ToolRegistryProtocol
from docutalk.modules.tools.registry import CLIENT_CONTEXT_ARG

logger = logging.getLogger(__name__)


def inject_context_into_args(
    arguments: Dict[str, Any],
    ambient_context: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """Return a copy of the arguments with the session's client context merged in."""
    merged = dict(arguments or {})
    merged[CLIENT_CONTEXT_ARG] = ambient_context
    return merged


class ToolInvoker:
    """Executes tool calls against a static registry."""

    def __init__(self, registry: ToolRegistryProtocol):
        self.registry = registry

    async def invoke(
        self,
        tool_call: ToolCall,
        ambient_context: Optional[Dict[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> ToolResult:
        safe_name = sanitize_for_logging(tool_call.name)
        tool = self.registry.get(tool_call.name)
        if tool is None:
            error = ToolNotFoundError(f"Tool '{tool_call.name}' not found")
            logger.warning("Tool not found: %s", safe_name)
            log_metric(METRIC_TOOL_CALL, session_id, tool=safe_name, success=False, reason="not_found")
            return ToolResult(tool_call_id=tool_call.id, name=tool_call.name, error=error.message)

        arguments = inject_context_into_args(tool_call.arguments, ambient_context)
        started = time.monotonic()
        try:
            output = await tool.invoke(arguments)
        except DomainError as e:
            logger.warning("Tool %s failed: %s", safe_name, sanitize_for_logging(e.message))
            log_metric(METRIC_TOOL_CALL, session_id, tool=safe_name, success=False)
            return ToolResult(tool_call_id=tool_call.id, name=tool_call.name, error=e.message)
        except Exception as e:
            logger.error("Error executing tool %s: %s", safe_name, e, exc_info=True)
            log_metric(METRIC_TOOL_CALL, session_id, tool=safe_name, success=False)
            return ToolResult(tool_call_id=tool_call.id, name=tool_call.name, error=str(e) or type(e).__name__)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info("Tool %s completed in %dms (%d chars)", safe_name, elapsed_ms, len(output))
        log_metric(METRIC_TOOL_CALL, session_id, tool=safe_name, success=True, duration_ms=elapsed_ms)
        return ToolResult(tool_call_id=tool_call.id, name=tool_call.name, output=output)
