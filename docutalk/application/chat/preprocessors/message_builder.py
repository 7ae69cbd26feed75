"""
Message builder - assembles the LLM message lists for both generation passes.
"""

import logging
from typing import Any, Dict, List

from docutalk.domain.messages.models import Message, MessageRole, ToolCall, ToolResult

logger = logging.getLogger(__name__)


def render_user_turn(context: str, question: str) -> str:
    return f"Context:\n{context}\n\nQuestion: {question}"


def build_first_pass_messages(
    system_prompt: str,
    context: str,
    history: List[Message],
    user_message: str,
) -> List[Dict[str, Any]]:
    """System prompt, prior history, then the context-enriched user turn."""
    messages: List[Dict[str, Any]] = [{"role": MessageRole.SYSTEM.value, "content": system_prompt}]
    messages.extend(msg.to_llm() for msg in history)
    messages.append({
        "role": MessageRole.USER.value,
        "content": render_user_turn(context, user_message),
    })
    return messages


def build_synthesis_messages(
    synthesis_prompt: str,
    history: List[Message],
    user_message: str,
    tool_calls: List[ToolCall],
    tool_results: List[ToolResult],
) -> List[Dict[str, Any]]:
    """
    Input for the non-tool synthesis pass.

    The assistant placeholder re-states the original tool calls so every tool
    message that follows is keyed to a call id the model has seen.
    """
    messages: List[Dict[str, Any]] = [{"role": MessageRole.SYSTEM.value, "content": synthesis_prompt}]
    messages.extend(msg.to_llm() for msg in history)
    messages.append({"role": MessageRole.USER.value, "content": user_message})
    messages.append({
        "role": MessageRole.ASSISTANT.value,
        "content": "",
        "tool_calls": [tc.to_llm() for tc in tool_calls],
    })
    messages.extend(result.to_llm() for result in tool_results)
    logger.debug(
        "Built synthesis messages: %d history, %d tool results",
        len(history), len(tool_results),
    )
    return messages
