"""Streaming methods for LiteLLMCaller.

Mixed into LiteLLMCaller via LiteLLMStreamingMixin.
"""

import asyncio
import logging
from typing import Any, AsyncGenerator, Dict, List, Optional

from litellm import acompletion

from docutalk.core.metrics_logger import METRIC_LLM_CALL, log_metric

from .models import GenerationChunk, ToolCallFragment

logger = logging.getLogger(__name__)


def chunk_from_delta(delta: Any) -> GenerationChunk:
    """Convert a LiteLLM streaming delta into a GenerationChunk."""
    if delta is None:
        return GenerationChunk()

    text = getattr(delta, "content", None) or ""
    fragments = []
    for tc_delta in getattr(delta, "tool_calls", None) or []:
        function = getattr(tc_delta, "function", None)
        fragments.append(ToolCallFragment(
            index=getattr(tc_delta, "index", None) or 0,
            id=getattr(tc_delta, "id", None) or None,
            name=(getattr(function, "name", None) or "") if function else "",
            arguments=(getattr(function, "arguments", None) or "") if function else "",
        ))
    return GenerationChunk(text=text, tool_call_fragments=tuple(fragments))


class LiteLLMStreamingMixin:
    """Mixin providing streaming LLM methods for LiteLLMCaller.

    Expects the host class to provide:
      - model_name attribute
      - _get_model_kwargs(temperature) -> dict
    """

    async def stream_completion(
        self,
        messages: List[Dict[str, Any]],
        tools_schema: Optional[List[Dict[str, Any]]] = None,
        temperature: Optional[float] = None,
        session_id: Optional[str] = None,
    ) -> AsyncGenerator[GenerationChunk, None]:
        """Stream a completion chunk by chunk.

        Tools are advertised only when ``tools_schema`` is non-empty. The
        upstream response is closed when the consumer stops iterating early.
        """
        model_kwargs = self._get_model_kwargs(temperature)
        if tools_schema:
            model_kwargs["tools"] = tools_schema
            model_kwargs["tool_choice"] = "auto"

        total_chars = sum(len(str(msg.get("content") or "")) for msg in messages)
        logger.info(
            "Streaming LLM call: %d messages, %d chars, %d tools",
            len(messages), total_chars, len(tools_schema or []),
        )

        try:
            response = await acompletion(
                model=self.model_name,
                messages=messages,
                stream=True,
                **model_kwargs,
            )
        except Exception as exc:
            logger.error("Error starting streaming LLM call: %s", exc, exc_info=True)
            raise

        chunk_count = 0
        try:
            async for raw_chunk in response:
                delta = raw_chunk.choices[0].delta if raw_chunk.choices else None
                chunk = chunk_from_delta(delta)
                if chunk.is_empty:
                    continue
                chunk_count += 1
                yield chunk
                # Yield control periodically to prevent backpressure buildup
                if chunk_count % 50 == 0:
                    await asyncio.sleep(0)
        except Exception as exc:
            logger.error("Error in streaming LLM call after %d chunks: %s", chunk_count, exc, exc_info=True)
            raise
        finally:
            close = getattr(response, "aclose", None)
            if close is not None:
                await close()

        log_metric(
            METRIC_LLM_CALL, session_id, model=self.model_name,
            message_count=len(messages), chunk_count=chunk_count,
            tools_advertised=bool(tools_schema),
        )
