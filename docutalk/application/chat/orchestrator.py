"""
Turn orchestrator - drives one conversation turn end to end.

States: RETRIEVING -> GENERATING -> (TOOL_EXECUTING -> SYNTHESIZING)? -> DONE,
with ERRORED reachable from any of them. ``run_turn`` is an async generator of
TurnEvents; the transport layer decides how they reach the client.
"""

import asyncio
import logging
import time
import uuid
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncGenerator, AsyncIterator, Dict, List, Mapping, Optional

from docutalk.core.log_sanitizer import sanitize_for_logging
from docutalk.core.metrics_logger import METRIC_ERROR, METRIC_RETRIEVAL, METRIC_TURN, log_metric
from docutalk.domain.errors import (
    ConfigurationError,
    DomainError,
    LLMTimeoutError,
    RetrievalError,
    ValidationError,
)
from docutalk.domain.events import (
    DoneEvent,
    ErrorEvent,
    SessionEvent,
    TokenEvent,
    ToolErrorEvent,
    ToolExecutingEvent,
    ToolResultEvent,
    TurnEvent,
)
from docutalk.domain.messages.models import MessageRole, ToolCall, ToolResult
from docutalk.interfaces.llm import LLMProtocol
from docutalk.interfaces.rag import RetrievalClientProtocol
from docutalk.interfaces.sessions import SessionStore
from docutalk.interfaces.tools import ToolRegistryProtocol
from docutalk.modules.llm.accumulator import ToolCallAccumulator
from docutalk.modules.llm.models import GenerationChunk
from docutalk.modules.prompts.prompt_provider import PromptProvider
from docutalk.modules.rag.client import format_context

from .preprocessors.message_builder import build_first_pass_messages, build_synthesis_messages
from .utilities.error_handler import classify_llm_error, user_message_for
from .utilities.tool_executor import ToolInvoker

logger = logging.getLogger(__name__)

SYNTHESIS_POLICIES = ("reuse", "refetch")


class TurnState(Enum):
    RETRIEVING = "retrieving"
    GENERATING = "generating"
    TOOL_EXECUTING = "tool_executing"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    ERRORED = "errored"


@dataclass(frozen=True)
class TurnRequest:
    """A validated inbound turn."""
    message: str
    session_id: str
    context: Optional[Dict[str, Any]] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "TurnRequest":
        """Validate a raw request body; a missing session id gets a fresh uuid4."""
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")

        message = payload.get("message")
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Message is required and must be a string")

        session_id = payload.get("sessionId")
        if session_id is not None and not isinstance(session_id, str):
            raise ValidationError("sessionId must be a string")

        context = payload.get("context")
        if context is not None and not isinstance(context, Mapping):
            raise ValidationError("context must be an object")

        return cls(
            message=message,
            session_id=session_id or str(uuid.uuid4()),
            context=dict(context) if context is not None else None,
        )


class TurnOrchestrator:
    """Runs retrieval, streaming generation, tool execution and synthesis for one turn."""

    def __init__(
        self,
        session_store: SessionStore,
        retrieval: RetrievalClientProtocol,
        llm: LLMProtocol,
        tool_registry: ToolRegistryProtocol,
        prompt_provider: PromptProvider,
        tool_invoker: Optional[ToolInvoker] = None,
        stream_idle_timeout: Optional[float] = 60.0,
        synthesis_retrieval_policy: str = "reuse",
    ):
        if synthesis_retrieval_policy not in SYNTHESIS_POLICIES:
            raise ConfigurationError(
                f"Unknown synthesis retrieval policy '{synthesis_retrieval_policy}'",
                code="INVALID_SYNTHESIS_POLICY",
            )
        self.session_store = session_store
        self.retrieval = retrieval
        self.llm = llm
        self.tool_registry = tool_registry
        self.prompt_provider = prompt_provider
        self.tool_invoker = tool_invoker or ToolInvoker(tool_registry)
        self.stream_idle_timeout = stream_idle_timeout or None
        self.synthesis_retrieval_policy = synthesis_retrieval_policy

    async def run_turn(self, request: TurnRequest) -> AsyncGenerator[TurnEvent, None]:
        """
        Yield the events of one turn in order.

        Emits ``session`` first, then either progress events closed by ``done``
        or a single ``error``. The user message and the answer are appended to
        the session only when the turn reaches DONE.
        """
        session_id = request.session_id
        safe_session = sanitize_for_logging(session_id)
        started = time.monotonic()

        await self.session_store.get_or_create(session_id)
        if request.context is not None:
            await self.session_store.set_context(session_id, request.context)
        history = await self.session_store.get_messages(session_id)

        logger.info("Turn started for session %s (%d history messages)", safe_session, len(history))
        yield SessionEvent(session_id=session_id)

        state = TurnState.RETRIEVING
        tool_calls: List[ToolCall] = []
        try:
            context = await self._retrieve(request.message, session_id)

            state = self._transition(state, TurnState.GENERATING, safe_session)
            messages = build_first_pass_messages(
                self.prompt_provider.get_system_prompt(),
                context,
                history,
                request.message,
            )
            accumulator = ToolCallAccumulator()
            async with aclosing(self._generate(messages, self.tool_registry.get_tools_schema(), session_id)) as chunks:
                async for chunk in chunks:
                    accumulator = accumulator.merge_chunk(chunk)
                    if chunk.text:
                        yield TokenEvent(content=chunk.text)

            answer = accumulator.text
            tool_calls = accumulator.complete_calls()

            if tool_calls:
                state = self._transition(state, TurnState.TOOL_EXECUTING, safe_session)
                yield ToolExecutingEvent(tools=[tc.name for tc in tool_calls])

                ambient_context = await self.session_store.get_context(session_id)
                results: List[ToolResult] = []
                for tool_call in tool_calls:
                    result = await self.tool_invoker.invoke(tool_call, ambient_context, session_id)
                    results.append(result)
                    if result.success:
                        yield ToolResultEvent(tool=tool_call.name, result=result.output or "")
                    else:
                        yield ToolErrorEvent(tool=tool_call.name, error=result.error or "")

                state = self._transition(state, TurnState.SYNTHESIZING, safe_session)
                if self.synthesis_retrieval_policy == "refetch":
                    context = await self._retrieve(request.message, session_id)
                synthesis_messages = build_synthesis_messages(
                    self.prompt_provider.get_synthesis_prompt(context),
                    history,
                    request.message,
                    tool_calls,
                    results,
                )
                parts: List[str] = []
                async with aclosing(self._generate(synthesis_messages, None, session_id)) as chunks:
                    async for chunk in chunks:
                        if chunk.text:
                            parts.append(chunk.text)
                            yield TokenEvent(content=chunk.text)
                answer = "".join(parts)
        except Exception as exc:
            message = self._describe_failure(state, exc)
            logger.error(
                "Turn for session %s failed in state %s: %s",
                safe_session, state.value, exc, exc_info=not isinstance(exc, DomainError),
            )
            log_metric(METRIC_ERROR, session_id, error_type=type(exc).__name__, state=state.value)
            yield ErrorEvent(message=message)
            return

        # A session cleared or swept while the turn ran stays gone
        if await self.session_store.exists(session_id):
            await self.session_store.append_message(session_id, MessageRole.USER, request.message)
            await self.session_store.append_message(session_id, MessageRole.ASSISTANT, answer)
        else:
            logger.info("Session %s was removed during the turn; answer not persisted", safe_session)
        self._transition(state, TurnState.DONE, safe_session)

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Turn completed for session %s in %dms (%d tool calls, %d chars)",
            safe_session, duration_ms, len(tool_calls), len(answer),
        )
        log_metric(
            METRIC_TURN, session_id, tool_calls=len(tool_calls),
            synthesized=bool(tool_calls), duration_ms=duration_ms,
        )
        yield DoneEvent()

    async def _retrieve(self, query: str, session_id: str) -> str:
        passages = await self.retrieval.search(query)
        log_metric(METRIC_RETRIEVAL, session_id, passage_count=len(passages))
        return format_context(passages)

    async def _generate(
        self,
        messages: List[Dict[str, Any]],
        tools_schema: Optional[List[Dict[str, Any]]],
        session_id: str,
    ) -> AsyncIterator[GenerationChunk]:
        """Stream chunks, failing when the model stays silent past the idle timeout."""
        stream = self.llm.stream_completion(
            messages,
            tools_schema=tools_schema or None,
            session_id=session_id,
        )
        async with aclosing(stream):
            while True:
                try:
                    chunk = await asyncio.wait_for(stream.__anext__(), timeout=self.stream_idle_timeout)
                except StopAsyncIteration:
                    return
                except asyncio.TimeoutError:
                    raise LLMTimeoutError(
                        "The AI service stopped responding. Please try again.",
                        code="LLM_STREAM_IDLE_TIMEOUT",
                    ) from None
                yield chunk

    @staticmethod
    def _transition(current: TurnState, target: TurnState, safe_session: str) -> TurnState:
        logger.debug("Session %s: %s -> %s", safe_session, current.value, target.value)
        return target

    @staticmethod
    def _describe_failure(state: TurnState, exc: Exception) -> str:
        if isinstance(exc, RetrievalError):
            return f"Failed to retrieve document context: {exc.message}"
        if state in (TurnState.GENERATING, TurnState.SYNTHESIZING):
            _, user_msg, log_msg = classify_llm_error(exc)
            logger.error(log_msg)
            return user_msg
        return user_message_for(exc)
