"""LLM interface protocols."""

from typing import Any, AsyncGenerator, Dict, List, Optional, Protocol, runtime_checkable

from docutalk.modules.llm.models import GenerationChunk


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for generation clients."""

    async def call_plain(
        self,
        messages: List[Dict[str, Any]],
        temperature: Optional[float] = None,
        session_id: Optional[str] = None,
    ) -> str:
        """Plain completion without tools."""
        ...

    def stream_completion(
        self,
        messages: List[Dict[str, Any]],
        tools_schema: Optional[List[Dict[str, Any]]] = None,
        temperature: Optional[float] = None,
        session_id: Optional[str] = None,
    ) -> AsyncGenerator[GenerationChunk, None]:
        """Stream a completion, advertising tools when a schema is given."""
        ...
