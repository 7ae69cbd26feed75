"""
Transport loop for the stage-1 -> stage-2 bridge.

Only I/O and line buffering live here; the per-line mapping is in
``infrastructure.events.data_stream_encoder``.
"""

import logging
from contextlib import aclosing
from typing import Any, AsyncIterable, AsyncIterator, Dict, Optional

import httpx

from docutalk.domain.errors import BridgeUpstreamError
from docutalk.infrastructure.events.data_stream_encoder import (
    FINISH_LINE,
    error_line,
    is_terminal,
    translate_line,
)

logger = logging.getLogger(__name__)


async def bridge_stream(chunks: AsyncIterable[str]) -> AsyncIterator[str]:
    """
    Re-encode an incrementally read stage-1 stream.

    Chunks may split lines anywhere; a trailing partial line is carried to the
    next read and only complete lines are translated. The output always ends
    with exactly one finish line: the upstream ``done`` if it arrives, a
    synthesized one otherwise.
    """
    buffer = ""
    async for chunk in chunks:
        buffer += chunk
        *lines, buffer = buffer.split("\n")
        for line in lines:
            translated = translate_line(line)
            if translated is None:
                continue
            yield translated
            if is_terminal(translated):
                return
    if buffer:
        logger.debug("Discarding %d chars of unterminated trailing data", len(buffer))
    logger.info("Upstream ended without a done event; sending finish")
    yield FINISH_LINE


class DataStreamBridge:
    """Calls the chat endpoint and streams its events as stage-2 lines."""

    def __init__(
        self,
        upstream_url: str,
        timeout: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.upstream_url = upstream_url
        self.timeout = timeout
        self._transport = transport

    async def stream(self, payload: Dict[str, Any]) -> AsyncIterator[str]:
        """
        Yield stage-2 lines for one turn.

        Upstream failures never propagate: a connection error or non-2xx status
        becomes a single error line, a failure mid-stream ends with one.
        """
        streaming = False
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                async with client.stream("POST", self.upstream_url, json=payload) as response:
                    if not response.is_success:
                        raise BridgeUpstreamError(
                            f"Backend error: {response.status_code}",
                            code="BRIDGE_UPSTREAM_STATUS",
                        )
                    async with aclosing(bridge_stream(response.aiter_text())) as lines:
                        async for line in lines:
                            streaming = True
                            yield line
        except BridgeUpstreamError as e:
            logger.warning("Bridge upstream rejected request: %s", e.message)
            yield error_line(e.message)
        except httpx.HTTPError as e:
            if streaming:
                logger.error("Bridge upstream failed mid-stream: %s", e)
                error = BridgeUpstreamError(
                    f"Stream error: {type(e).__name__}",
                    code="BRIDGE_UPSTREAM_INTERRUPTED",
                )
            else:
                logger.error("Bridge upstream failure: %s", e)
                error = BridgeUpstreamError(
                    f"Failed to reach backend: {type(e).__name__}",
                    code="BRIDGE_UPSTREAM_UNREACHABLE",
                )
            yield error_line(error.message)
