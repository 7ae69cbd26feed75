"""
Pure accumulation of streamed generation chunks.

Tool-call fragments are only meaningful once the stream has ended: argument
strings arrive split at arbitrary points and parallel calls interleave. The
accumulator is an immutable value and ``accumulate`` is a left fold over the
chunk sequence, so the merge logic can be tested without any transport.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from functools import reduce
from typing import Any, Dict, Iterable, List, Mapping, Optional

from docutalk.domain.messages.models import ToolCall

from .models import GenerationChunk, ToolCallFragment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartialToolCall:
    """Running state of one tool call while its fragments stream in."""
    index: int
    id: str = ""
    name: str = ""
    arguments: str = ""

    def merge(self, fragment: ToolCallFragment) -> "PartialToolCall":
        return replace(
            self,
            id=fragment.id or self.id,
            name=self.name + (fragment.name or ""),
            arguments=self.arguments + (fragment.arguments or ""),
        )


@dataclass(frozen=True)
class ToolCallAccumulator:
    """Accumulated text plus index-aligned partial tool calls."""
    text: str = ""
    calls: Mapping[int, PartialToolCall] = field(default_factory=dict)

    def merge_fragment(self, fragment: ToolCallFragment) -> "ToolCallAccumulator":
        current = self.calls.get(fragment.index, PartialToolCall(index=fragment.index))
        calls = dict(self.calls)
        calls[fragment.index] = current.merge(fragment)
        return replace(self, calls=calls)

    def merge_chunk(self, chunk: GenerationChunk) -> "ToolCallAccumulator":
        merged = self
        for fragment in chunk.tool_call_fragments:
            merged = merged.merge_fragment(fragment)
        if chunk.text:
            merged = replace(merged, text=merged.text + chunk.text)
        return merged

    def complete_calls(self) -> List[ToolCall]:
        """Tool calls in index order. Calls that never received a name are dropped."""
        result: List[ToolCall] = []
        for idx in sorted(self.calls):
            partial = self.calls[idx]
            if not partial.name:
                logger.warning("Dropping tool call at index %d with no name", idx)
                continue
            result.append(ToolCall(
                id=partial.id or f"call_{idx}",
                name=partial.name,
                arguments=parse_tool_arguments(partial.arguments),
            ))
        return result


def accumulate(
    chunks: Iterable[GenerationChunk],
    initial: Optional[ToolCallAccumulator] = None,
) -> ToolCallAccumulator:
    """Fold a chunk sequence into one accumulator."""
    return reduce(lambda acc, chunk: acc.merge_chunk(chunk), chunks, initial or ToolCallAccumulator())


def _try_repair_json(raw: str) -> Optional[Dict[str, Any]]:
    """Attempt to repair truncated JSON from LLM tool arguments.

    Common cases: missing opening/closing braces, trailing quote.
    """
    s = raw.strip()
    if not s.startswith("{"):
        s = "{" + s
    if not s.endswith("}"):
        s = s + "}"
    try:
        result = json.loads(s)
        if isinstance(result, dict):
            return result
    except json.JSONDecodeError:
        pass
    # Try closing an open string value: e.g. {"topic": "neural net
    if s.count('"') % 2 != 0:
        s = s.rstrip("}") + '"}'
        try:
            result = json.loads(s)
            if isinstance(result, dict):
                return result
        except json.JSONDecodeError:
            pass
    return None


def parse_tool_arguments(raw: str) -> Dict[str, Any]:
    """Parse an accumulated argument string into a dict (empty on failure)."""
    if not raw or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        repaired = _try_repair_json(raw)
        if repaired is not None:
            logger.info("Repaired truncated tool arguments")
            return repaired
        logger.warning("Could not parse tool arguments (len=%d); using empty arguments", len(raw))
        return {}
    if not isinstance(parsed, dict):
        logger.warning("Tool arguments are not an object (got %s); using empty arguments", type(parsed).__name__)
        return {}
    return parsed
