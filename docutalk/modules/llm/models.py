"""
Data models for streamed generation output.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class ToolCallFragment:
    """One streamed slice of a tool call, addressed by the call's index."""
    index: int = 0
    id: Optional[str] = None
    name: str = ""
    arguments: str = ""


@dataclass(frozen=True)
class GenerationChunk:
    """One incremental unit of a streaming generation response.

    May be empty, text-only, tool-fragment-only, or both.
    """
    text: str = ""
    tool_call_fragments: Tuple[ToolCallFragment, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.tool_call_fragments
