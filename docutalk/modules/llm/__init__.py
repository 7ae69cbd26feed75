"""LLM module: LiteLLM generation client and pure chunk accumulation."""

from .accumulator import ToolCallAccumulator, accumulate, parse_tool_arguments
from .litellm_caller import LiteLLMCaller
from .models import GenerationChunk, ToolCallFragment

__all__ = [
    "GenerationChunk",
    "LiteLLMCaller",
    "ToolCallAccumulator",
    "ToolCallFragment",
    "accumulate",
    "parse_tool_arguments",
]
