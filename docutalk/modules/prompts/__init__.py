"""Prompt loading."""

from .prompt_provider import BASE_RAG_INSTRUCTION, PromptProvider

__all__ = ["BASE_RAG_INSTRUCTION", "PromptProvider"]
