"""Tool registry and built-in document tools."""

from .document_tools import create_document_tools
from .registry import CLIENT_CONTEXT_ARG, Tool, ToolRegistry

__all__ = [
    "CLIENT_CONTEXT_ARG",
    "Tool",
    "ToolRegistry",
    "create_document_tools",
]
