"""Interfaces layer - protocols and contracts."""

from .llm import LLMProtocol
from .rag import RetrievalClientProtocol
from .sessions import SessionStore
from .tools import ToolProtocol, ToolRegistryProtocol

__all__ = [
    "LLMProtocol",
    "RetrievalClientProtocol",
    "SessionStore",
    "ToolProtocol",
    "ToolRegistryProtocol",
]
