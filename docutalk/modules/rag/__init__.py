"""Retrieval module: similarity-search client and context formatting."""

from .client import HttpRetrievalClient, Passage, format_context

__all__ = [
    "HttpRetrievalClient",
    "Passage",
    "format_context",
]
