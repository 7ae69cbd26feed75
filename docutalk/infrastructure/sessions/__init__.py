"""Session storage implementations."""

from .in_memory_repository import InMemorySessionStore

__all__ = ["InMemorySessionStore"]
