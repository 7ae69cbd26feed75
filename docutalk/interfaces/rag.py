"""Retrieval interface protocols."""

from typing import List, Optional, Protocol, runtime_checkable

from docutalk.modules.rag.client import Passage


@runtime_checkable
class RetrievalClientProtocol(Protocol):
    """Protocol for retrieval clients.

    Enables dependency injection of the search backend and easier testing.
    """

    async def search(self, query: str, top_k: Optional[int] = None) -> List[Passage]:
        """Return the ranked passages for a query (fixed top-k, no pagination)."""
        ...

    async def list_sources(self) -> List[str]:
        """Return the source identifiers of every ingested document."""
        ...
