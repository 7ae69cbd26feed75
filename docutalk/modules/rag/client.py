"""HTTP client for the external similarity-search service.

Search API:
- Query:   POST /search  {query, collection, top_k} -> {passages: [{content, source, score}]}
- Sources: GET  /collections/{collection}/sources   -> {sources: [str]}
"""

import logging
from typing import Dict, List, Optional

import httpx
from pydantic import BaseModel

from docutalk.core.log_sanitizer import preview_for_logging
from docutalk.domain.errors import RetrievalError

logger = logging.getLogger(__name__)

PASSAGE_SEPARATOR = "\n\n---\n\n"


class Passage(BaseModel):
    """One retrieved passage: opaque text plus its source label."""
    content: str
    source: str = ""
    score: Optional[float] = None


def format_context(passages: List[Passage], label: str = "Document") -> str:
    """Concatenate passages into one positionally labelled context block."""
    return PASSAGE_SEPARATOR.join(
        f"[{label} {idx}]\n{passage.content}"
        for idx, passage in enumerate(passages, start=1)
    )


class HttpRetrievalClient:
    """Client for the external embedding/index service.

    Every failure (connection, timeout, non-2xx, malformed body) surfaces as
    RetrievalError; there are no retries.
    """

    def __init__(
        self,
        base_url: str,
        collection: str = "rag-collection",
        top_k: int = 4,
        bearer_token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the retrieval client.

        Args:
            base_url: Base URL for the search service.
            collection: Collection holding the ingested documents.
            top_k: Number of passages returned by search().
            bearer_token: Optional bearer token for the service.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests inject a MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.collection = collection
        self.top_k = top_k
        self.bearer_token = bearer_token
        self.timeout = timeout
        self._transport = transport

        logger.info(
            "HttpRetrievalClient initialized: url=%s, collection=%s, top_k=%d",
            self.base_url, self.collection, self.top_k,
        )

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def search(self, query: str, top_k: Optional[int] = None) -> List[Passage]:
        """Return the top-k passages for a query, best first."""
        k = top_k or self.top_k
        logger.info("Retrieval query (k=%d): %s", k, preview_for_logging(query))

        async with self._client() as client:
            try:
                response = await client.post(
                    f"{self.base_url}/search",
                    headers=self._get_headers(),
                    json={"query": query, "collection": self.collection, "top_k": k},
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "Search service returned status %d", exc.response.status_code,
                )
                raise RetrievalError(
                    f"Search service returned status {exc.response.status_code}",
                    code="RETRIEVAL_HTTP_ERROR",
                ) from exc
            except httpx.RequestError as exc:
                logger.error("Search service unreachable: %s", exc)
                raise RetrievalError("Search service is unreachable", code="RETRIEVAL_UNREACHABLE") from exc
            except ValueError as exc:
                logger.error("Search service returned invalid JSON: %s", exc)
                raise RetrievalError("Search service returned an invalid response", code="RETRIEVAL_BAD_RESPONSE") from exc

        try:
            passages = [Passage(**item) for item in data.get("passages", [])]
        except (AttributeError, TypeError, ValueError) as exc:
            logger.error("Malformed passages in search response: %s", exc)
            raise RetrievalError("Search service returned an invalid response", code="RETRIEVAL_BAD_RESPONSE") from exc

        logger.info("Retrieved %d passage(s)", len(passages))
        for idx, passage in enumerate(passages, start=1):
            logger.debug("  [Doc %d] %s", idx, preview_for_logging(passage.content))
        return passages[:k]

    async def list_sources(self) -> List[str]:
        """Return the source identifiers of every ingested document."""
        async with self._client() as client:
            try:
                response = await client.get(
                    f"{self.base_url}/collections/{self.collection}/sources",
                    headers=self._get_headers(),
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as exc:
                raise RetrievalError(
                    f"Search service returned status {exc.response.status_code}",
                    code="RETRIEVAL_HTTP_ERROR",
                ) from exc
            except httpx.RequestError as exc:
                raise RetrievalError("Search service is unreachable", code="RETRIEVAL_UNREACHABLE") from exc
            except ValueError as exc:
                raise RetrievalError("Search service returned an invalid response", code="RETRIEVAL_BAD_RESPONSE") from exc

        sources = data.get("sources", []) if isinstance(data, dict) else []
        return [str(s) for s in sources if s]
