"""Session store interface."""

from typing import Any, Dict, List, Optional, Protocol

from docutalk.domain.messages.models import Message, MessageRole
from docutalk.domain.sessions.models import Session


class SessionStore(Protocol):
    """
    Port for per-conversation history and client context.

    Every operation works on in-process state only and does not fail under
    normal conditions.
    """

    async def get_or_create(self, session_id: str) -> Session:
        """Return the session, creating an empty one if unseen; refreshes last access."""
        ...

    async def append_message(self, session_id: str, role: MessageRole, content: str) -> None:
        """Append a message then window the history."""
        ...

    async def get_messages(self, session_id: str) -> List[Message]:
        """Snapshot of the session's history."""
        ...

    async def set_context(self, session_id: str, context: Optional[Dict[str, Any]]) -> None:
        """Store client context (last write wins)."""
        ...

    async def get_context(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Stored client context, or None."""
        ...

    async def clear(self, session_id: str) -> None:
        """Remove the session; no-op when absent."""
        ...

    async def get_info(self, session_id: str) -> Dict[str, Any]:
        """Message count and staleness. Raises SessionNotFoundError when absent."""
        ...

    async def exists(self, session_id: str) -> bool:
        """Whether the session is currently held."""
        ...
