"""In-memory session store implementation."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from docutalk.core.log_sanitizer import sanitize_for_logging
from docutalk.domain.errors import SessionNotFoundError
from docutalk.domain.messages.models import Message, MessageRole
from docutalk.domain.sessions.models import Session

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySessionStore:
    """
    In-memory implementation of SessionStore.

    Stores sessions in a dictionary owned by this instance. Histories are
    windowed to the most recent ``max_messages`` entries. A background sweep,
    started with ``start()`` and stopped with ``stop()``, evicts sessions idle
    for longer than ``timeout_seconds``. Suitable for single-process
    deployments; nothing survives a restart.

    None of the mutating methods await, so each runs to completion without
    interleaving with other coroutines on the loop.
    """

    def __init__(
        self,
        max_messages: int = 10,
        timeout_seconds: float = 1800,
        sweep_interval_seconds: float = 300,
        now: Callable[[], datetime] = _utcnow,
    ):
        if max_messages <= 0:
            raise ValueError("max_messages must be positive")
        self.max_messages = max_messages
        self.timeout = timedelta(seconds=timeout_seconds)
        self.sweep_interval_seconds = sweep_interval_seconds
        self._now = now
        self._sessions: Dict[str, Session] = {}
        self._sweep_task: Optional[asyncio.Task] = None
        self._sweep_running = False

    def _get_or_create(self, session_id: str) -> Session:
        now = self._now()
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(id=session_id, created_at=now, last_accessed_at=now)
            self._sessions[session_id] = session
            logger.info("Created session %s", sanitize_for_logging(session_id))
        else:
            session.touch(now)
        return session

    async def get_or_create(self, session_id: str) -> Session:
        """Return the session, creating an empty one if unseen; refreshes last access."""
        return self._get_or_create(session_id)

    async def append_message(self, session_id: str, role: MessageRole, content: str) -> None:
        session = self._get_or_create(session_id)
        session.messages.append(Message(role=role, content=content, timestamp=self._now()))
        overflow = len(session.messages) - self.max_messages
        if overflow > 0:
            del session.messages[:overflow]
            logger.debug(
                "Session %s windowed: dropped %d oldest message(s)",
                sanitize_for_logging(session_id), overflow,
            )

    async def get_messages(self, session_id: str) -> List[Message]:
        return list(self._get_or_create(session_id).messages)

    async def set_context(self, session_id: str, context: Optional[Dict[str, Any]]) -> None:
        self._get_or_create(session_id).context = context

    async def get_context(self, session_id: str) -> Optional[Dict[str, Any]]:
        session = self._sessions.get(session_id)
        return session.context if session else None

    async def clear(self, session_id: str) -> None:
        """Remove the session; clearing an unknown id is a no-op."""
        if self._sessions.pop(session_id, None) is not None:
            logger.info("Cleared session %s", sanitize_for_logging(session_id))

    async def get_info(self, session_id: str) -> Dict[str, Any]:
        """Message count and staleness without refreshing last access."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found", code="SESSION_NOT_FOUND")
        return session.info(self._now())

    async def exists(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def sweep(self) -> int:
        """Evict sessions idle past the timeout. Returns the number removed.

        The cutoff is fixed when the sweep begins, so a session touched after
        that point is never removed.
        """
        cutoff = self._now() - self.timeout
        expired = [sid for sid, session in self._sessions.items() if session.last_accessed_at < cutoff]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info("Session sweep evicted %d idle session(s)", len(expired))
        return len(expired)

    async def start(self) -> None:
        """Start the background eviction task."""
        if self._sweep_running:
            logger.warning("Session sweep task is already running")
            return
        self._sweep_running = True
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info(
            "Started session sweep (interval=%ss, timeout=%ss)",
            self.sweep_interval_seconds, int(self.timeout.total_seconds()),
        )

    async def stop(self) -> None:
        """Stop the background eviction task."""
        self._sweep_running = False
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
        logger.info("Stopped session sweep")

    @property
    def sweep_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    async def _sweep_loop(self) -> None:
        while self._sweep_running:
            try:
                await asyncio.sleep(self.sweep_interval_seconds)
                self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error in session sweep loop: %s", e, exc_info=True)
