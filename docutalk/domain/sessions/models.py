"""Domain models for sessions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..messages.models import Message


@dataclass
class Session:
    """Per-conversation state held by the session store."""
    id: str
    messages: List[Message] = field(default_factory=list)
    context: Optional[Dict[str, Any]] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_accessed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def touch(self, now: datetime) -> None:
        """Record an access."""
        self.last_accessed_at = now

    def info(self, now: datetime) -> Dict[str, Any]:
        """Summary used by the session info endpoint."""
        age = now - self.last_accessed_at
        return {
            "sessionId": self.id,
            "messageCount": len(self.messages),
            "lastAccessed": self.last_accessed_at.isoformat(),
            "ageMinutes": int(age.total_seconds() // 60),
        }
