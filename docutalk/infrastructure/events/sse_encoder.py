"""Stage-1 wire encoding: one ``data: <json>\\n\\n`` frame per turn event."""

import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, Optional

from docutalk.domain.events import TurnEvent

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
FRAME_TERMINATOR = "\n\n"


def dump_json(value: Any) -> str:
    """Compact JSON with non-ASCII text left as-is."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def encode_event(event: TurnEvent) -> str:
    return f"{DATA_PREFIX}{dump_json(event.to_dict())}{FRAME_TERMINATOR}"


def decode_line(line: str) -> Optional[Dict[str, Any]]:
    """Parse one stage-1 line; anything that is not a well-formed event gives None."""
    line = line.rstrip("\r")
    if not line.startswith(DATA_PREFIX):
        return None
    try:
        event = json.loads(line[len(DATA_PREFIX):])
    except ValueError:
        logger.debug("Skipping malformed stream line")
        return None
    if not isinstance(event, dict) or not isinstance(event.get("type"), str):
        return None
    return event


async def encode_events(events: AsyncIterable[TurnEvent]) -> AsyncIterator[str]:
    async for event in events:
        yield encode_event(event)
