"""Wire encoders for turn events."""

from .data_stream_encoder import (
    DATA_STREAM_HEADER,
    DATA_STREAM_VERSION,
    FINISH_LINE,
    error_line,
    translate_event,
    translate_line,
)
from .sse_encoder import decode_line, encode_event, encode_events

__all__ = [
    "DATA_STREAM_HEADER",
    "DATA_STREAM_VERSION",
    "FINISH_LINE",
    "decode_line",
    "encode_event",
    "encode_events",
    "error_line",
    "translate_event",
    "translate_line",
]
