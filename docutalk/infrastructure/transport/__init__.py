"""Streaming transports."""

from .data_stream_bridge import DataStreamBridge, bridge_stream

__all__ = ["DataStreamBridge", "bridge_stream"]
