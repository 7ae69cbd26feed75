"""Tests for the stage-1 -> stage-2 bridge."""

import json

import httpx
import pytest

from docutalk.domain.events import DoneEvent, ErrorEvent, SessionEvent, TokenEvent, ToolExecutingEvent, ToolResultEvent
from docutalk.infrastructure.events.data_stream_encoder import (
    FINISH_LINE,
    translate_event,
    translate_line,
)
from docutalk.infrastructure.events.sse_encoder import encode_event
from docutalk.infrastructure.transport.data_stream_bridge import DataStreamBridge, bridge_stream


async def _chunks(*parts):
    for part in parts:
        yield part


async def _collect(agen):
    return [line async for line in agen]


def _stage1(*events):
    return "".join(encode_event(e) for e in events)


class TestTranslate:
    def test_token(self):
        assert translate_event({"type": "token", "content": 'say "hi"\n'}) == '0:"say \\"hi\\"\\n"\n'

    def test_tool_executing(self):
        line = translate_event({"type": "tool_executing", "tools": ["a", "b"]})
        assert line.startswith("2:")
        assert json.loads(line[2:]) == [{"type": "tool_executing", "tools": ["a", "b"]}]

    def test_tool_result(self):
        line = translate_event({"type": "tool_result", "tool": "t", "result": "r"})
        assert json.loads(line[2:]) == [{"type": "tool_result", "tool": "t", "result": "r"}]

    def test_tool_error(self):
        line = translate_event({"type": "tool_error", "tool": "t", "error": "e"})
        assert json.loads(line[2:]) == [{"type": "tool_error", "tool": "t", "error": "e"}]

    def test_session(self):
        assert translate_event({"type": "session", "sessionId": "s1"}) == '2:[{"type":"session","sessionId":"s1"}]\n'

    def test_error(self):
        assert translate_event({"type": "error", "message": "boom"}) == '3:"boom"\n'

    def test_error_without_message(self):
        assert translate_event({"type": "error"}) == '3:"Unknown error"\n'

    def test_done(self):
        assert translate_event({"type": "done"}) == (
            'd:{"finishReason":"stop","usage":{"promptTokens":0,"completionTokens":0}}\n'
        )

    def test_unknown_type_is_skipped(self):
        assert translate_event({"type": "progress", "value": 3}) is None

    @pytest.mark.parametrize("line", ["", "retry: 100", "data: {oops", "data: []"])
    def test_malformed_lines_are_skipped(self, line):
        assert translate_line(line) is None


class TestBridgeStream:
    @pytest.mark.asyncio
    async def test_every_token_maps_to_one_text_line(self):
        body = _stage1(
            SessionEvent(session_id="s1"),
            TokenEvent(content="Key"),
            TokenEvent(content=" points"),
            DoneEvent(),
        )

        lines = await _collect(bridge_stream(_chunks(body)))

        assert lines == [
            '2:[{"type":"session","sessionId":"s1"}]\n',
            '0:"Key"\n',
            '0:" points"\n',
            FINISH_LINE,
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 2, 3, 7, 13, 64])
    async def test_arbitrary_read_boundaries(self, size):
        body = _stage1(
            SessionEvent(session_id="s1"),
            ToolExecutingEvent(tools=["list_documents"]),
            ToolResultEvent(tool="list_documents", result="1. a.pdf"),
            TokenEvent(content="Ünïcode ✓"),
            DoneEvent(),
        )
        pieces = [body[i:i + size] for i in range(0, len(body), size)]

        lines = await _collect(bridge_stream(_chunks(*pieces)))

        assert lines == await _collect(bridge_stream(_chunks(body)))
        assert lines.count(FINISH_LINE) == 1
        assert '0:"Ünïcode ✓"\n' in lines

    @pytest.mark.asyncio
    async def test_missing_done_synthesizes_finish(self):
        body = _stage1(SessionEvent(session_id="s1"), TokenEvent(content="cut"))

        lines = await _collect(bridge_stream(_chunks(body)))

        assert lines[-1] == FINISH_LINE
        assert lines.count(FINISH_LINE) == 1

    @pytest.mark.asyncio
    async def test_stops_after_done(self):
        body = _stage1(DoneEvent(), TokenEvent(content="late"))

        assert await _collect(bridge_stream(_chunks(body))) == [FINISH_LINE]

    @pytest.mark.asyncio
    async def test_error_event_then_synthesized_finish(self):
        body = _stage1(SessionEvent(session_id="s1"), ErrorEvent(message="Search down"))

        lines = await _collect(bridge_stream(_chunks(body)))

        assert lines == ['2:[{"type":"session","sessionId":"s1"}]\n', '3:"Search down"\n', FINISH_LINE]

    @pytest.mark.asyncio
    async def test_malformed_lines_do_not_break_the_stream(self):
        body = "data: {broken\n\n: ping\n\n" + _stage1(TokenEvent(content="ok"), DoneEvent())

        assert await _collect(bridge_stream(_chunks(body))) == ['0:"ok"\n', FINISH_LINE]

    @pytest.mark.asyncio
    async def test_unterminated_trailing_line_is_not_forwarded(self):
        lines = await _collect(bridge_stream(_chunks('data: {"type":"token","content":"partial"}')))

        assert lines == [FINISH_LINE]

    @pytest.mark.asyncio
    async def test_empty_upstream(self):
        assert await _collect(bridge_stream(_chunks())) == [FINISH_LINE]


class TestDataStreamBridge:
    @pytest.mark.asyncio
    async def test_forwards_payload_and_translates(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                headers={"Content-Type": "text/event-stream"},
                content=_stage1(SessionEvent(session_id="s1"), TokenEvent(content="hi"), DoneEvent()).encode(),
            )

        bridge = DataStreamBridge("http://backend/api/chat", transport=httpx.MockTransport(handler))

        lines = await _collect(bridge.stream({"message": "hello", "sessionId": "s1"}))

        assert seen == {"url": "http://backend/api/chat", "body": {"message": "hello", "sessionId": "s1"}}
        assert lines == ['2:[{"type":"session","sessionId":"s1"}]\n', '0:"hi"\n', FINISH_LINE]

    @pytest.mark.asyncio
    async def test_non_2xx_gives_single_error_line(self):
        bridge = DataStreamBridge(
            "http://backend/api/chat",
            transport=httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway")),
        )

        lines = await _collect(bridge.stream({"message": "hello"}))

        assert lines == ['3:"Backend error: 502"\n']

    @pytest.mark.asyncio
    async def test_connection_failure_gives_single_error_line(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        bridge = DataStreamBridge("http://backend/api/chat", transport=httpx.MockTransport(handler))

        lines = await _collect(bridge.stream({"message": "hello"}))

        assert len(lines) == 1
        assert lines[0].startswith("3:")
        assert "Failed to reach backend" in json.loads(lines[0][2:])

    @pytest.mark.asyncio
    async def test_failure_after_first_frame_ends_with_one_error_line(self):
        first_frame = _stage1(TokenEvent(content="hi")).encode()

        class DroppedStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                yield first_frame
                raise httpx.ReadError("connection reset")

        def handler(request):
            return httpx.Response(200, headers={"Content-Type": "text/event-stream"}, stream=DroppedStream())

        bridge = DataStreamBridge("http://backend/api/chat", transport=httpx.MockTransport(handler))

        lines = await _collect(bridge.stream({"message": "hello"}))

        assert lines == ['0:"hi"\n', '3:"Stream error: ReadError"\n']
        assert FINISH_LINE not in lines
