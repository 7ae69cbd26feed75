"""Tests for LiteLLMCaller streaming and plain calls (acompletion patched)."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from docutalk.modules.config import AppSettings
from docutalk.modules.llm.litellm_caller import LiteLLMCaller
from docutalk.modules.llm.litellm_streaming import chunk_from_delta
from docutalk.modules.llm.models import GenerationChunk, ToolCallFragment


def _delta(content=None, tool_calls=None):
    return SimpleNamespace(content=content, tool_calls=tool_calls)


def _tc(index, id=None, name=None, arguments=None):
    return SimpleNamespace(index=index, id=id, function=SimpleNamespace(name=name, arguments=arguments))


def _raw(delta):
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta)])


class _FakeStream:
    def __init__(self, raw_chunks, error=None):
        self._raw = list(raw_chunks)
        self._error = error
        self.closed = False

    def __aiter__(self):
        return self._iter()

    async def _iter(self):
        for raw in self._raw:
            yield raw
        if self._error:
            raise self._error

    async def aclose(self):
        self.closed = True


def _caller(**overrides):
    settings = AppSettings(llm_model="openai/gpt-test", llm_api_key="sk-test", **overrides)
    return LiteLLMCaller(settings)


class TestChunkFromDelta:
    def test_text_only(self):
        assert chunk_from_delta(_delta(content="Hello")) == GenerationChunk(text="Hello")

    def test_tool_fragment(self):
        chunk = chunk_from_delta(_delta(tool_calls=[_tc(1, id="call_x", name="list_documents", arguments="{")]))

        assert chunk.text == ""
        assert chunk.tool_call_fragments == (
            ToolCallFragment(index=1, id="call_x", name="list_documents", arguments="{"),
        )

    def test_none_delta_is_empty(self):
        assert chunk_from_delta(None).is_empty

    def test_empty_delta_is_empty(self):
        assert chunk_from_delta(_delta()).is_empty


@pytest.mark.asyncio
async def test_stream_completion_yields_non_empty_chunks_and_closes():
    stream = _FakeStream([
        _raw(_delta(content="Hel")),
        _raw(_delta()),
        SimpleNamespace(choices=[]),
        _raw(_delta(content="lo")),
    ])
    caller = _caller()

    with patch("docutalk.modules.llm.litellm_streaming.acompletion", AsyncMock(return_value=stream)) as mock_acompletion:
        chunks = [c async for c in caller.stream_completion([{"role": "user", "content": "hi"}])]

    assert [c.text for c in chunks] == ["Hel", "lo"]
    assert stream.closed
    kwargs = mock_acompletion.call_args.kwargs
    assert kwargs["model"] == "openai/gpt-test"
    assert kwargs["stream"] is True
    assert kwargs["api_key"] == "sk-test"
    assert "tools" not in kwargs
    assert "tool_choice" not in kwargs


@pytest.mark.asyncio
async def test_stream_completion_advertises_tools():
    schema = [{"type": "function", "function": {"name": "list_documents", "parameters": {}}}]
    caller = _caller()

    with patch("docutalk.modules.llm.litellm_streaming.acompletion", AsyncMock(return_value=_FakeStream([]))) as mock_acompletion:
        _ = [c async for c in caller.stream_completion([], tools_schema=schema)]

    kwargs = mock_acompletion.call_args.kwargs
    assert kwargs["tools"] == schema
    assert kwargs["tool_choice"] == "auto"


@pytest.mark.asyncio
async def test_stream_completion_closes_on_early_exit():
    stream = _FakeStream([_raw(_delta(content=str(i))) for i in range(5)])
    caller = _caller()

    with patch("docutalk.modules.llm.litellm_streaming.acompletion", AsyncMock(return_value=stream)):
        agen = caller.stream_completion([])
        first = await agen.__anext__()
        await agen.aclose()

    assert first.text == "0"
    assert stream.closed


@pytest.mark.asyncio
async def test_stream_completion_propagates_mid_stream_error():
    stream = _FakeStream([_raw(_delta(content="a"))], error=RuntimeError("reset"))
    caller = _caller()

    with patch("docutalk.modules.llm.litellm_streaming.acompletion", AsyncMock(return_value=stream)):
        with pytest.raises(RuntimeError, match="reset"):
            _ = [c async for c in caller.stream_completion([])]

    assert stream.closed


@pytest.mark.asyncio
async def test_call_plain_returns_content():
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="summary"))])
    caller = _caller(llm_temperature=0.2, llm_max_tokens=50)

    with patch("docutalk.modules.llm.litellm_caller.acompletion", AsyncMock(return_value=response)) as mock_acompletion:
        result = await caller.call_plain([{"role": "user", "content": "summarize"}])

    assert result == "summary"
    kwargs = mock_acompletion.call_args.kwargs
    assert kwargs["temperature"] == 0.2
    assert kwargs["max_tokens"] == 50
    assert "stream" not in kwargs


def test_api_key_env_indirection(monkeypatch):
    monkeypatch.setenv("DOCUTALK_TEST_KEY", "from-env")
    settings = AppSettings(llm_api_key="${DOCUTALK_TEST_KEY}", llm_api_base="http://llm.local")

    kwargs = LiteLLMCaller(settings)._get_model_kwargs()

    assert kwargs["api_key"] == "from-env"
    assert kwargs["api_base"] == "http://llm.local"
