"""Route tests for the chat, session and bridge endpoints."""

import json

import httpx
import pytest
from starlette.testclient import TestClient

from docutalk.application.chat.orchestrator import TurnOrchestrator
from docutalk.domain.events import DoneEvent, SessionEvent, TokenEvent
from docutalk.infrastructure.app_factory import app_factory
from docutalk.infrastructure.events.data_stream_encoder import FINISH_LINE
from docutalk.infrastructure.events.sse_encoder import encode_event
from docutalk.infrastructure.sessions.in_memory_repository import InMemorySessionStore
from docutalk.infrastructure.transport.data_stream_bridge import DataStreamBridge
from docutalk.main import app
from docutalk.modules.tools.registry import ToolRegistry
from docutalk.tests.fakes import FakeLLM, make_prompt_provider, text_chunk


def _parse_sse(body: str):
    return [json.loads(line[len("data: "):]) for line in body.split("\n") if line.startswith("data: ")]


@pytest.fixture
def store(monkeypatch):
    store = InMemorySessionStore()
    monkeypatch.setattr(app_factory, "session_store", store)
    return store


@pytest.fixture
def wire_orchestrator(monkeypatch, store, retrieval):
    def _wire(llm):
        orchestrator = TurnOrchestrator(
            session_store=store,
            retrieval=retrieval,
            llm=llm,
            tool_registry=ToolRegistry(),
            prompt_provider=make_prompt_provider(),
        )
        monkeypatch.setattr(app_factory, "create_orchestrator", lambda: orchestrator)
        return orchestrator

    return _wire


def test_chat_streams_stage1_events(wire_orchestrator, store):
    wire_orchestrator(FakeLLM([[text_chunk("Key"), text_chunk(" points")]]))
    client = TestClient(app)

    resp = client.post("/api/chat", json={"message": "What are the key points?", "sessionId": "s1"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert resp.headers["cache-control"] == "no-cache"
    assert _parse_sse(resp.text) == [
        {"type": "session", "sessionId": "s1"},
        {"type": "token", "content": "Key"},
        {"type": "token", "content": " points"},
        {"type": "done"},
    ]

    info = client.get("/api/chat/session/s1").json()
    assert info["success"] is True
    assert info["session"]["sessionId"] == "s1"
    assert info["session"]["messageCount"] == 2


def test_chat_generates_session_id(wire_orchestrator):
    wire_orchestrator(FakeLLM([[text_chunk("ok")]]))
    client = TestClient(app)

    events = _parse_sse(client.post("/api/chat", json={"message": "hi"}).text)

    assert events[0]["type"] == "session"
    assert len(events[0]["sessionId"]) == 36


def test_chat_retrieval_failure_is_a_single_error_event(monkeypatch, store, failing_retrieval):
    orchestrator = TurnOrchestrator(
        session_store=store,
        retrieval=failing_retrieval,
        llm=FakeLLM(),
        tool_registry=ToolRegistry(),
        prompt_provider=make_prompt_provider(),
    )
    monkeypatch.setattr(app_factory, "create_orchestrator", lambda: orchestrator)

    events = _parse_sse(TestClient(app).post("/api/chat", json={"message": "hi", "sessionId": "s9"}).text)

    assert [e["type"] for e in events] == ["session", "error"]


@pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": 5}, {"sessionId": "s1"}])
def test_chat_rejects_invalid_request(wire_orchestrator, body):
    llm = FakeLLM()
    wire_orchestrator(llm)

    resp = TestClient(app).post("/api/chat", json=body)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Message is required and must be a string"}
    assert llm.stream_calls == []


def test_chat_rejects_non_json_body(wire_orchestrator):
    wire_orchestrator(FakeLLM())

    resp = TestClient(app).post("/api/chat", content=b"not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert "error" in resp.json()


def test_chat_health():
    data = TestClient(app).get("/api/chat/health").json()

    assert data["status"] == "ok"
    assert data["service"] == "chat"
    assert "timestamp" in data


def test_session_info_not_found(store):
    resp = TestClient(app).get("/api/chat/session/missing")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Session not found"}


def test_clear_session_is_idempotent(store):
    client = TestClient(app)
    first = client.delete("/api/chat/session/s1")
    second = client.delete("/api/chat/session/s1")

    assert first.status_code == second.status_code == 200
    assert first.json() == second.json() == {"success": True, "message": "Session s1 cleared successfully"}


def test_lifespan_starts_and_stops_sweep(store):
    with TestClient(app) as client:
        assert client.get("/api/heartbeat").status_code == 200
        assert store.sweep_running

    assert not store.sweep_running


# -- bridge --------------------------------------------------------------------

def _install_bridge(monkeypatch, handler):
    bridge = DataStreamBridge("http://upstream/api/chat", transport=httpx.MockTransport(handler))
    monkeypatch.setattr(app_factory, "bridge", bridge)


def test_bridge_translates_upstream_stream(monkeypatch):
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        body = "".join(encode_event(e) for e in (SessionEvent(session_id="s1"), TokenEvent(content="hi"), DoneEvent()))
        return httpx.Response(200, content=body.encode())

    _install_bridge(monkeypatch, handler)

    resp = TestClient(app).post("/api/bridge/chat", json={
        "messages": [{"role": "user", "content": "earlier"}, {"role": "user", "content": "latest"}],
        "sessionId": "s1",
        "context": {"user": "u1"},
    })

    assert resp.status_code == 200
    assert resp.headers["x-vercel-ai-data-stream"] == "v1"
    assert resp.headers["content-type"].startswith("text/plain")
    assert seen["body"] == {"message": "latest", "sessionId": "s1", "context": {"user": "u1"}}
    assert resp.text == '2:[{"type":"session","sessionId":"s1"}]\n' + '0:"hi"\n' + FINISH_LINE


def test_bridge_upstream_failure(monkeypatch):
    _install_bridge(monkeypatch, lambda request: httpx.Response(500))

    resp = TestClient(app).post("/api/bridge/chat", json={"messages": [{"role": "user", "content": "hi"}]})

    assert resp.status_code == 200
    assert resp.text == '3:"Backend error: 500"\n'


@pytest.mark.parametrize("body", [{}, {"messages": []}, {"messages": [{"role": "user"}]}, {"messages": [{"content": ""}]}])
def test_bridge_requires_a_message(monkeypatch, body):
    _install_bridge(monkeypatch, lambda request: pytest.fail("upstream should not be called"))

    resp = TestClient(app).post("/api/bridge/chat", json=body)

    assert resp.status_code == 400
    assert resp.json() == {"error": "No message provided"}
