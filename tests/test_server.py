"""Tests for the FastAPI server (session mocked via the Gemini client)."""

from __future__ import annotations

import base64
import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from tests.helpers import _parse_sse
from voltchat.api.server import app
from voltchat.chat.classifier import PlainText
from voltchat.chat.prompts import IMAGE_FAILURE, WELCOME_MESSAGE
from voltchat.chat.session import run_turn
from voltchat.chat.stream import GENERIC_FAILURE, TurnCommitted


@pytest.fixture
def client_for(make_session):
    """Factory: TestClient whose chat session streams the given fragments."""
    patches = []

    def factory(*args, **kwargs):
        session = make_session(*args, **kwargs)
        p = patch("voltchat.api.server._get_session", return_value=session)
        p.start()
        patches.append(p)
        return TestClient(app), session

    yield factory
    for p in patches:
        p.stop()


@pytest.fixture
def client():
    return TestClient(app)


class TestBasics:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_welcome(self, client):
        assert client.get("/welcome").json() == {"message": WELCOME_MESSAGE}


class TestRender:
    def test_render_svg(self, client, schematic_payload):
        resp = client.post("/render", json=schematic_payload)
        assert resp.status_code == 200
        svg = resp.json()["svg"]
        assert svg.startswith("<svg")
        assert svg.count('class="wire"') == 4

    def test_render_invalid(self, client):
        resp = client.post("/render", json={"width": -1, "height": 10, "components": [], "connections": []})
        assert resp.status_code == 422
        assert "positive" in resp.json()["detail"]


class TestClassify:
    def test_text(self, client):
        resp = client.post("/classify", json={"text": "Just words."})
        assert resp.json() == {"kind": "text", "text": "Just words."}

    def test_image(self, client):
        resp = client.post("/classify", json={"text": '{"action":"generate_image","prompt":"a red barn"}'})
        assert resp.json() == {"kind": "image", "prompt": "a red barn"}

    def test_diagram(self, client, single_line_payload):
        text = "```json\n" + json.dumps(single_line_payload) + "\n```"
        data = client.post("/classify", json={"text": text}).json()
        assert data["kind"] == "diagram"
        assert data["diagram"]["diagramType"] == "single-line"
        assert len(data["diagram"]["components"]) == 5


class TestChat:
    def test_plain_text_stream(self, client_for):
        client, _ = client_for(["Wind ", "energy."])
        resp = client.post("/chat", json={"prompt": "tell me about wind"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        events = _parse_sse(resp.text)
        assert [e["type"] for e in events] == ["text", "text", "committed", "done"]
        assert events[1]["text"] == "Wind energy."
        assert events[2] == {"type": "committed", "kind": "text", "text": "Wind energy."}

    def test_diagram_stream(self, client_for):
        client, _ = client_for([
            "```json\n",
            '{"width":200,"height":100,"components":[{"id":"b1","type":"battery","x":50,"y":50,"label":"V1"}],',
            '"connections":[]}\n```',
        ])
        events = _parse_sse(client.post("/chat", json={"prompt": "draw"}).text)
        diagram_event = next(e for e in events if e["type"] == "diagram")
        assert diagram_event["svg"].startswith("<svg")
        assert diagram_event["diagram"]["components"][0]["id"] == "b1"
        assert events[-1] == {"type": "done"}

    def test_image_stream(self, client_for):
        client, _ = client_for(['{"action":"generate_image","prompt":"a red barn"}'], image_bytes=b"JPEG")
        events = _parse_sse(client.post("/chat", json={"prompt": "imagine"}).text)
        types_ = [e["type"] for e in events]
        assert types_ == ["text", "committed", "image_pending", "image", "done"]
        image = events[3]
        assert image["mime_type"] == "image/jpeg"
        assert base64.b64decode(image["data"]) == b"JPEG"

    def test_image_failure_stream(self, client_for):
        client, _ = client_for(
            ['{"action":"generate_image","prompt":"a red barn"}'],
            image_error=RuntimeError("boom"),
        )
        events = _parse_sse(client.post("/chat", json={"prompt": "imagine"}).text)
        assert events[-2] == {"type": "error", "message": IMAGE_FAILURE, "retract": False}

    def test_transport_error_stream(self, client_for):
        client, session = client_for(["part"], error=ConnectionError("reset"))
        events = _parse_sse(client.post("/chat", json={"prompt": "hi"}).text)
        assert events[-2] == {"type": "error", "message": GENERIC_FAILURE, "retract": True}
        assert not session.busy

    def test_empty_prompt_rejected(self, client_for):
        client, _ = client_for(["x"])
        resp = client.post("/chat", json={"prompt": "  "})
        assert resp.status_code == 400

    def test_busy_session(self, client_for):
        client, session = client_for(["x", "y"])
        in_flight = run_turn(session, "first")
        next(in_flight)
        try:
            resp = client.post("/chat", json={"prompt": "hi"})
        finally:
            in_flight.close()
        assert resp.status_code == 409
        assert not session.busy

    def test_busy_rejection_drops_image(self, client_for):
        client, session = client_for(["x", "y"])
        in_flight = run_turn(session, "first")
        next(in_flight)
        try:
            resp = client.post("/chat", json={
                "prompt": "what is this?",
                "image_base64": base64.b64encode(b"\x89PNG").decode(),
                "image_mime_type": "image/png",
            })
            assert resp.status_code == 409
            assert session.attachment is None
            rest = list(in_flight)
        finally:
            in_flight.close()
        assert rest[-1] == TurnCommitted(PlainText("xy"))
        parts = session._client.chats.create.return_value.send_message_stream.call_args.kwargs["message"]
        assert [p.text for p in parts] == ["first"]

    def test_image_stays_with_its_request(self, client_for):
        client, session = client_for(["ok"])
        uploads = []
        original = session.stream_reply

        def stream_reply(prompt, attachment=None):
            uploads.append((prompt, attachment.data if attachment else None))
            return original(prompt, attachment)

        with patch.object(session, "stream_reply", side_effect=stream_reply):
            client.post("/chat", json={
                "prompt": "what is this?",
                "image_base64": base64.b64encode(b"\x89PNG").decode(),
                "image_mime_type": "image/png",
            })
            client.post("/chat", json={"prompt": "another question"})
        assert uploads == [("what is this?", b"\x89PNG"), ("another question", None)]
        assert session.attachment is None

    def test_image_attachment(self, client_for):
        client, session = client_for(["Looks like a PV array."])
        resp = client.post("/chat", json={
            "prompt": "what is this?",
            "image_base64": base64.b64encode(b"\x89PNG").decode(),
            "image_mime_type": "image/png",
            "image_name": "array.png",
        })
        assert resp.status_code == 200
        parts = session._client.chats.create.return_value.send_message_stream.call_args.kwargs["message"]
        assert parts[1].inline_data.data == b"\x89PNG"
        assert session.attachment is None

    def test_image_only_message(self, client_for):
        client, _ = client_for(["A turbine."])
        resp = client.post("/chat", json={
            "image_base64": base64.b64encode(b"\xff\xd8").decode(),
            "image_mime_type": "image/jpeg",
        })
        assert resp.status_code == 200
        assert _parse_sse(resp.text)[-2]["text"] == "A turbine."

    def test_invalid_base64(self, client_for):
        client, _ = client_for(["x"])
        resp = client.post("/chat", json={"prompt": "hi", "image_base64": "not base64!", "image_mime_type": "image/png"})
        assert resp.status_code == 400

    def test_non_image_attachment(self, client_for):
        client, session = client_for(["x"])
        resp = client.post("/chat", json={
            "prompt": "hi",
            "image_base64": base64.b64encode(b"%PDF").decode(),
            "image_mime_type": "application/pdf",
        })
        assert resp.status_code == 400
        assert session.attachment is None
