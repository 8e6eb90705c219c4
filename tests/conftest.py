"""Shared fixtures: sample diagram payloads and a session backed by a mock Gemini client."""

import pytest

from tests.helpers import _make_client
from voltchat.chat.session import ChatSession


@pytest.fixture
def schematic_payload():
    """Battery, switch, LED and resistor in a loop."""
    return {
        "width": 400,
        "height": 200,
        "components": [
            {"id": "b1", "type": "battery", "x": 50, "y": 100, "label": "9V"},
            {"id": "s1", "type": "switch", "x": 150, "y": 50, "label": "S1", "state": "closed"},
            {"id": "d1", "type": "led", "x": 250, "y": 50, "label": "LED"},
            {"id": "r1", "type": "resistor", "x": 330, "y": 100, "label": "220Ω"},
        ],
        "connections": [
            {"from": "b1.positive", "to": "s1.in"},
            {"from": "s1.out", "to": "d1.anode"},
            {"from": "d1.cathode", "to": "r1.in"},
            {"from": "r1.out", "to": "b1.negative"},
        ],
    }


@pytest.fixture
def single_line_payload():
    """Generator feeding a bus through a transformer, with a breaker and a load."""
    return {
        "diagramType": "single-line",
        "width": 300,
        "height": 400,
        "components": [
            {"id": "gen1", "type": "generator", "x": 60, "y": 40, "label": "PV"},
            {"id": "t1", "type": "transformer", "x": 60, "y": 130, "label": "T1"},
            {"id": "bus1", "type": "bus", "x": 100, "y": 200, "label": "Bus", "width": 160},
            {"id": "cb1", "type": "breaker", "x": 160, "y": 260, "label": "CB1", "state": "open"},
            {"id": "ld1", "type": "load", "x": 220, "y": 330, "label": "Load"},
        ],
        "connections": [
            {"from": "gen1.out", "to": "t1.primary"},
            {"from": "t1.secondary", "to": "bus1.-40"},
            {"from": "bus1.60", "to": "cb1.in"},
            {"from": "cb1.out", "to": "ld1.in"},
        ],
    }


@pytest.fixture
def make_session():
    """Factory: ChatSession whose Gemini client streams the given fragments."""
    def factory(chunks=(), error=None, image_bytes=b"jpeg-bytes", image_error=None):
        client = _make_client(chunks, error=error, image_bytes=image_bytes, image_error=image_error)
        return ChatSession(client=client, model="test-model", image_model="test-image-model", language="English")
    return factory
