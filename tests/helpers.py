"""Shared test helpers: mock Gemini streaming and image response factories."""

import json
from unittest.mock import MagicMock


def _make_chunk(text: str | None):
    """Create a mock streamed chunk carrying ``text``."""
    chunk = MagicMock()
    chunk.text = text
    return chunk


def _make_client(chunks=(), error=None, image_bytes=b"jpeg-bytes", image_error=None):
    """Create a mock genai.Client.

    The chat created from it streams ``chunks`` and then raises ``error`` if
    given; ``models.generate_images`` returns one image of ``image_bytes`` or
    raises ``image_error``.
    """
    client = MagicMock()
    chat = client.chats.create.return_value

    def stream(message):
        for text in chunks:
            yield _make_chunk(text)
        if error is not None:
            raise error

    chat.send_message_stream.side_effect = stream

    generated = MagicMock()
    generated.image.image_bytes = image_bytes
    response = MagicMock()
    response.generated_images = [generated]
    if image_error is not None:
        client.models.generate_images.side_effect = image_error
    else:
        client.models.generate_images.return_value = response
    return client


def _parse_sse(body: str) -> list[dict]:
    """Decode an SSE body of ``data: <json>`` events."""
    events = []
    for block in body.split("\n\n"):
        block = block.strip()
        if block.startswith("data: "):
            events.append(json.loads(block[len("data: "):]))
    return events
