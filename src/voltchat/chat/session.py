"""Chat session context and the per-turn pipeline: stream, classify, then render or generate."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from dataclasses import dataclass

from google import genai
from google.genai import types

from voltchat import config
from voltchat.chat.classifier import DiagramReply, ImageDirective
from voltchat.chat.prompts import IMAGE_FAILURE, IMAGE_PENDING_TEMPLATE, build_system_prompt
from voltchat.chat.stream import TextUpdate, TurnCommitted, TurnFailed, aggregate
from voltchat.diagram.model import Diagram
from voltchat.diagram.render import render_svg

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPE = "image/jpeg"


class SessionBusyError(RuntimeError):
    """Raised when a turn is started while another one is still outstanding."""


@dataclass(frozen=True)
class Attachment:
    """An image the user attached to their next message."""

    data: bytes
    mime_type: str
    name: str = ""

    def __post_init__(self) -> None:
        if not self.mime_type.startswith("image/"):
            raise ValueError(f"Only image attachments are supported, got {self.mime_type!r}")


@dataclass(frozen=True)
class DiagramRendered:
    diagram: Diagram
    svg: str


@dataclass(frozen=True)
class ImagePending:
    prompt: str
    message: str


@dataclass(frozen=True)
class ImageReady:
    prompt: str
    data: bytes
    mime_type: str = IMAGE_MIME_TYPE


@dataclass(frozen=True)
class ImageFailed:
    message: str


SessionEvent = TextUpdate | TurnCommitted | TurnFailed | DiagramRendered | ImagePending | ImageReady | ImageFailed


class ChatSession:
    """One Gemini chat plus the state that belongs to it.

    Created once at startup and handed to :func:`run_turn`. Holds the chat
    handle (conversation memory lives on the Gemini side), the pending image
    attachment, and a lock that keeps turns from overlapping.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        image_model: str | None = None,
        language: str | None = None,
        client: genai.Client | None = None,
    ) -> None:
        self._client = client or genai.Client(api_key=api_key or config.require_api_key())
        self._model = model or config.GEMINI_MODEL
        self._image_model = image_model or config.IMAGE_MODEL
        self._system_prompt = build_system_prompt(language or config.RESPONSE_LANGUAGE)
        self._chat = self._client.chats.create(
            model=self._model,
            config=types.GenerateContentConfig(system_instruction=self._system_prompt),
        )
        self._attachment: Attachment | None = None
        self._turn_lock = threading.Lock()
        logger.info("Chat session created (model=%s, image_model=%s)", self._model, self._image_model)

    @property
    def busy(self) -> bool:
        return self._turn_lock.locked()

    @property
    def attachment(self) -> Attachment | None:
        return self._attachment

    def attach(self, data: bytes, mime_type: str, name: str = "") -> Attachment:
        """Select an image to send with the next message, replacing any previous one."""
        self._attachment = Attachment(data=data, mime_type=mime_type, name=name)
        logger.debug("Attached %s (%d bytes, %s)", name or "<unnamed>", len(data), mime_type)
        return self._attachment

    def clear_attachment(self) -> None:
        self._attachment = None

    def _begin_turn(self) -> None:
        if not self._turn_lock.acquire(blocking=False):
            raise SessionBusyError("A turn is already in progress for this session")

    def _end_turn(self) -> None:
        self._turn_lock.release()

    def stream_reply(self, prompt: str, attachment: Attachment | None = None) -> Iterator[str | None]:
        """Send a message and yield the reply's text fragments as they arrive."""
        parts: list[types.Part] = []
        if prompt:
            parts.append(types.Part.from_text(text=prompt))
        if attachment is not None:
            parts.append(types.Part.from_bytes(data=attachment.data, mime_type=attachment.mime_type))

        logger.debug("Send via %s (%d char prompt, %d part(s))", self._model, len(prompt), len(parts))
        t0 = time.perf_counter()
        for chunk in self._chat.send_message_stream(message=parts):
            yield chunk.text
        logger.debug("Stream finished: %.0fms", (time.perf_counter() - t0) * 1000)

    def generate_image(self, prompt: str) -> bytes:
        """Generate one square JPEG for ``prompt``."""
        logger.info("Generating image via %s: %r", self._image_model, prompt[:120])
        t0 = time.perf_counter()
        response = self._client.models.generate_images(
            model=self._image_model,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type=IMAGE_MIME_TYPE,
                aspect_ratio="1:1",
            ),
        )
        data = response.generated_images[0].image.image_bytes
        logger.info("Image complete: %d bytes, %.2fs", len(data), time.perf_counter() - t0)
        return data


def run_turn(
    session: ChatSession,
    prompt: str,
    attachment: Attachment | None = None,
) -> Iterator[SessionEvent]:
    """Run one user turn against ``session``, yielding events for display.

    ``attachment`` is sent with ``prompt`` when given; the session's pending
    attachment is then left for a later turn. Without one, the pending
    attachment (if any) is sent and cleared. An empty prompt with no
    attachment starts no turn. While streaming, every fragment produces a
    :class:`TextUpdate`; once the stream ends the reply is classified exactly
    once and, for diagrams and image directives, followed by the rendered
    diagram or the generated image.

    Raises:
        SessionBusyError: If another turn on this session is still running.
    """
    session._begin_turn()
    try:
        prompt = prompt.strip()
        if attachment is None:
            attachment = session.attachment
            if not prompt and attachment is None:
                return
            session.clear_attachment()

        logger.info("Turn started: prompt=%r attachment=%s", prompt[:120], attachment is not None)
        t0 = time.perf_counter()
        for event in aggregate(session.stream_reply(prompt, attachment)):
            yield event
            if isinstance(event, TurnCommitted):
                yield from _follow_up(session, event)
        logger.info("Turn complete: %.2fs", time.perf_counter() - t0)
    finally:
        session._end_turn()


def _follow_up(session: ChatSession, committed: TurnCommitted) -> Iterator[SessionEvent]:
    result = committed.result
    if isinstance(result, DiagramReply):
        yield DiagramRendered(diagram=result.diagram, svg=render_svg(result.diagram))
    elif isinstance(result, ImageDirective):
        yield ImagePending(prompt=result.prompt, message=IMAGE_PENDING_TEMPLATE.format(prompt=result.prompt))
        try:
            data = session.generate_image(result.prompt)
        except Exception:
            logger.exception("Image generation failed")
            yield ImageFailed(message=IMAGE_FAILURE)
            return
        yield ImageReady(prompt=result.prompt, data=data)
