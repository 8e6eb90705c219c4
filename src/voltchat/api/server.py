"""FastAPI server: SSE chat stream, diagram rendering and reply classification."""

from __future__ import annotations

import base64
import binascii
import itertools
import json
import logging
import time
from collections.abc import Iterator
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from voltchat import config
from voltchat.chat.classifier import Classification, DiagramReply, ImageDirective, classify
from voltchat.chat.prompts import WELCOME_MESSAGE
from voltchat.chat.session import (
    Attachment,
    ChatSession,
    DiagramRendered,
    ImageFailed,
    ImagePending,
    ImageReady,
    SessionBusyError,
    SessionEvent,
    run_turn,
)
from voltchat.chat.stream import TextUpdate, TurnCommitted, TurnFailed
from voltchat.diagram.model import diagram_to_wire, parse_diagram
from voltchat.diagram.render import render_svg

# Configure logging on import, before anything else logs
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Voltchat", description="Renewable-energy chat with diagrams and images")

# CORS for the chat front-end dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Lazy-initialized chat session (created on first request), lives for the process
_session: ChatSession | None = None


def _get_session() -> ChatSession:
    global _session
    if _session is None:
        logger.info("Initializing chat session...")
        t0 = time.perf_counter()
        _session = ChatSession()
        logger.info("Chat session ready (%.2fs)", time.perf_counter() - t0)
    return _session


class ChatRequest(BaseModel):
    prompt: str = ""
    image_base64: str | None = None
    image_mime_type: str | None = None
    image_name: str = ""


class ClassifyRequest(BaseModel):
    text: str


class RenderResponse(BaseModel):
    svg: str


def classification_to_dict(result: Classification) -> dict[str, Any]:
    if isinstance(result, ImageDirective):
        return {"kind": "image", "prompt": result.prompt}
    if isinstance(result, DiagramReply):
        return {"kind": "diagram", "diagram": diagram_to_wire(result.diagram)}
    return {"kind": "text", "text": result.text}


def event_to_dict(event: SessionEvent) -> dict[str, Any]:
    """JSON payload for one SSE event."""
    if isinstance(event, TextUpdate):
        return {"type": "text", "text": event.text}
    if isinstance(event, TurnCommitted):
        return {"type": "committed", **classification_to_dict(event.result)}
    if isinstance(event, TurnFailed):
        return {"type": "error", "message": event.message, "retract": True}
    if isinstance(event, DiagramRendered):
        return {"type": "diagram", "diagram": diagram_to_wire(event.diagram), "svg": event.svg}
    if isinstance(event, ImagePending):
        return {"type": "image_pending", "prompt": event.prompt, "message": event.message}
    if isinstance(event, ImageReady):
        return {
            "type": "image",
            "prompt": event.prompt,
            "mime_type": event.mime_type,
            "data": base64.b64encode(event.data).decode("ascii"),
        }
    if isinstance(event, ImageFailed):
        return {"type": "error", "message": event.message, "retract": False}
    raise TypeError(f"Unknown session event {event!r}")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/welcome")
def welcome():
    return {"message": WELCOME_MESSAGE}


@app.post("/chat")
def chat(req: ChatRequest):
    """Run one turn and stream its events as SSE."""
    logger.info("POST /chat prompt=%r image=%s", req.prompt[:120], req.image_base64 is not None)
    if not req.prompt.strip() and not req.image_base64:
        raise HTTPException(status_code=400, detail="Prompt or image is required")

    # Request-scoped; the session's pending attachment slot stays untouched
    attachment = None
    if req.image_base64:
        try:
            data = base64.b64decode(req.image_base64, validate=True)
            attachment = Attachment(data=data, mime_type=req.image_mime_type or "", name=req.image_name)
        except (binascii.Error, ValueError) as e:
            raise HTTPException(status_code=400, detail=f"Invalid image attachment: {e}")

    session = _get_session()
    events = run_turn(session, req.prompt, attachment=attachment)
    try:
        first = next(events, None)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    head = [first] if first is not None else []

    def event_generator() -> Iterator[str]:
        for event in itertools.chain(head, events):
            yield f"data: {json.dumps(event_to_dict(event))}\n\n"
        yield f"data: {json.dumps({'type': 'done'})}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@app.post("/render", response_model=RenderResponse)
def render(payload: dict[str, Any]):
    """Render a diagram given in the wire format straight to SVG."""
    validation = parse_diagram(payload)
    if not validation.ok:
        raise HTTPException(status_code=422, detail=validation.reason)
    return RenderResponse(svg=render_svg(validation.diagram))


@app.post("/classify")
def classify_text(req: ClassifyRequest):
    return classification_to_dict(classify(req.text))
