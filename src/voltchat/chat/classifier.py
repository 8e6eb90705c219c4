"""Response classifier: decide whether a finished reply is prose, an image request, or a diagram."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from voltchat.diagram.model import Diagram, looks_like_diagram, parse_diagram

logger = logging.getLogger(__name__)

IMAGE_ACTION = "generate_image"

# A line of exactly ```json, the payload, then a line of exactly ```
_FENCED_JSON_RE = re.compile(r"^```json[ \t]*\r?\n(.*?)\r?\n```[ \t]*\r?$", re.DOTALL | re.MULTILINE)


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class ImageDirective:
    prompt: str


@dataclass(frozen=True)
class DiagramReply:
    diagram: Diagram


Classification = PlainText | ImageDirective | DiagramReply


def extract_fenced_json(text: str) -> str | None:
    """Return the body of the first ```json fenced block, or None."""
    match = _FENCED_JSON_RE.search(text)
    return match.group(1) if match else None


def _interpret(value: Any) -> ImageDirective | DiagramReply | None:
    if not isinstance(value, dict):
        return None
    prompt = value.get("prompt")
    if value.get("action") == IMAGE_ACTION and isinstance(prompt, str) and prompt:
        return ImageDirective(prompt=prompt)
    if looks_like_diagram(value):
        validation = parse_diagram(value)
        if validation.ok:
            return DiagramReply(diagram=validation.diagram)
        logger.debug("Diagram-shaped payload rejected: %s", validation.reason)
    return None


def classify(text: str) -> Classification:
    """Classify the complete text of one model turn.

    The whole buffer is parsed first because image directives arrive as bare
    JSON. Only when that fails is a fenced ```json block searched for, since
    diagrams arrive fenced. Anything that is not a recognised payload falls
    back to :class:`PlainText` carrying ``text`` unchanged.
    """
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        body = extract_fenced_json(text)
        if body is None:
            return PlainText(text=text)
        try:
            parsed = json.loads(body)
        except (ValueError, RecursionError) as e:
            logger.debug("Fenced JSON block did not parse: %s", e)
            return PlainText(text=text)

    result = _interpret(parsed)
    if result is None:
        return PlainText(text=text)
    logger.debug("Classified reply as %s", type(result).__name__)
    return result
