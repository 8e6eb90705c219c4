"""Terminal resolver: turn ``"<componentId>.<terminal>"`` references into canvas points."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import NamedTuple

from voltchat.diagram.model import Component, ComponentKind
from voltchat.diagram.shapes import default_terminal_for, terminal_offsets_for

logger = logging.getLogger(__name__)


class Point(NamedTuple):
    x: float
    y: float


def split_reference(ref: str) -> tuple[str, str]:
    """Split a connection reference into (component id, terminal name).

    Splits at the first dot only, so decimal bus offsets such as
    ``"bus1.-40.5"`` keep their fractional part. A reference with no dot
    names the component's default terminal.
    """
    comp_id, _, terminal = ref.partition(".")
    return comp_id, terminal


def _bus_offset(terminal: str) -> float:
    try:
        offset = float(terminal)
    except ValueError:
        return 0.0
    return offset if math.isfinite(offset) else 0.0


def resolve(component: Component | None, terminal: str) -> Point | None:
    """Return the absolute position of ``terminal`` on ``component``.

    Returns None when the component does not exist or has an unknown kind.
    Bus terminals are numeric horizontal offsets from the bus position
    (unparseable offsets mean the bus position itself). For every other kind
    an unrecognised terminal name falls back to the kind's default terminal.
    """
    if component is None or component.kind is None:
        return None

    if component.kind is ComponentKind.BUS:
        return Point(component.x + _bus_offset(terminal), component.y)

    offsets = terminal_offsets_for(component.kind)
    if terminal not in offsets:
        fallback = default_terminal_for(component.kind)
        logger.debug(
            "Terminal %r not defined on %s %r, using default %r",
            terminal, component.kind.value, component.id, fallback,
        )
        terminal = fallback
    dx, dy = offsets[terminal]
    return Point(component.x + dx, component.y + dy)


def resolve_reference(components: Mapping[str, Component], ref: str) -> Point | None:
    comp_id, terminal = split_reference(ref)
    return resolve(components.get(comp_id), terminal)
