"""Diagram data model and tolerant structural validation of the wire format."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_BUS_WIDTH = 100.0


class DiagramKind(str, Enum):
    SCHEMATIC = "schematic"
    SINGLE_LINE = "single-line"


class ComponentKind(str, Enum):
    """Closed set of drawable component kinds."""

    # Schematic
    BATTERY = "battery"
    RESISTOR = "resistor"
    LED = "led"
    SWITCH = "switch"
    # Single-line
    GENERATOR = "generator"
    TRANSFORMER = "transformer"
    BUS = "bus"
    BREAKER = "breaker"
    LOAD = "load"

    @property
    def family(self) -> DiagramKind:
        if self in _SCHEMATIC_KINDS:
            return DiagramKind.SCHEMATIC
        return DiagramKind.SINGLE_LINE

    @classmethod
    def parse(cls, value: Any) -> ComponentKind | None:
        """Return the kind named by a wire ``type`` value, or None if unknown."""
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None


_SCHEMATIC_KINDS = frozenset({
    ComponentKind.BATTERY, ComponentKind.RESISTOR, ComponentKind.LED, ComponentKind.SWITCH,
})
_STATEFUL_KINDS = frozenset({ComponentKind.SWITCH, ComponentKind.BREAKER})


class SwitchState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class Component:
    """One symbol placed on the canvas."""

    id: str
    kind: ComponentKind | None
    x: float
    y: float
    label: str = ""
    state: SwitchState = SwitchState.OPEN
    width: float = DEFAULT_BUS_WIDTH
    type_name: str = ""


@dataclass(frozen=True)
class Connection:
    """A wire between two ``"<componentId>.<terminal>"`` references."""

    source: str
    target: str


@dataclass(frozen=True)
class Diagram:
    width: float
    height: float
    kind: DiagramKind = DiagramKind.SCHEMATIC
    components: tuple[Component, ...] = ()
    connections: tuple[Connection, ...] = ()

    def components_by_id(self) -> dict[str, Component]:
        return {c.id: c for c in self.components}


@dataclass(frozen=True)
class DiagramValidation:
    """Outcome of :func:`parse_diagram`: exactly one of diagram/reason is set."""

    diagram: Diagram | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.diagram is not None


class _Invalid(Exception):
    pass


def looks_like_diagram(data: Any) -> bool:
    """Duck-typed check: an object carrying both components and connections."""
    return isinstance(data, dict) and "components" in data and "connections" in data


def parse_diagram(data: Any) -> DiagramValidation:
    """Coerce a decoded JSON value into a :class:`Diagram`.

    Missing optional fields fall back to their defaults and unknown extra
    fields are ignored. Structural problems (wrong container types, missing
    ids or coordinates, non-positive canvas size) produce a failed
    validation carrying a human-readable reason instead of raising.
    """
    try:
        diagram = _parse(data)
    except _Invalid as e:
        return DiagramValidation(reason=str(e))
    return DiagramValidation(diagram=diagram)


def _parse(data: Any) -> Diagram:
    if not isinstance(data, dict):
        raise _Invalid("diagram must be a JSON object")
    if not looks_like_diagram(data):
        raise _Invalid("diagram requires both 'components' and 'connections'")

    raw_components = data["components"]
    raw_connections = data["connections"]
    if not isinstance(raw_components, list):
        raise _Invalid("'components' must be a list")
    if not isinstance(raw_connections, list):
        raise _Invalid("'connections' must be a list")

    width = _number(data.get("width"), "width")
    height = _number(data.get("height"), "height")
    if width <= 0 or height <= 0:
        raise _Invalid(f"canvas size must be positive, got {width:g}x{height:g}")

    raw_kind = data.get("diagramType", DiagramKind.SCHEMATIC.value)
    try:
        kind = DiagramKind(raw_kind)
    except (ValueError, TypeError):
        raise _Invalid(f"unknown diagramType {raw_kind!r}")

    components = tuple(_parse_component(i, c) for i, c in enumerate(raw_components))
    connections = tuple(_parse_connection(i, c) for i, c in enumerate(raw_connections))

    for comp in components:
        if comp.kind is not None and comp.kind.family is not kind:
            logger.warning(
                "Component %r (%s) does not belong to a %s diagram",
                comp.id, comp.kind.value, kind.value,
            )

    return Diagram(
        width=width,
        height=height,
        kind=kind,
        components=components,
        connections=connections,
    )


def _parse_component(index: int, raw: Any) -> Component:
    if not isinstance(raw, dict):
        raise _Invalid(f"components[{index}] must be an object")
    comp_id = raw.get("id")
    if not isinstance(comp_id, str) or not comp_id:
        raise _Invalid(f"components[{index}] is missing a string 'id'")

    type_name = raw.get("type")
    kind = ComponentKind.parse(type_name)
    if kind is None:
        logger.debug("Component %r has unknown type %r", comp_id, type_name)

    width = DEFAULT_BUS_WIDTH
    if kind is ComponentKind.BUS and raw.get("width") is not None:
        width = _number(raw["width"], f"components[{index}].width")
        if width < 0:
            raise _Invalid(f"components[{index}].width must be non-negative")

    try:
        state = SwitchState(raw.get("state", SwitchState.OPEN.value))
    except (ValueError, TypeError):
        state = SwitchState.OPEN

    label = raw.get("label")
    return Component(
        id=comp_id,
        kind=kind,
        x=_number(raw.get("x"), f"components[{index}].x"),
        y=_number(raw.get("y"), f"components[{index}].y"),
        label="" if label is None else str(label),
        state=state,
        width=width,
        type_name=type_name if isinstance(type_name, str) else "",
    )


def _parse_connection(index: int, raw: Any) -> Connection:
    if not isinstance(raw, dict):
        raise _Invalid(f"connections[{index}] must be an object")
    source = raw.get("from")
    target = raw.get("to")
    if not isinstance(source, str) or not isinstance(target, str):
        raise _Invalid(f"connections[{index}] needs string 'from' and 'to'")
    return Connection(source=source, target=target)


def _number(value: Any, name: str) -> float:
    # bool is an int subclass; JSON true/false is never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _Invalid(f"'{name}' must be a number")
    try:
        value = float(value)
    except OverflowError:
        raise _Invalid(f"'{name}' is out of range")
    if not math.isfinite(value):
        raise _Invalid(f"'{name}' must be finite")
    return value


def diagram_to_wire(diagram: Diagram) -> dict[str, Any]:
    """Inverse of :func:`parse_diagram`: the JSON wire form of ``diagram``."""
    components = []
    for c in diagram.components:
        entry: dict[str, Any] = {
            "id": c.id,
            "type": c.kind.value if c.kind is not None else c.type_name,
            "x": c.x,
            "y": c.y,
            "label": c.label,
        }
        if c.kind in _STATEFUL_KINDS:
            entry["state"] = c.state.value
        if c.kind is ComponentKind.BUS:
            entry["width"] = c.width
        components.append(entry)
    return {
        "diagramType": diagram.kind.value,
        "width": diagram.width,
        "height": diagram.height,
        "components": components,
        "connections": [{"from": c.source, "to": c.target} for c in diagram.connections],
    }
