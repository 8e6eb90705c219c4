"""Shape library: symbol geometry and terminal tables for each component kind.

Every symbol is drawn around its nominal center at local ``(0, 0)``; the
renderer translates the returned group to the component's position. The
terminal tables hold the same local coordinates as the terminal stubs in the
drawings, so a wire ending on a terminal meets the symbol's lead.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from voltchat.diagram.canvas import Circle, Element, Group, Line, Path, Rect, Text, rotate
from voltchat.diagram.model import DEFAULT_BUS_WIDTH, ComponentKind, SwitchState

# Rotation of the switch's moving contact, pivoted at the ``in``-side contact
SWITCH_OPEN_ANGLE = -30.0
SWITCH_CLOSED_ANGLE = 0.0
SWITCH_PIVOT = (-5.0, 0.0)

Offset = tuple[float, float]


@dataclass(frozen=True)
class ShapeDef:
    """Drawing routine and terminal table for one kind, kept side by side."""

    draw: Callable[[SwitchState, float], tuple[Element, ...]]
    terminals: dict[str, Offset]
    default_terminal: str


def _battery(state: SwitchState, width: float) -> tuple[Element, ...]:
    return (
        Line(0, -20, 0, 20, "component-body terminal"),
        Line(-15, -10, 15, -10, "component-body"),
        Line(-10, 10, 10, 10, "component-body"),
        Text(-25, -8, "+", font_size="16px", anchor="middle"),
        Text(-20, 15, "-", font_size="20px", anchor="middle"),
    )


def _resistor(state: SwitchState, width: float) -> tuple[Element, ...]:
    return (
        Line(-30, 0, -20, 0, "component-body terminal"),
        Path("M -20 0 l 5 -10 l 10 20 l 10 -20 l 10 20 l 10 -20 l 5 10", "component-body", fill="none"),
        Line(20, 0, 30, 0, "component-body terminal"),
    )


def _led(state: SwitchState, width: float) -> tuple[Element, ...]:
    emission = Group(
        children=(
            Path("M 0 0 l 5 5 l -5 5", "component-body", fill="none"),
            Path("M 5 0 l 5 5 l -5 5", "component-body", fill="none"),
        ),
        transform="translate(5, -20) rotate(-45)",
    )
    return (
        Line(-25, 0, 0, 0, "component-body terminal"),
        Line(25, 0, 0, 0, "component-body terminal"),
        Path("M 0 -15 l 25 15 l -25 15 z", "component-body", fill="none"),
        Line(-5, 15, 25, 15, "component-body"),
        emission,
    )


def switch_angle(state: SwitchState) -> float:
    return SWITCH_OPEN_ANGLE if state is SwitchState.OPEN else SWITCH_CLOSED_ANGLE


def _switch(state: SwitchState, width: float) -> tuple[Element, ...]:
    return (
        Line(-30, 0, -5, 0, "component-body terminal"),
        Line(30, 0, 5, 0, "component-body terminal"),
        Circle(-5, 0, 3, "component-body", fill="#333"),
        Circle(5, 0, 3, "component-body", fill="#333"),
        Line(-5, 0, 25, 0, "component-body switch-arm", transform=rotate(switch_angle(state), *SWITCH_PIVOT)),
    )


def _generator(state: SwitchState, width: float) -> tuple[Element, ...]:
    return (
        Circle(0, 0, 20, "component-body", fill="none"),
        Path("M -13 0 Q -6.5 -15 0 0 T 13 0", "component-symbol"),
        Line(0, 20, 0, 30, "component-body terminal"),
    )


def _transformer(state: SwitchState, width: float) -> tuple[Element, ...]:
    return (
        Circle(0, -8, 12, "component-body", fill="none"),
        Circle(0, 8, 12, "component-body", fill="none"),
        Line(0, -20, 0, -30, "component-body terminal"),
        Line(0, 20, 0, 30, "component-body terminal"),
    )


def _bus(state: SwitchState, width: float) -> tuple[Element, ...]:
    return (Line(-width / 2, 0, width / 2, 0, "bus-bar"),)


def _breaker(state: SwitchState, width: float) -> tuple[Element, ...]:
    return (
        Rect(-8, -8, 16, 16, "component-body", fill="none"),
        Line(-25, 0, -8, 0, "component-body terminal"),
        Line(25, 0, 8, 0, "component-body terminal"),
    )


def _load(state: SwitchState, width: float) -> tuple[Element, ...]:
    return (
        Line(0, -25, 0, 0, "component-body terminal"),
        Path("M 0 0 L -10 10 L 0 5 L 10 10 Z", "component-symbol"),
    )


SHAPES: dict[ComponentKind, ShapeDef] = {
    ComponentKind.BATTERY: ShapeDef(_battery, {"positive": (0, -20), "negative": (0, 20)}, "negative"),
    ComponentKind.RESISTOR: ShapeDef(_resistor, {"in": (-30, 0), "out": (30, 0)}, "out"),
    ComponentKind.LED: ShapeDef(_led, {"anode": (-25, 0), "cathode": (25, 0)}, "cathode"),
    ComponentKind.SWITCH: ShapeDef(_switch, {"in": (-30, 0), "out": (30, 0)}, "out"),
    ComponentKind.GENERATOR: ShapeDef(_generator, {"out": (0, 30)}, "out"),
    ComponentKind.TRANSFORMER: ShapeDef(_transformer, {"primary": (0, -30), "secondary": (0, 30)}, "secondary"),
    # Bus terminals are numeric horizontal offsets, resolved by the terminal resolver
    ComponentKind.BUS: ShapeDef(_bus, {}, "0"),
    ComponentKind.BREAKER: ShapeDef(_breaker, {"in": (-25, 0), "out": (25, 0)}, "out"),
    ComponentKind.LOAD: ShapeDef(_load, {"in": (0, -25)}, "in"),
}

_missing = set(ComponentKind) - SHAPES.keys()
if _missing:
    raise RuntimeError(f"SHAPES lacks entries for {sorted(k.value for k in _missing)}")


def symbol_for(
    kind: ComponentKind | None,
    state: SwitchState = SwitchState.OPEN,
    width: float = DEFAULT_BUS_WIDTH,
) -> Group | None:
    """Return the symbol for ``kind`` centered on the origin, or None if unknown."""
    if kind is None:
        return None
    shape = SHAPES[kind]
    return Group(children=shape.draw(state, width), css_class=f"component {kind.value}")


def terminal_offsets_for(kind: ComponentKind) -> dict[str, Offset]:
    return dict(SHAPES[kind].terminals)


def default_terminal_for(kind: ComponentKind) -> str:
    return SHAPES[kind].default_terminal
