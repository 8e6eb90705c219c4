"""Diagram renderer: wires first, then component symbols and labels."""

from __future__ import annotations

import logging

from voltchat.diagram.canvas import SCHEMATIC_STYLE, SINGLE_LINE_STYLE, Canvas, Group, Line, Text, translate
from voltchat.diagram.model import Diagram, DiagramKind
from voltchat.diagram.shapes import symbol_for
from voltchat.diagram.terminals import resolve_reference

logger = logging.getLogger(__name__)

# Labels sit below the symbol center regardless of kind
LABEL_OFFSET = (0, 45)


def render(diagram: Diagram) -> Canvas:
    """Lay out ``diagram`` on a new canvas.

    Draw order is fixed: every wire is emitted before any component so
    symbols paint over wire ends. Connections whose endpoints cannot be
    resolved are skipped without affecting the rest of the drawing.
    """
    canvas = Canvas(width=diagram.width, height=diagram.height)
    if diagram.kind is DiagramKind.SINGLE_LINE:
        canvas.css_classes.append("single-line-diagram")
        canvas.stylesheet = SCHEMATIC_STYLE + "\n" + SINGLE_LINE_STYLE

    by_id = diagram.components_by_id()

    skipped = 0
    for conn in diagram.connections:
        start = resolve_reference(by_id, conn.source)
        end = resolve_reference(by_id, conn.target)
        if start is None or end is None:
            logger.debug("Skipping connection %s -> %s: unresolved endpoint", conn.source, conn.target)
            skipped += 1
            continue
        canvas.add(Line(start.x, start.y, end.x, end.y, "wire"))

    for comp in diagram.components:
        children = []
        symbol = symbol_for(comp.kind, comp.state, comp.width)
        if symbol is not None:
            children.append(symbol)
        else:
            logger.debug("No symbol for component %r of type %r", comp.id, comp.type_name)
        children.append(Text(*LABEL_OFFSET, comp.label, css_class="component-label"))
        canvas.add(Group(children=tuple(children), transform=translate(comp.x, comp.y)))

    logger.debug(
        "Rendered %s diagram: %d component(s), %d wire(s), %d skipped",
        diagram.kind.value, len(diagram.components), len(diagram.connections) - skipped, skipped,
    )
    return canvas


def render_svg(diagram: Diagram) -> str:
    return render(diagram).to_svg()
