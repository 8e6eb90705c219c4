"""Vector primitives and an ordered drawing canvas that serialises to SVG."""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

SVG_NS = "http://www.w3.org/2000/svg"

# Stroke weights per diagram style; single-line drawings emphasise the bus bar
SCHEMATIC_STYLE = """\
.wire { stroke: #333; stroke-width: 2; }
.component-body { stroke: #000; stroke-width: 2; fill: none; }
.component-symbol { stroke: #000; stroke-width: 2; fill: none; }
.bus-bar { stroke: #000; stroke-width: 6; stroke-linecap: round; }
.component-label { font-family: sans-serif; font-size: 12px; text-anchor: middle; }"""

SINGLE_LINE_STYLE = """\
.single-line-diagram .wire { stroke: #1a237e; stroke-width: 2.5; }
.single-line-diagram .component-body { stroke: #1a237e; stroke-width: 2.5; fill: none; }
.single-line-diagram .component-symbol { stroke: #1a237e; stroke-width: 2; fill: none; }
.single-line-diagram .bus-bar { stroke: #b71c1c; stroke-width: 8; stroke-linecap: square; }"""


def _fmt(value: float) -> str:
    """Format a coordinate without a trailing ``.0`` for whole numbers."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _attrs(pairs: list[tuple[str, str | None]]) -> str:
    return "".join(f' {k}="{escape(v)}"' for k, v in pairs if v is not None)


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    css_class: str | None = None
    transform: str | None = None

    def to_svg(self) -> str:
        return "<line%s/>" % _attrs([
            ("x1", _fmt(self.x1)), ("y1", _fmt(self.y1)),
            ("x2", _fmt(self.x2)), ("y2", _fmt(self.y2)),
            ("class", self.css_class), ("transform", self.transform),
        ])


@dataclass(frozen=True)
class Path:
    d: str
    css_class: str | None = None
    fill: str | None = None

    def to_svg(self) -> str:
        return "<path%s/>" % _attrs([("d", self.d), ("class", self.css_class), ("fill", self.fill)])


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    css_class: str | None = None
    fill: str | None = None

    def to_svg(self) -> str:
        return "<circle%s/>" % _attrs([
            ("cx", _fmt(self.cx)), ("cy", _fmt(self.cy)), ("r", _fmt(self.r)),
            ("class", self.css_class), ("fill", self.fill),
        ])


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    css_class: str | None = None
    fill: str | None = None

    def to_svg(self) -> str:
        return "<rect%s/>" % _attrs([
            ("x", _fmt(self.x)), ("y", _fmt(self.y)),
            ("width", _fmt(self.width)), ("height", _fmt(self.height)),
            ("class", self.css_class), ("fill", self.fill),
        ])


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    content: str
    css_class: str | None = None
    font_size: str | None = None
    anchor: str | None = None

    def to_svg(self) -> str:
        attrs = _attrs([
            ("x", _fmt(self.x)), ("y", _fmt(self.y)),
            ("font-size", self.font_size), ("text-anchor", self.anchor),
            ("class", self.css_class),
        ])
        return f"<text{attrs}>{escape(self.content)}</text>"


@dataclass(frozen=True)
class Group:
    """A transformed container of primitives (and nested groups)."""

    children: tuple[Element, ...] = ()
    transform: str | None = None
    css_class: str | None = None

    def to_svg(self) -> str:
        inner = "".join(child.to_svg() for child in self.children)
        return f"<g{_attrs([('transform', self.transform), ('class', self.css_class)])}>{inner}</g>"


Element = Line | Path | Circle | Rect | Text | Group


def translate(x: float, y: float) -> str:
    return f"translate({_fmt(x)}, {_fmt(y)})"


def rotate(angle: float, cx: float = 0, cy: float = 0) -> str:
    return f"rotate({_fmt(angle)} {_fmt(cx)} {_fmt(cy)})"


@dataclass
class Canvas:
    """A sized drawing surface; ``elements`` order is paint order."""

    width: float
    height: float
    css_classes: list[str] = field(default_factory=list)
    stylesheet: str = SCHEMATIC_STYLE
    elements: list[Element] = field(default_factory=list)

    def add(self, element: Element) -> None:
        self.elements.append(element)

    def to_svg(self) -> str:
        attrs = _attrs([
            ("xmlns", SVG_NS),
            ("viewBox", f"0 0 {_fmt(self.width)} {_fmt(self.height)}"),
            ("preserveAspectRatio", "xMidYMid meet"),
            ("class", " ".join(self.css_classes) or None),
        ])
        body = "".join(el.to_svg() for el in self.elements)
        return f"<svg{attrs}><style>{self.stylesheet}</style>{body}</svg>"
