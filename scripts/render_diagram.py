#!/usr/bin/env python3
"""CLI: Render a diagram JSON file (optionally fenced in markdown) to SVG."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure the package is importable when running as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from voltchat.chat.classifier import extract_fenced_json
from voltchat.diagram.model import parse_diagram
from voltchat.diagram.render import render_svg


def main() -> None:
    parser = argparse.ArgumentParser(description="Render a schematic or single-line diagram to SVG")
    parser.add_argument("input", type=Path, help="Diagram JSON file, or a reply containing a ```json block")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output SVG path (default: input path with .svg suffix)",
    )
    args = parser.parse_args()

    text = args.input.read_text(encoding="utf-8")
    body = extract_fenced_json(text)
    try:
        data = json.loads(body if body is not None else text)
    except json.JSONDecodeError as e:
        print(f"Error: {args.input} is not valid JSON: {e}", file=sys.stderr)
        sys.exit(1)

    validation = parse_diagram(data)
    if not validation.ok:
        print(f"Error: invalid diagram: {validation.reason}", file=sys.stderr)
        sys.exit(1)

    output = args.output or args.input.with_suffix(".svg")
    output.write_text(render_svg(validation.diagram), encoding="utf-8")
    diagram = validation.diagram
    print(
        f"Wrote {output} ({diagram.kind.value}, {len(diagram.components)} components, "
        f"{len(diagram.connections)} connections)"
    )


if __name__ == "__main__":
    main()
