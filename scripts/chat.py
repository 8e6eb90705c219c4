#!/usr/bin/env python3
"""CLI: Chat with the assistant in the terminal; diagrams and images are saved to disk."""

from __future__ import annotations

import argparse
import logging
import mimetypes
import sys
from pathlib import Path

# Ensure the package is importable when running as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from voltchat import config
from voltchat.chat.classifier import PlainText
from voltchat.chat.prompts import WELCOME_MESSAGE
from voltchat.chat.session import (
    ChatSession,
    DiagramRendered,
    ImageFailed,
    ImagePending,
    ImageReady,
    run_turn,
)
from voltchat.chat.stream import TextUpdate, TurnCommitted, TurnFailed

ATTACH_COMMAND = "/attach "


def _run_one(session: ChatSession, prompt: str, out_dir: Path, turn: int) -> None:
    shown = 0
    for event in run_turn(session, prompt):
        if isinstance(event, TextUpdate):
            # Print only the new tail of the running buffer
            sys.stdout.write(event.text[shown:])
            sys.stdout.flush()
            shown = len(event.text)
        elif isinstance(event, TurnFailed):
            print(f"\n[error] {event.message}", file=sys.stderr)
        elif isinstance(event, TurnCommitted) and not isinstance(event.result, PlainText):
            print("\n[structured reply received]")
        elif isinstance(event, DiagramRendered):
            path = out_dir / f"diagram-{turn}.svg"
            path.write_text(event.svg, encoding="utf-8")
            print(f"[diagram saved to {path}]")
        elif isinstance(event, ImagePending):
            print(event.message)
        elif isinstance(event, ImageReady):
            path = out_dir / f"image-{turn}.jpg"
            path.write_bytes(event.data)
            print(f"[image saved to {path}]")
        elif isinstance(event, ImageFailed):
            print(f"[error] {event.message}", file=sys.stderr)
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat about renewable energy, with diagrams and images")
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path("."),
        help="Directory where rendered diagrams and generated images are written (default: .)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help=f"Gemini chat model (default: {config.GEMINI_MODEL})",
    )
    parser.add_argument(
        "--language",
        type=str,
        default=None,
        help=f"Language for text replies (default: {config.RESPONSE_LANGUAGE})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    if not config.GEMINI_API_KEY:
        print("Error: GEMINI_API_KEY is not set. Add it to .env or the environment.", file=sys.stderr)
        sys.exit(1)

    args.out_dir.mkdir(parents=True, exist_ok=True)
    session = ChatSession(model=args.model, language=args.language)
    print(WELCOME_MESSAGE)
    print(f"(Type '{ATTACH_COMMAND.strip()} <image>' to attach an image, Ctrl-D to quit.)")

    turn = 0
    while True:
        try:
            line = input("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if line.startswith(ATTACH_COMMAND):
            path = Path(line[len(ATTACH_COMMAND):].strip()).expanduser()
            mime_type, _ = mimetypes.guess_type(path.name)
            try:
                session.attach(path.read_bytes(), mime_type or "", name=path.name)
            except (OSError, ValueError) as e:
                print(f"[error] {e}", file=sys.stderr)
                continue
            print(f"[attached {path.name}]")
            continue

        if not line.strip() and session.attachment is None:
            continue
        turn += 1
        _run_one(session, line, args.out_dir, turn)


if __name__ == "__main__":
    main()
