"""Stream aggregator: accumulate streamed fragments and commit one classification per turn."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from voltchat.chat.classifier import Classification, classify

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Sorry, something went wrong while processing your request."


@dataclass(frozen=True)
class TextUpdate:
    """The running buffer, to be shown as plain text while streaming."""

    text: str


@dataclass(frozen=True)
class TurnCommitted:
    result: Classification


@dataclass(frozen=True)
class TurnFailed:
    """The transport failed; the in-progress message must be retracted."""

    message: str


TurnEvent = TextUpdate | TurnCommitted | TurnFailed


class StreamAggregator:
    """Accumulator for one in-flight turn."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._result: Classification | None = None

    @property
    def text(self) -> str:
        return "".join(self._parts)

    @property
    def committed(self) -> bool:
        return self._result is not None

    def feed(self, fragment: str | None) -> str:
        """Append a fragment and return the running text."""
        if self.committed:
            raise RuntimeError("Turn already committed")
        self._parts.append(fragment or "")
        return self.text

    def finish(self) -> Classification:
        """Classify the final buffer. May be called once per turn."""
        if self.committed:
            raise RuntimeError("Turn already committed")
        self._result = classify(self.text)
        return self._result


def aggregate(fragments: Iterable[str | None]) -> Iterator[TurnEvent]:
    """Pull ``fragments`` to completion, yielding turn events.

    Yields one :class:`TextUpdate` per fragment, then exactly one terminal
    event: :class:`TurnCommitted` when the source is exhausted, or
    :class:`TurnFailed` if the source raises.
    """
    agg = StreamAggregator()
    count = 0
    try:
        for fragment in fragments:
            count += 1
            yield TextUpdate(text=agg.feed(fragment))
    except Exception:
        logger.exception("Stream failed after %d fragment(s)", count)
        yield TurnFailed(message=GENERIC_FAILURE)
        return

    result = agg.finish()
    logger.debug("Stream complete: %d fragment(s), %d chars -> %s", count, len(agg.text), type(result).__name__)
    yield TurnCommitted(result=result)
