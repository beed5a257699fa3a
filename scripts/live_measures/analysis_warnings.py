"""Warnings surfaced to users at the end of an analysis."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    text: str
    timestamp: int  # epoch millis


class AnalysisWarnings:
    """Collects user-facing warning messages in insertion order."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def add_unique(self, text: str) -> None:
        """Add `text` unless an identical warning is already present."""
        if not text.strip():
            raise ValueError("Text can't be empty")
        if any(m.text == text for m in self._messages):
            return
        self._messages.append(Message(text=text, timestamp=int(time.time() * 1000)))
        log.debug("Analysis warning added: %s", text)

    def warnings(self) -> list[Message]:
        return list(self._messages)
