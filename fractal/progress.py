"""Textual progress display."""

from __future__ import annotations

import sys
from typing import Optional, TextIO


class ProgressBar:
    """Print the percentage of ``total`` reached, rewriting the same line.

    Output only happens when the one-decimal percentage changes.
    """

    def __init__(self, total: int, stream: Optional[TextIO] = None) -> None:
        self.total = total
        self.stream = stream if stream is not None else sys.stdout
        self._last = ""

    def __call__(self, value: int) -> None:
        percent = 100.0 * value / self.total if self.total else 100.0
        text = f"{percent:.1f}"
        if text != self._last:
            print(f"\r{text}%", end="", file=self.stream, flush=True)
        self._last = text
