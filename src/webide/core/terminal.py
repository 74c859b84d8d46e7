"""Append-only terminal log recording the outcome of every workspace operation."""

from __future__ import annotations

from typing import List, Tuple

WELCOME_LINE = "Welcome to Web IDE Terminal"
PROMPT = "> "


class TerminalLog:
    """Ordered, append-only lines; never trimmed or reordered."""

    def __init__(self, *, welcome: str | None = WELCOME_LINE):
        self._lines: List[str] = [welcome] if welcome else []

    def append(self, message: str) -> str:
        line = f"{PROMPT}{message}"
        self._lines.append(line)
        return line

    def extend(self, messages: List[str]) -> None:
        for message in messages:
            self.append(message)

    @property
    def lines(self) -> Tuple[str, ...]:
        return tuple(self._lines)

    def since(self, index: int) -> Tuple[str, ...]:
        """Lines appended after the first ``index`` lines."""
        return tuple(self._lines[index:])

    def tail(self, count: int) -> Tuple[str, ...]:
        if count <= 0:
            return ()
        return tuple(self._lines[-count:])

    def __len__(self) -> int:
        return len(self._lines)


__all__ = ["TerminalLog", "WELCOME_LINE", "PROMPT"]
