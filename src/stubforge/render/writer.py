"""Indentation-aware line writer for emitted Python."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from io import StringIO


class CodeWriter:
    """Accumulates lines of code at a tracked indentation level."""

    def __init__(self, indent: int = 4) -> None:
        self._buffer = StringIO()
        self._indent_str = " " * indent
        self._level = 0

    def emit(self, line: str = "") -> None:
        """Emit one line at the current indentation. Empty lines are not indented."""
        if not line:
            self._buffer.write("\n")
            return
        self._buffer.write(self._indent_str * self._level)
        self._buffer.write(line)
        self._buffer.write("\n")

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self.emit()

    def docstring(self, text: str) -> None:
        self.emit(f'"""{text}"""')

    def indent(self) -> None:
        self._level += 1

    def dedent(self) -> None:
        self._level = max(0, self._level - 1)

    @contextmanager
    def block(self, header: str) -> Iterator[CodeWriter]:
        """Emit ``header`` and indent everything written inside the block."""
        self.emit(header)
        self.indent()
        try:
            yield self
        finally:
            self.dedent()

    def getvalue(self) -> str:
        return self._buffer.getvalue()
