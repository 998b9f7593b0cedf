"""Line-based source writer that indents by brace depth."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = ["CodeWriter"]


class CodeWriter:
    """Accumulates lines, indenting four spaces per open brace."""

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._indent = 0

    def add_line(self, line: str) -> None:
        """Append one line; closing braces dedent it, opening braces indent what follows."""
        indent = self._indent - line.count("}")
        if indent < 0:
            raise ValueError(f"unbalanced closing brace in line: {line!r}")
        self._lines.append(" " * (4 * indent) + line + "\n")
        self._indent = indent + line.count("{")

    def add_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.add_line(line)

    def string(self) -> str:
        """The text written so far."""
        return "".join(self._lines)

    def __str__(self) -> str:
        return self.string()