"""
Source-annotated error messages.

An ErrorReporter is built once per compile from the source text and an
optional display filename. format_error() renders a header, up to two lines
of source context, and a caret under the offending column:

    Error: Unexpected character '$' in demo.hk
      1 | fn main() {
      2 |   let x = $;
                  ^
"""
from __future__ import annotations
from typing import List, Optional


class Colors:
    """ANSI escape codes used in diagnostics"""
    RED = '\033[31m'
    BOLD = '\033[1m'
    RESET = '\033[0m'


class ErrorReporter:
    def __init__(self, source: str, filename: str = "", color: bool = True):
        self.source = source
        self.filename = filename
        self.color = color
        self.lines: List[str] = source.split("\n")
        # A trailing newline does not start another line
        if self.lines and self.lines[-1] == "" and source.endswith("\n"):
            self.lines.pop()

    def _paint(self, text: str, *codes: str) -> str:
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET

    def format_error(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> str:
        location = f" in {self.filename}" if self.filename else ""
        header = f"{self._paint('Error:', Colors.BOLD, Colors.RED)} {message}{location}"
        if line is None or not (0 < line <= len(self.lines)):
            return header

        out = [header]
        if line > 1:
            out.append(f"  {line - 1} | {self.lines[line - 2]}")
        source_line = self.lines[line - 1]
        out.append(f"  {line} | {source_line}")

        col = 1 if column is None else column
        col = max(1, min(col, len(source_line) + 1))
        prefix_len = len(f"  {line} | ")
        out.append(" " * (prefix_len + col - 1) + self._paint("^", Colors.RED))
        return "\n".join(out)
