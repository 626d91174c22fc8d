"""Directory-tagged console output.

Every line is handed to ``Console.print`` as a single ``Text`` so concurrent
tasks never split each other's lines. Markup and wrapping are disabled: the
``[<dir>] <line>`` format is what downstream scrapers read.
Control characters in child output (other than tab) are shown escaped,
since the console would otherwise drop them.
"""

from __future__ import annotations

import re
from typing import Optional

from rich.console import Console
from rich.text import Text

__all__ = ["LINE_STYLE", "OutputSink", "escape_control", "make_console"]

LINE_STYLE = {
    "start": "cyan",
    "tag": "dim",
    "output": "",
    "start_failed": "red",
    "run_error": "red",
    "finished": "green",
    "info": "bright_black",
}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_NAMED_ESCAPES = {"\r": "\\r"}


def escape_control(line: str) -> str:
    """Show control characters other than tab as escapes such as ``\\r``."""
    return _CONTROL_CHARS.sub(
        lambda m: _NAMED_ESCAPES.get(m.group(), f"\\x{ord(m.group()):02x}"), line
    )


def make_console(**kwargs) -> Console:
    kwargs.setdefault("soft_wrap", True)
    kwargs.setdefault("highlight", False)
    return Console(**kwargs)


class OutputSink:
    """Line-atomic writer for banners and tagged child output."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or make_console()

    def _emit(self, text: Text, end: str = "\n") -> None:
        self.console.print(text, end=end, soft_wrap=True, markup=False, highlight=False)

    def _tagged(self, directory: str, message: str, kind: str) -> Text:
        text = Text(no_wrap=True)
        text.append(f"[{directory}]", style=LINE_STYLE["tag"])
        text.append(f" {message}", style=LINE_STYLE[kind])
        return text

    def info(self, message: str) -> None:
        self._emit(Text(message, style=LINE_STYLE["info"]))

    def start(self, directory: str) -> None:
        self._emit(
            Text(f">>> Running commands in [{directory}]...", style=LINE_STYLE["start"])
        )

    def line(self, directory: str, line: str) -> None:
        self._emit(self._tagged(directory, escape_control(line), "output"))

    def start_failed(self, directory: str, reason: str) -> None:
        self._emit(self._tagged(directory, f"failed to start: {reason}", "start_failed"))

    def run_error(self, directory: str, detail: str) -> None:
        self._emit(self._tagged(directory, f"command error: {detail}", "run_error"))

    def finished(self, directory: str) -> None:
        self._emit(
            Text(f"<<< Finished commands in [{directory}]", style=LINE_STYLE["finished"]),
            end="\n\n",
        )
