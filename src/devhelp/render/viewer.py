"""Display of rendered help files."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from rich.console import Console
from rich.rule import Rule

from devhelp.utils.files import open_with_system_viewer


class Viewer(Protocol):
    def show_text(self, path: Path, title: str) -> None:
        ...

    def open_hypertext(self, path: Path) -> None:
        ...


class ConsoleViewer:
    """Pages plain text in the terminal and hands HTML to the system browser."""

    def __init__(self, console: Console | None = None, *, pager: bool = True) -> None:
        self.console = console or Console()
        self.pager = pager

    def show_text(self, path: Path, title: str) -> None:
        text = path.read_text(encoding="utf-8", errors="replace")
        if self.pager:
            with self.console.pager():
                self._print(text, title)
        else:
            self._print(text, title)

    def _print(self, text: str, title: str) -> None:
        self.console.print(Rule(title))
        self.console.print(text, markup=False, highlight=False)

    def open_hypertext(self, path: Path) -> None:
        open_with_system_viewer(path)
