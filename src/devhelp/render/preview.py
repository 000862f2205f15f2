"""Interactive preview surfaces that can take over rendering."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

LOGGER = logging.getLogger(__name__)


class PreviewSurface(Protocol):
    def has_preview(self) -> bool:
        ...

    def preview(self, location: Path) -> None:
        ...


class NoPreview:
    def has_preview(self) -> bool:
        return False

    def preview(self, location: Path) -> None:
        raise RuntimeError("No preview surface is available")


class CommandPreview:
    """Hands an Rd file to an external previewer, e.g. an editor's preview pane.

    ``command`` is split like a shell command line; the entry location is
    appended as the last argument.
    """

    def __init__(self, command: str) -> None:
        self.argv = shlex.split(command)

    def has_preview(self) -> bool:
        return bool(self.argv) and shutil.which(self.argv[0]) is not None

    def preview(self, location: Path) -> None:
        LOGGER.debug("Previewing %s with %s", location, self.argv[0])
        subprocess.Popen([*self.argv, str(location)])


def preview_from_command(command: str | None) -> PreviewSurface:
    return CommandPreview(command) if command else NoPreview()
