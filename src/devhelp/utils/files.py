"""Utility helpers for working with files."""

from __future__ import annotations

import functools
import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Iterable, Iterator

LOGGER = logging.getLogger(__name__)


def iter_rd_paths(inputs: Iterable[Path]) -> Iterator[Path]:
    """Yield Rd paths from input paths, descending into directories."""
    for item in inputs:
        if item.is_dir():
            yield from iter_rd_paths(sorted(child for child in item.rglob("*.Rd")))
        elif item.is_file() and item.suffix == ".Rd":
            yield item


@functools.lru_cache(maxsize=None)
def session_temp_dir() -> Path:
    """Temporary directory shared by every render in this process."""
    return Path(tempfile.mkdtemp(prefix="devhelp-"))


def new_output_path(directory: Path, suffix: str) -> Path:
    """Reserve a fresh file in ``directory`` for one rendered entry."""
    directory.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix="Rtxt", suffix=f".{suffix}", dir=directory)
    os.close(fd)
    return Path(name)


def open_with_system_viewer(path: Path) -> None:
    """Open ``path`` with the platform's default application."""
    LOGGER.debug("Opening %s", path)
    if os.name == "posix":  # macOS/Linux
        opener = "open" if sys.platform == "darwin" else "xdg-open"
        subprocess.Popen([opener, str(path)])
    else:
        os.startfile(path)  # type: ignore[attr-defined]
