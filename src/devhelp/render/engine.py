"""Rendering of single Rd entries through R's ``tools`` package."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from devhelp.errors import RenderingEngineFailure
from devhelp.models import RenderStage

LOGGER = logging.getLogger(__name__)


class RenderingEngine(Protocol):
    def render_text(self, location: Path, destination: Path, package: str, stage: RenderStage) -> None:
        ...

    def render_hypertext(
        self,
        location: Path,
        destination: Path,
        package: str,
        stage: RenderStage,
        links_enabled: bool,
    ) -> None:
        ...


def r_string(value: str) -> str:
    """Quote ``value`` as an R string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


class RscriptEngine:
    """Runs ``tools::Rd2txt`` and ``tools::Rd2HTML`` in a child R process."""

    def __init__(self, rscript: str = "Rscript") -> None:
        self.rscript = rscript

    def render_text(self, location: Path, destination: Path, package: str, stage: RenderStage) -> None:
        expr = (
            f"tools::Rd2txt({r_string(str(location))}, out = {r_string(str(destination))}, "
            f"package = {r_string(package)}, stages = {r_string(RenderStage(stage).value)})"
        )
        self._run(expr, location)

    def render_hypertext(
        self,
        location: Path,
        destination: Path,
        package: str,
        stage: RenderStage,
        links_enabled: bool,
    ) -> None:
        no_links = "FALSE" if links_enabled else "TRUE"
        expr = (
            f"tools::Rd2HTML({r_string(str(location))}, out = {r_string(str(destination))}, "
            f"package = {r_string(package)}, stages = {r_string(RenderStage(stage).value)}, "
            f"no_links = {no_links})"
        )
        self._run(expr, location)

    def _run(self, expr: str, location: Path) -> None:
        command = [self.rscript, "--vanilla", "-e", expr]
        LOGGER.debug("Running %s", command)
        try:
            completed = subprocess.run(command, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise RenderingEngineFailure(f"Cannot run {self.rscript} to render {location}: {exc}") from exc

        if completed.returncode != 0:
            raise RenderingEngineFailure(
                f"Rendering {location} failed with exit code {completed.returncode}",
                stderr=completed.stderr or "",
            )
