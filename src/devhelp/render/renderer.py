"""Rendering and display of a single development help entry."""

from __future__ import annotations

import logging
import shutil
from importlib.resources import files
from pathlib import Path

from devhelp.config import AppConfig
from devhelp.errors import RenderingEngineFailure
from devhelp.models import Found, RenderMode, RenderStage
from devhelp.render.engine import RenderingEngine
from devhelp.render.preview import NoPreview, PreviewSurface
from devhelp.render.viewer import ConsoleViewer, Viewer
from devhelp.utils.files import new_output_path, session_temp_dir

LOGGER = logging.getLogger(__name__)

STYLESHEET_NAME = "R.css"


def ensure_stylesheet(directory: Path, source: Path | None = None) -> Path:
    """Copy the baseline stylesheet into ``directory`` unless it is already there."""
    target = directory / STYLESHEET_NAME
    if target.exists():
        return target

    LOGGER.debug("Copying stylesheet into %s", directory)
    if source is not None:
        shutil.copyfile(source, target)
    else:
        target.write_text(load_stylesheet(), encoding="utf-8")
    return target


def load_stylesheet(source: Path | None = None) -> str:
    if source is not None:
        return Path(source).read_text(encoding="utf-8")
    return files("devhelp.render").joinpath(STYLESHEET_NAME).read_text(encoding="utf-8")


class DevelopmentRenderer:
    """Shows a resolved entry through a preview surface or the rendering engine."""

    def __init__(
        self,
        engine: RenderingEngine,
        *,
        preview: PreviewSurface | None = None,
        viewer: Viewer | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.engine = engine
        self.preview = preview or NoPreview()
        self.viewer = viewer or ConsoleViewer()
        self.config = config or AppConfig()

    @property
    def output_dir(self) -> Path:
        return Path(self.config.temp_dir) if self.config.temp_dir is not None else session_temp_dir()

    def render(
        self,
        found: Found,
        *,
        stage: RenderStage | str | None = None,
        mode: RenderMode | str | None = None,
    ) -> Path | None:
        """Display ``found``; returns the rendered file, or None when a preview took over."""
        mode = RenderMode.resolve(mode, self.config.help_type)
        stage = RenderStage(stage) if stage is not None else self.config.stage

        if self.preview.has_preview():
            self.preview.preview(found.location)
            return None

        if mode is RenderMode.TEXT:
            out_path = new_output_path(self.output_dir, "txt")
            self._run_engine(
                out_path,
                lambda: self.engine.render_text(found.location, out_path, found.package, stage),
            )
            self.viewer.show_text(out_path, title=found.title)
        else:
            out_path = new_output_path(self.output_dir, "html")
            self._run_engine(
                out_path,
                lambda: self.engine.render_hypertext(
                    found.location, out_path, found.package, stage, links_enabled=False
                ),
            )
            ensure_stylesheet(out_path.parent, self.config.stylesheet_path)
            self.viewer.open_hypertext(out_path)
        return out_path

    def _run_engine(self, out_path: Path, render) -> None:
        try:
            render()
        except RenderingEngineFailure:
            out_path.unlink(missing_ok=True)
            raise
        except OSError as exc:
            out_path.unlink(missing_ok=True)
            raise RenderingEngineFailure(f"Rendering into {out_path} failed: {exc}") from exc
