"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from devhelp.models import RenderStage


def _get_default_registry_path() -> Path:
    """Get the default registry database path."""
    # When running from a checkout, prefer local data/ if it exists
    local_db = Path("data/registry.db")
    if local_db.exists():
        return local_db

    return Path.home() / ".local" / "share" / "devhelp" / "registry.db"


@dataclass(slots=True)
class AppConfig:
    registry_path: Path | None = None
    help_type: str | None = None
    stage: RenderStage = RenderStage.RENDER
    rscript: str = "Rscript"
    preview_command: str | None = None
    stylesheet_path: Path | None = None
    temp_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.registry_path is None:
            self.registry_path = _get_default_registry_path()
        self.stage = RenderStage(self.stage)

    def resolve_registry_path(self, base_dir: Path | None = None) -> Path:
        if self.registry_path is None:
            self.registry_path = _get_default_registry_path()
        if Path(self.registry_path).is_absolute() or base_dir is None:
            return Path(self.registry_path)
        return base_dir / self.registry_path
