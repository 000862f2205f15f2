"""Shared fixtures for devhelp tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List

import pytest


def _write_package(root: Path, name: str, entries: Dict[str, List[str]]) -> Path:
    package_dir = root / name
    (package_dir / "man").mkdir(parents=True)
    (package_dir / "DESCRIPTION").write_text(
        f"Package: {name}\nTitle: Test package\nVersion: 0.0.1\nDescription: A package\n    for tests.\n"
    )
    for filename, aliases in entries.items():
        lines = [f"\\name{{{aliases[0]}}}"]
        lines += [f"\\alias{{{alias}}}" for alias in aliases]
        lines += ["\\title{Test}", "\\description{A topic.}"]
        (package_dir / "man" / f"{filename}.Rd").write_text("\n".join(lines) + "\n")
    return package_dir


@pytest.fixture
def make_package(tmp_path: Path) -> Callable[..., Path]:
    """Create an R package source tree with Rd files declaring the given aliases."""
    root = tmp_path / "packages"

    def factory(name: str, entries: Dict[str, List[str]]) -> Path:
        return _write_package(root, name, entries)

    return factory
