"""Interface of the development package registry."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence


class DevPackageRegistry(Protocol):
    """Read side of whatever tracks packages loaded in development mode."""

    def list_dev_packages(self) -> Sequence[str]:
        """Package names in the order they were loaded."""
        ...

    def lookup_entry(self, package: str, topic: str) -> Path | None:
        """Location of the entry documenting ``topic`` in ``package``, if any."""
        ...
