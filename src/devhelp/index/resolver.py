"""Topic resolution against development packages."""

from __future__ import annotations

import logging
from typing import Collection, List, Sequence

from devhelp.errors import RegistryUnavailable
from devhelp.index.registry import DevPackageRegistry
from devhelp.models import NOT_FOUND, Found, ResolutionResult

LOGGER = logging.getLogger(__name__)


class TopicResolver:
    """Finds the development package entry that documents a topic."""

    def __init__(self, registry: DevPackageRegistry) -> None:
        self.registry = registry

    def dev_packages(self) -> List[str]:
        """Currently loaded development packages, in load order."""
        try:
            packages = self.registry.list_dev_packages()
        except OSError as exc:
            raise RegistryUnavailable(f"Development package registry unreachable: {exc}") from exc

        if (
            not isinstance(packages, Sequence)
            or isinstance(packages, (str, bytes))
            or not all(isinstance(p, str) for p in packages)
        ):
            raise RegistryUnavailable(f"Malformed development package listing: {packages!r}")
        return list(packages)

    def resolve(self, topic: str, *, packages: Collection[str] | None = None) -> ResolutionResult:
        """Return the first entry named exactly ``topic``, in load order.

        ``packages`` restricts the search to a subset of the loaded packages.
        """
        for package in self.dev_packages():
            if packages is not None and package not in packages:
                continue
            try:
                location = self.registry.lookup_entry(package, topic)
            except OSError as exc:
                raise RegistryUnavailable(f"Cannot look up {topic!r} in {package}: {exc}") from exc
            if location is not None:
                LOGGER.debug("Resolved %s to %s in %s", topic, location, package)
                return Found(location=location, package=package)

        LOGGER.debug("Topic %s not found in development packages", topic)
        return NOT_FOUND
