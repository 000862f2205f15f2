"""Exceptions raised while resolving and rendering development help."""

from __future__ import annotations

from typing import Sequence


class DevHelpError(Exception):
    """Base class for devhelp failures."""


class RegistryUnavailable(DevHelpError):
    """The development package registry could not be queried."""


class TopicNotFoundAnywhere(DevHelpError, LookupError):
    """No development package, and no installed package, documents the topic."""

    def __init__(self, topic: str | None, packages: Sequence[str]) -> None:
        self.topic = topic
        self.packages = list(packages)
        searched = ", ".join(self.packages) if self.packages else "(no development packages loaded)"
        super().__init__(f"Could not find topic {topic} in: {searched}")


class InvalidRenderMode(DevHelpError, ValueError):
    def __init__(self, mode: object) -> None:
        self.mode = mode
        super().__init__(f"Invalid render mode {mode!r}: expected 'text' or 'html'")


class RenderingEngineFailure(DevHelpError):
    """The external rendering engine failed; ``stderr`` holds its diagnostics."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        self.stderr = stderr
        if stderr.strip():
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)


class StandardHelpFailure(DevHelpError):
    """The standard help mechanism could not be run; ``stderr`` holds its diagnostics."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        self.stderr = stderr
        if stderr.strip():
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)
