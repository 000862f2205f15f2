"""Core devhelp data models."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from devhelp.errors import InvalidRenderMode

_SYNTACTIC_NAME = re.compile(r"^(?:[A-Za-z]|\.(?![0-9]))[A-Za-z0-9._]*$")
_CALL = re.compile(r"^(?P<name>[A-Za-z.][A-Za-z0-9._]*|`[^`]+`)\s*\((?P<args>.*)\)$", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Identifier:
    """A bare name, e.g. ``?foo`` or ``help(foo)``."""

    name: str


@dataclass(frozen=True, slots=True)
class StringLiteral:
    """A quoted topic, e.g. ``help("foo")``."""

    value: str


@dataclass(frozen=True, slots=True)
class CallExpression:
    """A call-shaped topic, e.g. ``?foo(12)``."""

    name: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class OperatorExpression:
    """A prefix operator applied to an operand, e.g. the inner ``?foo`` of ``??foo``."""

    operator: str
    operand: "Expression"


Expression = Union[Identifier, StringLiteral, CallExpression, OperatorExpression]


def is_syntactic_name(text: str) -> bool:
    return _SYNTACTIC_NAME.match(text) is not None


def parse_expression(text: str) -> Expression:
    """Classify command-line text into an expression variant without evaluating it."""
    text = text.strip()
    if text.startswith("?"):
        return OperatorExpression("?", parse_expression(text[1:]))
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return StringLiteral(text[1:-1])
    if len(text) >= 2 and text[0] == text[-1] == "`":
        return Identifier(text[1:-1])
    if is_syntactic_name(text):
        return Identifier(text)
    match = _CALL.match(text)
    if match:
        name = match.group("name").strip("`")
        args = tuple(arg.strip() for arg in match.group("args").split(",") if arg.strip())
        return CallExpression(name, args)
    return StringLiteral(text)


@dataclass(frozen=True, slots=True)
class Found:
    """A documentation entry and the development package that owns it."""

    location: Path
    package: str

    @property
    def title(self) -> str:
        return f"{self.package}:{self.location.name}"


@dataclass(frozen=True, slots=True)
class NotFound:
    pass


NOT_FOUND = NotFound()

ResolutionResult = Union[Found, NotFound]


class RenderMode(str, Enum):
    TEXT = "text"
    HTML = "html"

    @classmethod
    def resolve(cls, mode: str | RenderMode | None, default: str | RenderMode | None = None) -> RenderMode:
        """Pick the explicit mode, then the configured default, then text."""
        for candidate in (mode, default):
            if candidate is None:
                continue
            if isinstance(candidate, RenderMode):
                return candidate
            value = str(candidate).lower()
            if value == "hypertext":
                return cls.HTML
            try:
                return cls(value)
            except ValueError:
                raise InvalidRenderMode(candidate) from None
        return cls.TEXT


class RenderStage(str, Enum):
    """Lifecycle phase whose \\Sexpr macros are expanded while rendering."""

    BUILD = "build"
    INSTALL = "install"
    RENDER = "render"
