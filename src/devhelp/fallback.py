"""The standard help mechanism that unresolved lookups are forwarded to."""

from __future__ import annotations

import logging
import subprocess
from typing import Any, Protocol

from devhelp.errors import StandardHelpFailure
from devhelp.models import (
    CallExpression,
    Identifier,
    OperatorExpression,
    StringLiteral,
    is_syntactic_name,
)
from devhelp.render.engine import r_string

LOGGER = logging.getLogger(__name__)

NOT_FOUND_STATUS = 3


class StandardHelp(Protocol):
    """Host help lookups; raising ``LookupError`` means nothing documents the topic."""

    def help(self, topic: Any, package: Any = None, **kwargs: Any) -> Any:
        ...

    def question(self, e1: Any, e2: Any = None) -> Any:
        ...


def to_r_source(value: Any) -> str:
    """Write an argument back out as R source text."""
    if value is None:
        return "NULL"
    if isinstance(value, Identifier):
        return value.name if is_syntactic_name(value.name) else f"`{value.name}`"
    if isinstance(value, StringLiteral):
        return r_string(value.value)
    if isinstance(value, CallExpression):
        return f"{to_r_source(Identifier(value.name))}({', '.join(value.args)})"
    if isinstance(value, OperatorExpression):
        return f"{value.operator}{to_r_source(value.operand)}"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return repr(value)
    return r_string(str(value))


class RscriptHelp:
    """Calls ``utils::help`` and ``utils::`?``` in a child R process."""

    def __init__(self, rscript: str = "Rscript", *, help_type: str | None = None) -> None:
        self.rscript = rscript
        self.help_type = help_type

    def help(self, topic: Any, package: Any = None, **kwargs: Any) -> None:
        args = [to_r_source(topic), to_r_source(package)]
        if self.help_type is not None and "help_type" not in kwargs:
            kwargs["help_type"] = self.help_type
        args.extend(f"{key} = {to_r_source(value)}" for key, value in kwargs.items())
        self._run(f"utils::help({', '.join(args)})")

    def question(self, e1: Any, e2: Any = None) -> None:
        if e2 is None:
            call = f"utils::`?`({to_r_source(e1)})"
        else:
            call = f"utils::`?`({to_r_source(e1)}, {to_r_source(e2)})"
        self._run(call)

    def _run(self, call: str) -> None:
        script = (
            f"h <- {call}; "
            f"if (inherits(h, 'help_files_with_topic') && length(h) == 0L) quit(status = {NOT_FOUND_STATUS}L); "
            "print(h)"
        )
        LOGGER.debug("Forwarding to R: %s", call)
        try:
            completed = subprocess.run(
                [self.rscript, "--vanilla", "-e", script], stderr=subprocess.PIPE, text=True, check=False
            )
        except OSError as exc:
            raise StandardHelpFailure(f"Cannot run {self.rscript} to forward {call}: {exc}") from exc

        if completed.returncode == NOT_FOUND_STATUS:
            raise LookupError(f"No documentation found by {call}")
        if completed.returncode != 0:
            raise StandardHelpFailure(
                f"Forwarding {call} failed with exit code {completed.returncode}",
                stderr=completed.stderr or "",
            )
