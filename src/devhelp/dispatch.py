"""Drop-in ``help`` and ``?`` entry points that prefer development packages.

Both entry points look a topic up among the packages loaded in development
mode first. When no development package claims the topic, the call is
forwarded to the standard help mechanism with the caller's original
arguments, so the result is indistinguishable from calling it directly.
"""

from __future__ import annotations

import logging
from typing import Any, List

from devhelp.config import AppConfig
from devhelp.errors import TopicNotFoundAnywhere
from devhelp.fallback import StandardHelp
from devhelp.index.registry import DevPackageRegistry
from devhelp.index.resolver import TopicResolver
from devhelp.models import (
    CallExpression,
    Found,
    Identifier,
    OperatorExpression,
    RenderMode,
    RenderStage,
    StringLiteral,
)
from devhelp.render.renderer import DevelopmentRenderer

LOGGER = logging.getLogger(__name__)

DOUBLE_OPERATOR = "?"


def as_text(value: Any) -> str | None:
    """Plain-text form of a topic or package argument, or None if it has none."""
    if value is None:
        return None
    if isinstance(value, Identifier):
        return value.name
    if isinstance(value, StringLiteral):
        return value.value
    if isinstance(value, str):
        return value
    return None


def question_topic(e1: Any) -> str | None:
    """Topic named by the first operand of ``?``; None for the ``??`` search form."""
    if isinstance(e1, Identifier):
        return e1.name
    if isinstance(e1, OperatorExpression):
        return None if e1.operator == DOUBLE_OPERATOR else e1.operator
    if isinstance(e1, CallExpression):
        return None if e1.name == DOUBLE_OPERATOR else e1.name
    if isinstance(e1, StringLiteral):
        return e1.value
    if e1 is None:
        return None
    return str(e1)


class HelpDispatcher:
    """Routes help lookups to the development renderer or the standard mechanism."""

    def __init__(
        self,
        registry: DevPackageRegistry,
        renderer: DevelopmentRenderer,
        fallback: StandardHelp,
        *,
        resolver: TopicResolver | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.registry = registry
        self.renderer = renderer
        self.fallback = fallback
        self.resolver = resolver or TopicResolver(registry)
        self.config = config or AppConfig()

    def dev_packages(self) -> List[str]:
        return self.resolver.dev_packages()

    def dev_help(
        self,
        topic: Any,
        package: str | None = None,
        *,
        stage: RenderStage | str | None = None,
        mode: RenderMode | str | None = None,
    ) -> Any:
        """Render development documentation for ``topic``.

        ``package`` restricts the search to one development package. Raises
        TopicNotFoundAnywhere, listing the packages searched, when no
        development package documents the topic.
        """
        mode = RenderMode.resolve(mode, self.config.help_type)
        topic_str = as_text(topic)
        packages = self.dev_packages()
        searched = [package] if package is not None else packages

        result = self.resolver.resolve(topic_str, packages=searched) if topic_str is not None else None
        if not isinstance(result, Found):
            raise TopicNotFoundAnywhere(topic_str if topic_str is not None else repr(topic), searched)
        return self.renderer.render(result, stage=stage, mode=mode)

    def help(self, topic: Any, package: Any = None, **kwargs: Any) -> Any:
        """Replacement for the standard ``help(topic, package, ...)``."""
        topic_str = as_text(topic)
        package_str = as_text(package)

        if package is None:
            if topic_str is not None:
                result = self.resolver.resolve(topic_str)
                if isinstance(result, Found):
                    LOGGER.debug("Showing development help for %s from %s", topic_str, result.package)
                    return self.renderer.render(result, mode=kwargs.get("help_type"))
            return self._forward_help(topic_str, topic, package, **kwargs)

        if package_str is not None and package_str in self.dev_packages():
            return self.dev_help(topic, package_str, mode=kwargs.get("help_type"))

        return self._forward_help(topic_str, topic, package, **kwargs)

    def question(self, e1: Any, e2: Any = None) -> Any:
        """Replacement for the standard ``?`` operator, in ``?e1`` and ``e1?e2`` forms."""
        topic = question_topic(e1)
        if topic is not None and self.dev_packages():
            result = self.resolver.resolve(topic)
            if isinstance(result, Found):
                LOGGER.debug("Showing development help for %s from %s", topic, result.package)
                return self.renderer.render(result)

        LOGGER.debug("Forwarding ?%r to the standard help", e1)
        try:
            return self.fallback.question(e1, e2)
        except TopicNotFoundAnywhere:
            raise
        except LookupError as exc:
            raise TopicNotFoundAnywhere(
                topic if topic is not None else repr(e1), self.dev_packages()
            ) from exc

    def _forward_help(self, topic_str: str | None, topic: Any, package: Any, **kwargs: Any) -> Any:
        LOGGER.debug("Forwarding help(%r, %r) to the standard help", topic, package)
        try:
            return self.fallback.help(topic, package, **kwargs)
        except TopicNotFoundAnywhere:
            raise
        except LookupError as exc:
            raise TopicNotFoundAnywhere(
                topic_str if topic_str is not None else repr(topic), self.dev_packages()
            ) from exc
