"""Tests for the help and ? dispatchers."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List
from unittest.mock import MagicMock

import pytest

from devhelp.config import AppConfig
from devhelp.dispatch import HelpDispatcher, as_text, question_topic
from devhelp.errors import (
    InvalidRenderMode,
    RegistryUnavailable,
    StandardHelpFailure,
    TopicNotFoundAnywhere,
)
from devhelp.index.resolver import TopicResolver
from devhelp.models import (
    CallExpression,
    Found,
    Identifier,
    OperatorExpression,
    RenderMode,
    StringLiteral,
)


class FakeRegistry:
    def __init__(self, packages: Dict[str, Dict[str, Path]]) -> None:
        self.packages = packages

    def list_dev_packages(self) -> List[str]:
        return list(self.packages)

    def lookup_entry(self, package: str, topic: str) -> Path | None:
        return self.packages[package].get(topic)


def _dispatcher(packages: Dict[str, Dict[str, Path]], **config_kwargs):
    registry = FakeRegistry(packages)
    renderer = MagicMock()
    fallback = MagicMock()
    config = AppConfig(registry_path=Path("/unused/registry.db"), **config_kwargs)
    dispatcher = HelpDispatcher(registry, renderer, fallback, config=config)
    return dispatcher, renderer, fallback


FOO_A = Path("/src/pkgA/man/foo.Rd")
FOO_B = Path("/src/pkgB/man/foo.Rd")


class TestNormalization:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (Identifier("foo"), "foo"),
            (StringLiteral("foo"), "foo"),
            ("foo", "foo"),
            (None, None),
            (CallExpression("foo", ("1",)), None),
        ],
    )
    def test_as_text(self, value, expected) -> None:
        assert as_text(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Identifier("foo"), "foo"),
            (CallExpression("foo", ("12",)), "foo"),
            (OperatorExpression("?", Identifier("foo")), None),
            (CallExpression("?", ("foo",)), None),
            (StringLiteral("foo"), "foo"),
            ("foo", "foo"),
            (42, "42"),
            (None, None),
        ],
    )
    def test_question_topic(self, value, expected) -> None:
        assert question_topic(value) == expected


class TestHelp:
    def test_dev_topic_renders_from_dev_package(self) -> None:
        dispatcher, renderer, fallback = _dispatcher({"pkgA": {"foo": FOO_A}})

        dispatcher.help("foo")

        renderer.render.assert_called_once()
        found = renderer.render.call_args[0][0]
        assert found == Found(location=FOO_A, package="pkgA")
        fallback.help.assert_not_called()

    @pytest.mark.parametrize("topic", [Identifier("foo"), StringLiteral("foo"), "foo"])
    def test_argument_form_does_not_matter(self, topic) -> None:
        dispatcher, renderer, _ = _dispatcher({"pkgA": {"foo": FOO_A}})

        dispatcher.help(topic)

        assert renderer.render.call_args[0][0].package == "pkgA"

    def test_first_loaded_package_wins(self) -> None:
        dispatcher, renderer, _ = _dispatcher({"pkgA": {"foo": FOO_A}, "pkgB": {"foo": FOO_B}})

        for _ in range(3):
            dispatcher.help(Identifier("foo"))

        assert {call[0][0].location for call in renderer.render.call_args_list} == {FOO_A}

    def test_miss_forwards_original_arguments(self) -> None:
        dispatcher, renderer, fallback = _dispatcher({"pkgA": {"foo": FOO_A}})
        topic = Identifier("lm")

        result = dispatcher.help(topic, None, help_type="html", try_all_packages=True)

        fallback.help.assert_called_once_with(topic, None, help_type="html", try_all_packages=True)
        assert fallback.help.call_args[0][0] is topic
        assert result is fallback.help.return_value
        renderer.render.assert_not_called()

    def test_call_expression_topic_is_forwarded(self) -> None:
        dispatcher, renderer, fallback = _dispatcher({"pkgA": {"foo": FOO_A}})
        topic = CallExpression("foo", ("1",))

        dispatcher.help(topic)

        fallback.help.assert_called_once_with(topic, None)
        renderer.render.assert_not_called()

    def test_pinned_dev_package_uses_renderer(self) -> None:
        dispatcher, renderer, fallback = _dispatcher({"pkgA": {"foo": FOO_A}, "pkgB": {"foo": FOO_B}})

        dispatcher.help(Identifier("foo"), Identifier("pkgB"))

        assert renderer.render.call_args[0][0] == Found(location=FOO_B, package="pkgB")
        fallback.help.assert_not_called()

    def test_pinned_dev_package_missing_topic(self) -> None:
        dispatcher, renderer, fallback = _dispatcher({"pkgA": {"foo": FOO_A}, "pkgB": {}})

        with pytest.raises(TopicNotFoundAnywhere) as excinfo:
            dispatcher.help("foo", "pkgB")

        assert excinfo.value.packages == ["pkgB"]
        renderer.render.assert_not_called()
        fallback.help.assert_not_called()

    def test_pinned_installed_package_is_forwarded(self) -> None:
        dispatcher, renderer, fallback = _dispatcher({"pkgA": {"foo": FOO_A}})
        package = StringLiteral("stats")

        dispatcher.help(Identifier("foo"), package)

        fallback.help.assert_called_once_with(Identifier("foo"), package)
        renderer.render.assert_not_called()

    def test_help_type_selects_render_mode(self) -> None:
        dispatcher, renderer, _ = _dispatcher({"pkgA": {"foo": FOO_A}})

        dispatcher.help("foo", help_type="html")

        assert renderer.render.call_args[1]["mode"] == "html"

    def test_not_found_anywhere(self) -> None:
        dispatcher, _, fallback = _dispatcher({"pkgA": {}, "pkgB": {}})
        fallback.help.side_effect = LookupError("No documentation for 'nope'")

        with pytest.raises(TopicNotFoundAnywhere) as excinfo:
            dispatcher.help(Identifier("nope"))

        assert excinfo.value.topic == "nope"
        assert "pkgA, pkgB" in str(excinfo.value)
        assert isinstance(excinfo.value, LookupError)

    def test_fallback_failure_is_not_not_found(self) -> None:
        dispatcher, _, fallback = _dispatcher({"pkgA": {}})
        fallback.help.side_effect = StandardHelpFailure("Cannot run Rscript")

        with pytest.raises(StandardHelpFailure, match="Cannot run Rscript"):
            dispatcher.help(Identifier("lm"))

    def test_registry_failure_is_not_forwarded(self) -> None:
        registry = MagicMock()
        registry.list_dev_packages.side_effect = RegistryUnavailable("corrupt")
        fallback = MagicMock()
        dispatcher = HelpDispatcher(registry, MagicMock(), fallback)

        with pytest.raises(RegistryUnavailable):
            dispatcher.help("foo")

        fallback.help.assert_not_called()


class TestQuestion:
    def test_bare_identifier(self) -> None:
        dispatcher, renderer, fallback = _dispatcher({"pkgA": {"foo": FOO_A}})

        dispatcher.question(Identifier("foo"))

        assert renderer.render.call_args[0][0].package == "pkgA"
        fallback.question.assert_not_called()

    def test_call_shaped_topic(self) -> None:
        dispatcher, renderer, _ = _dispatcher({"pkgA": {"foo": FOO_A}})

        dispatcher.question(CallExpression("foo", ("12",)))

        assert renderer.render.call_args[0][0].location == FOO_A

    def test_string_topic(self) -> None:
        dispatcher, renderer, _ = _dispatcher({"pkgA": {"foo": FOO_A}})

        dispatcher.question("foo")

        renderer.render.assert_called_once()

    def test_empty_registry_forwards_without_resolving(self) -> None:
        dispatcher, renderer, fallback = _dispatcher({})
        dispatcher.resolver = MagicMock(wraps=dispatcher.resolver)
        e1 = Identifier("bar")

        dispatcher.question(e1)

        fallback.question.assert_called_once_with(e1, None)
        dispatcher.resolver.resolve.assert_not_called()
        renderer.render.assert_not_called()

    def test_double_question_always_forwards(self) -> None:
        dispatcher, renderer, fallback = _dispatcher({"pkgA": {"anything": FOO_A}})
        dispatcher.resolver = MagicMock(wraps=dispatcher.resolver)
        e1 = OperatorExpression("?", Identifier("anything"))

        dispatcher.question(e1)

        fallback.question.assert_called_once_with(e1, None)
        dispatcher.resolver.resolve.assert_not_called()
        renderer.render.assert_not_called()

    def test_binary_form_forwards_both_operands(self) -> None:
        dispatcher, _, fallback = _dispatcher({"pkgA": {"foo": FOO_A}})
        e1, e2 = Identifier("package"), Identifier("stats")

        result = dispatcher.question(e1, e2)

        fallback.question.assert_called_once_with(e1, e2)
        assert result is fallback.question.return_value

    def test_not_found_anywhere(self) -> None:
        dispatcher, _, fallback = _dispatcher({"pkgA": {}})
        fallback.question.side_effect = LookupError("nothing")

        with pytest.raises(TopicNotFoundAnywhere, match="Could not find topic bar in: pkgA"):
            dispatcher.question(Identifier("bar"))


class TestDevHelp:
    def test_renders_first_match(self) -> None:
        dispatcher, renderer, _ = _dispatcher({"pkgA": {"foo": FOO_A}})

        dispatcher.dev_help("foo", stage="build", mode="html")

        renderer.render.assert_called_once_with(
            Found(location=FOO_A, package="pkgA"), stage="build", mode=RenderMode.HTML
        )

    def test_not_found_lists_dev_packages(self) -> None:
        dispatcher, renderer, _ = _dispatcher({"pkgA": {}, "pkgB": {}})

        with pytest.raises(TopicNotFoundAnywhere, match="Could not find topic foo in: pkgA, pkgB"):
            dispatcher.dev_help("foo")

        renderer.render.assert_not_called()

    def test_invalid_mode_fails_fast(self) -> None:
        registry = MagicMock()
        dispatcher = HelpDispatcher(registry, MagicMock(), MagicMock())

        with pytest.raises(InvalidRenderMode):
            dispatcher.dev_help("foo", mode="pdf")

        registry.list_dev_packages.assert_not_called()

    def test_uses_configured_default_mode(self) -> None:
        dispatcher, renderer, _ = _dispatcher({"pkgA": {"foo": FOO_A}}, help_type="html")

        dispatcher.dev_help("foo")

        assert renderer.render.call_args[1]["mode"] is RenderMode.HTML

    def test_custom_resolver(self) -> None:
        registry = FakeRegistry({"pkgA": {"foo": FOO_A}})
        resolver = TopicResolver(registry)

        dispatcher = HelpDispatcher(registry, MagicMock(), MagicMock(), resolver=resolver)

        assert dispatcher.resolver is resolver
        assert dispatcher.dev_packages() == ["pkgA"]
