"""Tests for deprecation and experimental propagation."""

from __future__ import annotations

import pytest

from cdpbind.schema.deprecation import (
    NOT_DEPRECATED,
    ROOT_META,
    DeprecatedNoText,
    DeprecatedWithText,
    deprecation_of,
    escape_for_markdown,
    inherit,
    propagate,
)
from cdpbind.schema.model import Definition


class TestEscape:
    def test_escapes_markdown_hazards(self) -> None:
        assert escape_for_markdown("see [docs](url) *now*") == "see \\[docs\\]\\(url\\) \\*now\\*"

    def test_plain_text_unchanged(self) -> None:
        assert escape_for_markdown("use Page.navigate") == "use Page.navigate"


class TestDeprecationOf:
    def test_not_deprecated(self) -> None:
        assert deprecation_of(False, "Deprecated, whatever") is NOT_DEPRECATED

    def test_no_description(self) -> None:
        assert deprecation_of(True, None) == DeprecatedNoText()

    def test_bare_deprecated_sentence(self) -> None:
        assert deprecation_of(True, "Deprecated.") == DeprecatedNoText()

    def test_description_without_keyword(self) -> None:
        assert deprecation_of(True, "Frame identifier.") == DeprecatedNoText()

    def test_prefix_is_stripped(self) -> None:
        status = deprecation_of(True, "Deprecated, use Page.navigate instead.")
        assert status == DeprecatedWithText("use Page.navigate instead.")
        assert status.has_own_warning

    def test_case_insensitive_match_is_escaped(self) -> None:
        status = deprecation_of(True, "This field is DEPRECATED (see *notes*).")
        assert status.warning == "This field is DEPRECATED \\(see \\*notes\\*\\)."


class TestInherit:
    def test_own_warning_wins(self) -> None:
        own = DeprecatedWithText("mine")
        assert inherit(own, DeprecatedWithText("parent")) is own

    def test_silent_child_takes_parent_text(self) -> None:
        status = inherit(DeprecatedNoText(), DeprecatedWithText("parent"))
        assert status == DeprecatedWithText("parent", inherited=True)
        assert not status.has_own_warning

    def test_not_deprecated_stays(self) -> None:
        assert inherit(NOT_DEPRECATED, DeprecatedWithText("parent")) is NOT_DEPRECATED

    def test_parent_without_text(self) -> None:
        assert inherit(DeprecatedNoText(), DeprecatedNoText()) == DeprecatedNoText()


class TestNodeMeta:
    def test_experimental_cascades(self) -> None:
        parent = ROOT_META.child(False, None, True)
        assert parent.child(False, None, False).experimental is True

    def test_carried_skips_undeprecated_generations(self) -> None:
        grandparent = ROOT_META.child(True, "Deprecated, gone.", False)
        parent = grandparent.child(False, None, False)
        assert not parent.deprecated
        child = parent.child(True, None, False)
        assert child.deprecation == DeprecatedWithText("gone.", inherited=True)


class TestPropagate:
    def test_paths_cover_nested_nodes(self, definition: Definition) -> None:
        index = propagate(definition)
        assert ("Page",) in index
        assert ("Page", "type", "Frame", "field", "url") in index
        assert ("Page", "command", "navigate", "param", "url") in index
        assert ("Page", "command", "navigate", "return", "frameId") in index
        assert ("DOM", "type", "Node", "field", "children", "item") in index

    def test_experimental_domain(self, definition: Definition) -> None:
        index = propagate(definition)
        assert index[("DOM", "type", "Node")].experimental
        assert index[("DOM", "command", "getDocument", "return", "root")].experimental
        assert not index[("Page", "type", "Frame")].experimental
        assert index[("Page", "command", "getLayoutMetrics")].experimental

    def test_deprecated_command(self, definition: Definition) -> None:
        index = propagate(definition)
        meta = index[("Page", "command", "clearDeviceMetricsOverride")]
        assert meta.deprecation == DeprecatedWithText(
            "use Emulation.clearDeviceMetricsOverride instead."
        )

    def test_field_inherits_type_warning(self, definition: Definition) -> None:
        index = propagate(definition)
        url = index[("Network", "type", "CachedResource", "field", "url")]
        assert url.deprecation == DeprecatedWithText("This is deprecated, avoid.", inherited=True)
        size = index[("Network", "type", "CachedResource", "field", "bodySize")]
        assert not size.deprecated

    def test_deprecated_without_text(self, definition: Definition) -> None:
        index = propagate(definition)
        meta = index[("DOM", "type", "Node", "field", "pseudoType")]
        assert meta.deprecation == DeprecatedNoText()

    @pytest.mark.parametrize(
        "path",
        [
            ("Page", "command", "clearDeviceMetricsOverride"),
            ("Network", "type", "CachedResource"),
            ("Network", "type", "CachedResource", "field", "url"),
            ("DOM", "type", "Node", "field", "pseudoType"),
        ],
    )
    def test_deprecated_paths(self, definition: Definition, path: tuple[str, ...]) -> None:
        assert path in propagate(definition).deprecated_paths()

    def test_deprecated_paths_count(self, definition: Definition) -> None:
        assert len(propagate(definition).deprecated_paths()) == 4
