"""Tests for selector classification and normalization."""

import pytest

from mosaic.diagnostics import DiagnosticKind
from mosaic.selectors import SelectorType, classify, is_canonical_path
from tests.conftest import write_fragment


class TestClassify:
    """Selector grammar."""

    @pytest.mark.parametrize("selector", ["intro", "some-dir/core_instructions", "a/b/c-1"])
    def test_relative(self, selector):
        assert classify(selector) == SelectorType.RELATIVE

    @pytest.mark.parametrize("selector", ["@root-block", "@namespace/path"])
    def test_root(self, selector):
        assert classify(selector) == SelectorType.ROOT

    def test_id(self):
        assert classify("#some-id") == SelectorType.ID

    @pytest.mark.parametrize("selector", [
        "", "@", "#", "#a/b", "a/", "/a", "../secret", "a b", "a.md", "@#x", "$var",
    ])
    def test_invalid(self, selector):
        assert classify(selector) == SelectorType.INVALID

    def test_non_string_is_invalid(self):
        assert classify(None) == SelectorType.INVALID

    def test_canonical_path(self):
        assert is_canonical_path("a/b")
        assert not is_canonical_path("@a/b")
        assert not is_canonical_path("#a")


class TestNormalize:
    """Normalization to canonical paths."""

    def test_root_strips_prefix(self, normalizer):
        assert normalizer.normalize("@dir/page") == "dir/page"
        # Root selectors ignore the referencing fragment's directory
        assert normalizer.normalize("@dir/page", base_path="other/place") == "dir/page"

    def test_relative_without_base_is_root_relative(self, normalizer):
        assert normalizer.normalize("dir/page") == "dir/page"

    def test_relative_resolves_against_fragment_directory(self, normalizer):
        assert normalizer.normalize("note", base_path="docs/guide/page") == "docs/guide/note"
        assert normalizer.normalize("sub/note", base_path="docs/index") == "docs/sub/note"

    def test_relative_from_top_level_fragment(self, normalizer):
        assert normalizer.normalize("note", base_path="index") == "note"

    def test_invalid_returns_none(self, normalizer):
        assert normalizer.normalize("not valid") is None

    def test_id_lookup(self, fragments_dir, normalizer, diagnostics):
        write_fragment(fragments_dir, "partials/greeting", "Hello", fragment_id="greet")

        assert normalizer.normalize("#greet") == "partials/greeting"
        assert len(diagnostics) == 0

    def test_unknown_id_returns_none(self, fragments_dir, normalizer, diagnostics):
        write_fragment(fragments_dir, "partials/greeting", "Hello", fragment_id="greet")

        assert normalizer.normalize("#missing") is None
        assert len(diagnostics) == 0

    def test_duplicate_id_picks_first_and_warns(self, fragments_dir, normalizer, diagnostics):
        write_fragment(fragments_dir, "b/second", "two", fragment_id="dup")
        write_fragment(fragments_dir, "a/first", "one", fragment_id="dup")

        assert normalizer.normalize("#dup") == "a/first"
        assert normalizer.normalize("#dup") == "a/first"

        duplicates = diagnostics.of_kind(DiagnosticKind.DUPLICATE_ID)
        assert len(duplicates) == 1
        assert duplicates[0].subject == "#dup"
