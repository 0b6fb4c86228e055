"""Tests for variable validation, resolution and token substitution."""

import pytest

from mosaic.exceptions import VariablesValidationError
from mosaic.variables import (
    TemplateSubstitutor,
    VariableResolver,
    decode_overrides,
    decode_variables,
    merge_overrides,
)
from mosaic.variables.substitution import reference_token, token_key


class TestDecode:

    def test_accepts_strings_and_numbers(self):
        assert decode_variables({"a": "x", "b": 2, "c": 1.5}) == {"a": "x", "b": 2, "c": 1.5}

    def test_rejects_wrong_value_types(self):
        with pytest.raises(VariablesValidationError) as exc_info:
            decode_variables({"ok": "x", "flag": True, "items": [1, 2]})

        assert exc_info.value.exit_code == 2
        paths = sorted(error.path for error in exc_info.value.errors)
        assert paths == ["variables.flag", "variables.items"]

    def test_rejects_non_mapping(self):
        with pytest.raises(VariablesValidationError):
            decode_variables(["name", "World"])

    def test_rejects_non_string_names(self):
        with pytest.raises(VariablesValidationError):
            decode_variables({1: "x"})

    def test_overrides_shape(self):
        assert decode_overrides({"#id": {"x": 1}}) == {"#id": {"x": 1}}

        with pytest.raises(VariablesValidationError) as exc_info:
            decode_overrides({"page": "not a mapping", "other": {"x": None}})

        assert len(exc_info.value.errors) == 2

    def test_decode_returns_copy(self):
        source = {"a": "x"}
        decoded = decode_variables(source)
        decoded["a"] = "changed"

        assert source == {"a": "x"}


class TestResolver:

    def test_override_wins_for_its_path_only(self):
        resolver = VariableResolver({"x": 1, "y": "g"}, {"p": {"x": 2}})

        assert resolver.resolve("p") == {"$x": 2, "$y": "g"}
        assert resolver.resolve("q") == {"$x": 1, "$y": "g"}

    def test_empty_configuration(self):
        assert VariableResolver().resolve("anything") == {}

    def test_merge_overrides(self):
        base = {"p": {"x": 1, "y": 1}}
        merged = merge_overrides(base, {"p": {"y": 2}, "q": {"z": 3}})

        assert merged == {"p": {"x": 1, "y": 2}, "q": {"z": 3}}
        assert base == {"p": {"x": 1, "y": 1}}


class TestSubstitutor:

    def setup_method(self):
        self.substitutor = TemplateSubstitutor()

    def test_variables_only(self):
        text = "Hi {{ $name }} ({{$count}}) {{ @other }}"

        result = self.substitutor.substitute_variables(text, {"$name": "World", "$count": 3})

        assert result == "Hi World (3) {{ @other }}"

    def test_missing_variable_renders_empty(self):
        result = self.substitutor.substitute_variables("a{{ $nope }}b", {})

        assert result == "ab"
        assert self.substitutor.undefined_vars == {"nope"}

    def test_substitute_all(self):
        text = "{{ @a/b }}|{{ #ghost }}|{{ $v }}"

        result = self.substitutor.substitute_all(text, {"a/b": "AB", "#ghost": ""})

        assert result == "AB||"

    def test_substituted_text_is_not_rescanned(self):
        result = self.substitutor.substitute_all("{{ @a }}", {"a": "{{ @b }}", "b": "B"})

        assert result == "{{ @b }}"

    def test_strip_tokens(self):
        text = "x{{ @a }}y{{ @b }}z{{ @a }}"

        assert self.substitutor.strip_tokens(text, {"a"}) == "xy{{ @b }}z"

    def test_token_keys(self):
        assert token_key("$name") == "$name"
        assert token_key("@a/b") == "a/b"
        assert token_key("#ghost") == "#ghost"
        assert token_key("not valid") == "not valid"

    def test_reference_token(self):
        assert reference_token("a/b") == "{{ @a/b }}"
        assert reference_token("#ghost") == "{{ #ghost }}"
