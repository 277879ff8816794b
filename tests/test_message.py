"""
Tests for Message and parse_vars in the native and exchange formats.
"""

import pytest

from structured_i18n.errors import GrammarError, StructureError
from structured_i18n.message import Message
from structured_i18n.variables import parse_vars


def m(*forms):
    return Message(forms)


# ── parse_vars ───────────────────────────────────────────────

class TestParseVars:

    def test_sorted_with_repeats(self):
        assert parse_vars("{b} and {a} and {b}") == ["{a}", "{b}", "{b}"]

    def test_no_variables(self):
        assert parse_vars("") == []
        assert parse_vars("Hello") == []

    @pytest.mark.parametrize("form", ["a { b", "a } b", "{a b}", "{{a}}"])
    def test_stray_brace(self, form):
        with pytest.raises(GrammarError):
            parse_vars(form)


# ── construction ─────────────────────────────────────────────

class TestMessage:

    def test_forms_must_use_same_variables(self):
        with pytest.raises(StructureError):
            m("{count} item", "items")

    def test_variables_order_independent(self):
        message = m("{a} then {b}", "{b} then {a}")
        assert len(message) == 2

    def test_emptiness_is_uniform(self):
        with pytest.raises(StructureError):
            m("", "items")
        assert m("", "").is_empty()
        assert Message.empty(2) == m("", "")
        assert not m("a").is_empty()

    def test_no_forms(self):
        with pytest.raises(StructureError):
            Message([])

    def test_immutable_value(self):
        message = m("a", "b")
        assert message.forms == ("a", "b")
        assert list(message) == ["a", "b"]
        assert message == m("a", "b")
        assert hash(message) == hash(m("a", "b"))


class TestNativeFormat:

    def test_single(self):
        assert Message.from_native("Hello").forms == ("Hello",)

    def test_plural(self):
        message = Message.from_native("{count} item | {count} items")
        assert message.forms == ("{count} item", "{count} items")

    def test_too_many_forms(self):
        with pytest.raises(GrammarError):
            Message.from_native("a | b | c")

    @pytest.mark.parametrize("text", ["a|b", "a |b"])
    def test_unexpected_separator(self, text):
        with pytest.raises(GrammarError):
            Message.from_native(text)

    @pytest.mark.parametrize("text", [" a", "a ", "a  b", "a  | b"])
    def test_unexpected_white_space(self, text):
        with pytest.raises(GrammarError):
            Message.from_native(text)

    def test_to_native(self):
        assert m("{count} item", "{count} items").to_native() == "{count} item | {count} items"

    def test_to_native_rejects_separator(self):
        with pytest.raises(GrammarError):
            m("a|b").to_native()

    @pytest.mark.parametrize("text", ["Hello", "{count} item | {count} items", ""])
    def test_round_trip(self, text):
        assert Message.from_native(text).to_native() == text


class TestExchangeFormat:

    def test_single(self, en):
        assert Message.from_exchange("Hello", en).forms == ("Hello",)

    def test_plural(self, en):
        string = "{count, plural, one {{count} item} other {{count} items}}"
        message = Message.from_exchange(string, en)
        assert message.forms == ("{count} item", "{count} items")

    def test_plural_nested_braces(self, en):
        string = "{count, plural, one {{count} file in {dir}} other {{count} files in {dir}}}"
        message = Message.from_exchange(string, en)
        assert message.forms == ("{count} file in {dir}", "{count} files in {dir}")

    def test_white_space_normalized(self, en):
        assert Message.from_exchange("  Hello \n  world ", en).forms == ("Hello world",)
        string = "{count, plural, one { one  item } other {\n{count} items}}"
        assert Message.from_exchange(string, en).forms == ("one item", "{count} items")

    def test_empty(self, en):
        string = "{count, plural, one {} other {}}"
        assert Message.from_exchange(string, en).is_empty()

    def test_categories_must_match_locale(self, en, ja, registry):
        string = "{count, plural, one {a} other {b}}"
        with pytest.raises(StructureError, match=r"Expected the plural categories \[other\]"):
            Message.from_exchange(string, ja)
        with pytest.raises(StructureError, match="few, many, one, other"):
            Message.from_exchange(string, registry["cs"])
        with pytest.raises(StructureError):
            Message.from_exchange("{count, plural, other {b}}", en)

    def test_categories_sorted_before_comparison(self, registry):
        string = "{count, plural, one {a} few {b} many {c} other {d}}"
        assert len(Message.from_exchange(string, registry["cs"])) == 4

    def test_invalid_plural(self, en):
        with pytest.raises(GrammarError):
            Message.from_exchange("{count, plural, one a}", en)

    def test_to_exchange(self):
        assert m("Hello").to_exchange() == "Hello"
        assert m("{count} item", "{count} items").to_exchange() == (
            "{count, plural, one {{count} item} other {{count} items}}"
        )

    @pytest.mark.parametrize("form", ["it's", "#1"])
    def test_reserved_characters(self, form):
        with pytest.raises(GrammarError):
            m(form).to_exchange()

    def test_too_many_forms(self):
        with pytest.raises(StructureError):
            m("a", "b", "c").to_exchange()

    @pytest.mark.parametrize("forms", [
        ("Hello",),
        ("{name} joined",),
        ("{count} item", "{count} items"),
        ("", ""),
    ])
    def test_round_trip(self, forms, en):
        message = Message(forms)
        assert Message.from_exchange(message.to_exchange(), en) == message
