"""
Tests for restructure() and destructure().
"""

import json

import pytest

from structured_i18n.comments import SourceComments
from structured_i18n.errors import StructureError
from structured_i18n.message import Message
from structured_i18n.structure import destructure, restructure


def m(*forms):
    return Message(forms)


class TestRestructure:

    def test_messages(self):
        structured = restructure({
            "title": m("Home"),
            "items": m("{count} item", "{count} items"),
        })
        assert structured == {
            "title": {"string": "Home"},
            "items": {"string": "{count, plural, one {{count} item} other {{count} items}}"},
        }

    def test_array_becomes_object(self):
        structured = restructure({"list": [m("one"), {"a": m("two")}]})
        assert structured == {"list": {"0": {"string": "one"}, "1": {"a": {"string": "two"}}}}

    def test_linked_messages_are_left_out(self):
        structured = restructure({
            "common": {"save": m("Save")},
            "form": {"save": m("@:common.save")},
            "button": m("@:common.save"),
        })
        assert structured == {"common": {"save": {"string": "Save"}}}

    def test_invalid_link(self):
        with pytest.raises(StructureError):
            restructure({"form": {"save": m("@:common.save")}})

    def test_link_in_array(self):
        with pytest.raises(StructureError):
            restructure({"common": {"save": m("Save")}, "list": [m("@:common.save")]})

    def test_link_in_component_interpolation(self):
        with pytest.raises(StructureError):
            restructure({
                "common": {"here": m("here")},
                "intro": {"full": m("Click {here}."), "here": m("@:common.here")},
            })

    def test_invalid_value(self):
        with pytest.raises(StructureError):
            restructure({"title": 1})
        with pytest.raises(StructureError):
            restructure({"title": None})

    def test_inline_comment_wins_over_top_of_file_comment(self):
        comments = SourceComments(
            by_key={"title": "From the top of the file"},
            by_path={("title",): "Inline"},
        )
        structured = restructure({"title": m("Home"), "nav": {"title": m("Menu")}}, comments)
        assert structured["title"]["developer_comment"] == "Inline"
        assert structured["nav"]["title"]["developer_comment"] == "From the top of the file"

    def test_comments_are_inherited(self):
        comments = SourceComments(by_key={"nav": "Navigation"}, by_path={("list",): "A list"})
        structured = restructure({
            "nav": {"home": m("Home")},
            "list": [m("one")],
        }, comments)
        assert structured["nav"]["home"]["developer_comment"] == "Navigation"
        assert structured["list"]["0"]["developer_comment"] == "A list"

    def test_component_interpolation_comment_is_appended(self):
        comments = SourceComments(by_path={("intro", "here"): "The link to the docs."})
        structured = restructure({
            "intro": {"full": m("Click {here}."), "here": m("here")},
        }, comments)
        here = structured["intro"]["here"]["developer_comment"]
        assert here.startswith("The link to the docs.\n\nThis text will be formatted")
        assert structured["intro"]["full"]["developer_comment"].startswith(
            "{here} is a separate string"
        )


class TestDestructure:

    def test_messages(self, en):
        payload = json.dumps({
            "title": {"string": "Inicio", "developer_comment": "ignored"},
            "nav": {"items": {"string": "{count, plural, one {{count} item} other {{count} items}}"}},
            "list": {"0": {"string": "uno"}},
        })
        assert destructure(payload, en) == {
            "title": m("Inicio"),
            "nav": {"items": m("{count} item", "{count} items")},
            "list": {"0": m("uno")},
        }

    def test_mapping_payload(self, ja):
        assert destructure({"a": {"string": "テスト"}}, ja) == {"a": m("テスト")}

    def test_plural_categories_checked(self, ja):
        with pytest.raises(StructureError):
            destructure({"a": {"string": "{count, plural, one {a} other {b}}"}}, ja)

    def test_not_an_object(self, en):
        with pytest.raises(StructureError):
            destructure("[]", en)

    def test_round_trip(self, en):
        messages = {
            "title": m("Home"),
            "nav": {"items": m("{count} item", "{count} items"), "empty": m("")},
            "intro": {"full": m("Click {here}."), "here": m("here")},
        }
        assert destructure(json.dumps(restructure(messages)), en) == messages
