"""Tests for child-property materialization and scope objects."""

from __future__ import annotations

import pytest

from diagbridge.constants import ScopeType
from diagbridge.core.children import add_children
from diagbridge.core.children import flatten_listing
from diagbridge.core.children import has_children
from diagbridge.core.children import make_scope
from diagbridge.core.children import property_refs
from diagbridge.core.handles import HandleAllocator


class TestAddChildren:
    def test_display_backfills_missing_fields(self, provider):
        obj = {"handle": 1, "type": "function", "display": "function f() {}"}

        add_children(obj, provider)

        assert obj["value"] == "function f() {}"
        assert obj["text"] == "function f() {}"
        assert obj["className"] == "function"

    def test_display_does_not_overwrite(self, provider):
        obj = {
            "handle": 1,
            "type": "number",
            "value": 4,
            "text": "four",
            "className": "Number",
            "display": "4",
        }

        add_children(obj, provider)

        assert obj["value"] == 4
        assert obj["text"] == "four"
        assert obj["className"] == "Number"

    @pytest.mark.parametrize("value", ["abc", float("inf"), None])
    def test_non_finite_value_replaced_by_display(self, provider, value):
        obj = {"handle": 1, "type": "string", "value": value, "display": "shown"}
        add_children(obj, provider)
        assert obj["value"] == "shown"

    @pytest.mark.parametrize("value", ["12", True, 0])
    def test_numeric_like_value_kept(self, provider, value):
        obj = {"handle": 1, "type": "string", "value": value, "display": "shown"}
        add_children(obj, provider)
        assert obj["value"] == value

    def test_fetches_children_once(self, provider):
        provider.properties[8] = {
            "properties": [{"name": "a", "handle": 81}],
            "debuggerOnlyProperties": [{"name": "[Scope]", "handle": 82}],
        }
        obj = {"handle": 8, "type": "object", "propertyAttributes": 0x3}

        add_children(obj, provider, page_size=25)

        assert obj["properties"] == [
            {"name": "a", "propertyType": 0, "ref": 81},
            {"name": "[Scope]", "propertyType": 0, "ref": 82},
        ]
        assert provider.calls_to("get_properties") == [(8, 0, 25)]

    def test_read_only_bit_alone_has_no_children(self, provider):
        obj = {"handle": 8, "type": "object", "propertyAttributes": 0x2}
        add_children(obj, provider)
        assert "properties" not in obj
        assert provider.call_count("get_properties") == 0

    def test_non_dict_passes_through(self, provider):
        assert add_children(None, provider) is None


class TestHelpers:
    def test_has_children(self):
        assert has_children({"propertyAttributes": 1})
        assert not has_children({"propertyAttributes": 2})
        assert not has_children({})

    def test_flatten_listing_order(self):
        listing = {
            "properties": [{"name": "a"}],
            "debuggerOnlyProperties": [{"name": "b"}],
        }
        assert [p["name"] for p in flatten_listing(listing)] == ["a", "b"]

    def test_flatten_listing_tolerates_missing_keys(self):
        assert flatten_listing({}) == []

    def test_property_refs(self):
        refs = property_refs([{"name": "x", "handle": 3, "value": 1}])
        assert refs == [{"name": "x", "propertyType": 0, "ref": 3}]


class TestMakeScope:
    def test_scope_and_object(self):
        allocator = HandleAllocator()

        scope, scope_object = make_scope(
            ScopeType.CLOSURE, [{"name": "y", "handle": 51}], 2, allocator
        )

        assert scope == {"type": 3, "index": 2, "frameIndex": 2, "object": {"ref": -1}}
        assert scope_object == {
            "handle": -1,
            "type": "object",
            "className": "Object",
            "constructorFunction": {"ref": 100000},
            "protoObject": {"ref": 100000},
            "prototypeObject": {"ref": 100000},
            "properties": [{"name": "y", "propertyType": 0, "ref": 51}],
        }

    def test_each_scope_gets_a_fresh_handle(self):
        allocator = HandleAllocator()
        first, _ = make_scope(ScopeType.LOCAL, [], 0, allocator)
        second, _ = make_scope(ScopeType.LOCAL, [], 0, allocator)
        assert first["object"]["ref"] != second["object"]["ref"]
