"""Tests for the JSON codec."""

from __future__ import annotations

import pytest

from flowctl.domain.errors import MalformedEnvelope, UnmarshalableValue
from flowctl.domain.members import Permissions
from flowctl.domain.objects import DomainObject, new_object
from flowctl.domain.types import Labelled, TypedValue
from flowctl.marshal import JsonMarshaler, get_marshaler
from flowctl.marshal.base import hint_tag

FLOW_JSON = '{"type":"flow","value":{"name":"bucket1","path":{"type":"path","value":"/test/bucket1"}}}'


@pytest.fixture
def m() -> JsonMarshaler:
    return JsonMarshaler()


class TestEncode:
    def test_flow_document(self, m: JsonMarshaler, flow: DomainObject) -> None:
        assert m.to_string(flow) == FLOW_JSON

    def test_native_scalars_travel_bare(self, m: JsonMarshaler) -> None:
        assert m.to_json(TypedValue("integer", 5)) == 5
        assert m.to_json(TypedValue("string", "x")) == "x"
        assert m.to_json(None) is None

    def test_labelled_scalars_keep_envelope(self, m: JsonMarshaler) -> None:
        assert m.to_json(TypedValue("email", "a@b.c")) == {"type": "email", "value": "a@b.c"}

    def test_labelled_wrapper_is_transparent(self, m: JsonMarshaler) -> None:
        assert m.to_json(Labelled("name", TypedValue("id", "x"))) == {"type": "id", "value": "x"}

    def test_bytes_are_base64(self, m: JsonMarshaler) -> None:
        assert m.to_json(b"\x00\x01") == {"type": "bytes", "value": "AAE="}

    def test_sets_are_sorted_lists(self, m: JsonMarshaler) -> None:
        assert m.to_json({"b", "a"}) == ["a", "b"]

    def test_typed_collection(self, m: JsonMarshaler) -> None:
        value = TypedValue("map", {"when": TypedValue("date", 5), "n": 1})
        assert m.to_json(value) == {
            "type": "map",
            "value": {"when": {"type": "date", "value": 5}, "n": 1},
        }

    def test_non_string_key(self, m: JsonMarshaler) -> None:
        with pytest.raises(UnmarshalableValue):
            m.to_json({1: "x"})

    def test_arbitrary_object(self, m: JsonMarshaler) -> None:
        with pytest.raises(UnmarshalableValue):
            m.to_json(object())

    def test_output_is_compact_utf8(self, m: JsonMarshaler) -> None:
        assert m.to_string({"name": "café"}) == '{"name":"café"}'


class TestDecode:
    def test_flow_document(self, m: JsonMarshaler, flow: DomainObject) -> None:
        decoded = m.from_string(FLOW_JSON)
        assert isinstance(decoded, DomainObject)
        assert decoded == flow

    def test_untyped_scalars_pass_through(self, m: JsonMarshaler) -> None:
        assert m.from_json(5) == 5
        assert m.from_json("x") == "x"
        assert m.from_json(None) is None

    def test_untyped_structures_decode_as_collections(self, m: JsonMarshaler) -> None:
        assert m.from_json({"a": 1, "b": "x"}) == {"a": 1, "b": "x"}
        assert m.from_json([1, {"type": "id", "value": "x"}]) == [1, TypedValue("id", "x")]

    def test_envelopes_decode_at_any_depth(self, m: JsonMarshaler) -> None:
        data = {"type": "list", "value": [["a", {"k": {"type": "path", "value": "/y"}}]]}
        assert m.from_json(data) == [["a", {"k": TypedValue("path", "/y")}]]

    def test_hint_types_bare_payload(self, m: JsonMarshaler) -> None:
        decoded = m.from_json({"name": "bucket1"}, type="flow")
        assert decoded == new_object("flow", name="bucket1")

    def test_hint_overrides_envelope_tag(self, m: JsonMarshaler) -> None:
        assert m.from_json({"type": "string", "value": "x"}, type="id") == TypedValue("id", "x")

    def test_hint_from_member_class(self, m: JsonMarshaler) -> None:
        data = {"readers": {"access": True, "ids": ["u1"]}}
        assert m.from_json(data, type=Permissions).readers == ["u1"]

    def test_native_envelope_unwraps(self, m: JsonMarshaler) -> None:
        assert m.from_json({"type": "integer", "value": 7}) == 7

    def test_labelled_primitive(self, m: JsonMarshaler) -> None:
        assert m.from_json({"type": "path", "value": "/a"}) == TypedValue("path", "/a")

    def test_bytes(self, m: JsonMarshaler) -> None:
        assert m.from_json({"type": "bytes", "value": "AAE="}) == TypedValue("bytes", b"\x00\x01")

    def test_invalid_base64(self, m: JsonMarshaler) -> None:
        with pytest.raises(MalformedEnvelope):
            m.from_json({"type": "bytes", "value": "not base64!"})

    def test_collection_items(self, m: JsonMarshaler) -> None:
        data = {"type": "list", "value": [1, {"type": "id", "value": "x"}]}
        assert m.from_json(data) == [1, TypedValue("id", "x")]

    def test_collection_shape_checked(self, m: JsonMarshaler) -> None:
        with pytest.raises(MalformedEnvelope):
            m.from_json({"type": "map", "value": [1]})
        with pytest.raises(MalformedEnvelope):
            m.from_json({"type": "set", "value": {"a": 1}})

    def test_object_needs_field_object(self, m: JsonMarshaler) -> None:
        with pytest.raises(MalformedEnvelope):
            m.from_json({"type": "flow", "value": "bucket1"})

    def test_unknown_tag_kept(self, m: JsonMarshaler) -> None:
        data = {"type": "location", "value": {"lat": 1.5}}
        assert m.from_json(data) == TypedValue("location", {"lat": 1.5})

    def test_unknown_fields_dropped(self, m: JsonMarshaler) -> None:
        decoded = m.from_string('{"type":"flow","value":{"name":"x","futureField":1}}')
        assert decoded == new_object("flow", name="x")

    def test_invalid_json(self, m: JsonMarshaler) -> None:
        with pytest.raises(MalformedEnvelope):
            m.from_string("{nope")


class TestMarshalerContract:
    def test_get_marshaler(self) -> None:
        assert isinstance(get_marshaler("JSON"), JsonMarshaler)

    def test_unsupported_format(self) -> None:
        with pytest.raises(ValueError, match="yaml"):
            get_marshaler("yaml")

    def test_aliases(self, m: JsonMarshaler, flow: DomainObject) -> None:
        assert m.dumps(flow) == m.to_string(flow)
        assert m.load(m.dump(flow)) == flow
        assert m.loads(m.dumps(flow)) == flow

    def test_hint_tag(self, flow: DomainObject) -> None:
        assert hint_tag(None) is None
        assert hint_tag("flow") == "flow"
        assert hint_tag(flow) == "flow"
        with pytest.raises(TypeError):
            hint_tag(5)

    def test_member_needs_role_object(self, m: JsonMarshaler) -> None:
        with pytest.raises(MalformedEnvelope):
            m.from_json({"type": "permissions", "value": []})
