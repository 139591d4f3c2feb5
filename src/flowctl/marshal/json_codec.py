"""JSON codec.

Tagged values travel as ``{"type": <tag>, "value": <encoded>}`` envelopes,
except native scalars (string, boolean, integer, float) which travel bare.
Decoding is driven by the envelope tag, or by an explicit hint when the
caller knows what the payload should be.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any

from flowctl.domain.errors import MalformedEnvelope, UnmarshalableValue
from flowctl.domain.members import get_member_class
from flowctl.domain.objects import DomainObject
from flowctl.domain.types import (
    MAPPING_TAGS,
    Category,
    Labelled,
    TypedValue,
    is_envelope,
    resolve,
)
from flowctl.domain.values import stable_order
from flowctl.marshal.base import Marshalable, Marshaler, TypeHint, hint_tag


class JsonMarshaler(Marshaler):
    """Encode and decode domain graphs as JSON.

    Usage::

        m = JsonMarshaler()
        text = m.to_string(new_object("flow", name="bucket1"))
        flow = m.from_string(text)
    """

    format = "json"
    mime_type = "application/json"

    # --- Encode ---

    def to_json(self, value: Any) -> Any:
        """Convert *value* into a JSON-compatible structure.

        Raises:
            UnmarshalableValue: If some node has no JSON representation.
        """
        if isinstance(value, TypedValue):
            return self._encode_typed(value.tag, value.value)
        if isinstance(value, Labelled):
            return self.to_json(value.value)
        if is_envelope(value):
            return {"type": value["type"], "value": self.to_json(value["value"])}
        if isinstance(value, Marshalable):
            return value.to_json(self)
        if isinstance(value, Mapping):
            encoded = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise UnmarshalableValue(key, "mapping keys must be strings")
                encoded[key] = self.to_json(item)
            return encoded
        if isinstance(value, (set, frozenset)):
            return [self.to_json(item) for item in stable_order(value)]
        if isinstance(value, (list, tuple)):
            return [self.to_json(item) for item in value]
        if isinstance(value, (bytes, bytearray)):
            return self._encode_typed("bytes", bytes(value))
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        raise UnmarshalableValue(value)

    def _encode_typed(self, tag: str, value: Any) -> Any:
        kind = resolve(tag)
        if kind.is_native:
            return self.to_json(value)
        if isinstance(value, Marshalable):
            return value.to_json(self)
        if kind.base == "bytes" and isinstance(value, (bytes, bytearray)):
            return {"type": tag, "value": base64.b64encode(value).decode("ascii")}
        return {"type": tag, "value": self.to_json(value)}

    def to_string(self, value: Any) -> str:
        return json.dumps(self.to_json(value), separators=(",", ":"), ensure_ascii=False)

    # --- Decode ---

    def from_json(self, data: Any, type: TypeHint = None) -> Any:  # noqa: A002
        """Convert a parsed JSON value back into domain values.

        The effective tag is *type* when given, else the envelope's own
        tag. Untagged scalars and null pass through unchanged; untagged
        arrays and objects decode as ``list`` and ``map``.

        Raises:
            MalformedEnvelope: If the payload does not fit its tag.
            UnresolvableType: If a member tag has no registered class.
        """
        tag = hint_tag(type)
        inner = data
        if is_envelope(data):
            tag = tag or data["type"]
            inner = data["value"]

        if tag is None:
            if isinstance(inner, Mapping):
                return self._decode_collection("map", inner)
            if isinstance(inner, list):
                return self._decode_collection("list", inner)
            return inner

        kind = resolve(tag)
        if kind.category is Category.DOMAIN_OBJECT:
            if not isinstance(inner, Mapping):
                raise MalformedEnvelope("expected an object of fields", tag=tag)
            return DomainObject(tag).from_json(inner, self)
        if kind.category is Category.MEMBER:
            return get_member_class(tag)().from_json(inner, self)
        if kind.category is Category.COLLECTION:
            return self._decode_collection(tag, inner)
        if kind.category is Category.PRIMITIVE:
            if kind.is_native:
                return inner
            if kind.base == "bytes":
                return TypedValue(tag, _b64decode(inner, tag))
            return TypedValue(tag, inner)
        return TypedValue(tag, inner)

    def _decode_collection(self, tag: str, inner: Any) -> Any:
        if tag in MAPPING_TAGS:
            if not isinstance(inner, Mapping):
                raise MalformedEnvelope("expected an object", tag=tag)
            return {key: self.from_json(item) for key, item in inner.items()}
        if not isinstance(inner, list):
            raise MalformedEnvelope("expected an array", tag=tag)
        return [self.from_json(item) for item in inner]

    def from_string(self, text: str | bytes, type: TypeHint = None) -> Any:  # noqa: A002
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise MalformedEnvelope(f"invalid JSON: {exc}") from exc
        return self.from_json(data, type=type)

    # --- Marshaler contract ---

    def dump(self, value: Any) -> Any:
        return self.to_json(value)

    def dumps(self, value: Any) -> str:
        return self.to_string(value)

    def load(self, data: Any, type: TypeHint = None) -> Any:  # noqa: A002
        return self.from_json(data, type=type)

    def loads(self, text: str | bytes, type: TypeHint = None) -> Any:  # noqa: A002
        return self.from_string(text, type=type)


def _b64decode(value: Any, tag: str) -> bytes:
    if not isinstance(value, str):
        raise MalformedEnvelope("expected base64 text", tag=tag)
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as exc:
        raise MalformedEnvelope(f"invalid base64: {exc}", tag=tag) from exc
