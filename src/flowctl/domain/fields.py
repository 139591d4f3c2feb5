"""Schema-checked field storage shared by domain objects and record members.

A :class:`FieldSet` owns an ordered mapping from field name to
:class:`~flowctl.domain.types.TypedValue`. The declared field layout is the
only source of valid names: accessors reject anything else at the boundary.

The codec methods here implement the object wire shape:

- JSON: ``{"type": <name>, "value": {<field>: <encoded>, ...}}``
- XML: ``<name type="name"><field type="...">...</field>...</name>``

Null fields are omitted in both directions. Decoding silently drops
unknown fields so newer servers can add fields without breaking clients.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Self

from flowctl.domain.errors import MalformedEnvelope, UnknownField
from flowctl.domain.types import Labelled, TypedValue, is_envelope
from flowctl.domain.values import typed, untyped

if TYPE_CHECKING:
    from flowctl.marshal.json_codec import JsonMarshaler
    from flowctl.marshal.xml_codec import XmlMarshaler


class FieldSet:
    """Base for values whose fields are declared by a fixed layout."""

    type_name: str

    def __init__(self) -> None:
        self._values: dict[str, TypedValue] = {}

    @property
    def field_types(self) -> Mapping[str, str]:
        """Declared field name -> type tag, in wire order."""
        raise NotImplementedError

    # --- Accessors ---

    def _check(self, name: str) -> str:
        if name not in self.field_types:
            raise UnknownField(self.type_name, name)
        return self.field_types[name]

    def get_field(self, name: str) -> TypedValue | None:
        """Return the typed value of *name*, or None when unset."""
        self._check(name)
        return self._values.get(name)

    def get_value(self, name: str) -> Any:
        """Return the untagged value of *name*, or None when unset."""
        return untyped(self.get_field(name))

    def set_field(self, name: str, value: Any) -> None:
        """Assign *name*, coercing *value* through the field's declared tag.

        Assigning None clears the field.
        """
        tag = self._check(name)
        if value is None:
            self._values.pop(name, None)
            return
        self._values[name] = typed(tag, value)

    def del_field(self, name: str) -> None:
        self._check(name)
        self._values.pop(name, None)

    def has_field(self, name: str) -> bool:
        return name in self.field_types

    def fields(self) -> dict[str, TypedValue]:
        """Non-null fields in declaration order."""
        return {name: self._values[name] for name in self.field_types if name in self._values}

    def update_fields(self, values: Mapping[str, Any], *, strict: bool = True) -> Self:
        """Assign several fields at once.

        With ``strict=False`` unknown names are skipped instead of raising.
        """
        for name, value in values.items():
            if not strict and name not in self.field_types:
                continue
            self.set_field(name, value)
        return self

    def __iter__(self) -> Iterator[tuple[str, TypedValue]]:
        return iter(self.fields().items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldSet) or type(self) is not type(other):
            return NotImplemented
        return self.type_name == other.type_name and self.fields() == other.fields()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v.value!r}" for k, v in self.fields().items())
        return f"{type(self).__name__}<{self.type_name}>({body})"

    # --- Codec ---

    def to_json(self, marshaler: JsonMarshaler) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "value": {name: marshaler.to_json(value) for name, value in self.fields().items()},
        }

    def from_json(self, data: Any, marshaler: JsonMarshaler) -> Self:
        if not isinstance(data, Mapping):
            raise MalformedEnvelope("expected an object of fields", tag=self.type_name)
        known = {
            name: marshaler.from_json(value) if is_envelope(value) else value
            for name, value in data.items()
            if name in self.field_types
        }
        return self.update_fields(known)

    def to_xml(self, marshaler: XmlMarshaler) -> ET.Element:
        element = ET.Element(self.type_name, {"type": self.type_name})
        for name, value in self.fields().items():
            element.append(marshaler.to_xml(Labelled(name, value)))
        return element

    def from_xml(self, element: ET.Element, marshaler: XmlMarshaler) -> Self:
        return self.update_fields(marshaler.load_dict(element, fields=self.field_types))
