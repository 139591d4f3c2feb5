"""XML codec.

Every typed element carries a ``type`` attribute; the element name is the
field name (or ``item`` inside sequences, ``items`` for anonymous
collections). Elements without a ``type`` attribute are typed by structure:
children make a ``map``, bare text makes a ``string``.

Trees are built with :mod:`xml.etree.ElementTree`; documents are emitted
behind an explicit UTF-8 declaration.
"""

from __future__ import annotations

import base64
import binascii
import re
import xml.etree.ElementTree as ET
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
    infer_tag,
    is_envelope,
    resolve,
)
from flowctl.domain.values import stable_order
from flowctl.marshal.base import Marshalable, Marshaler, TypeHint, hint_tag

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

_XML_NAME = re.compile(r"^[A-Za-z_][\w.\-]*$")


class XmlMarshaler(Marshaler):
    """Encode and decode domain graphs as XML element trees.

    Usage::

        m = XmlMarshaler()
        text = m.to_string(new_object("flow", name="bucket1"))
        flow = m.from_string(text)
    """

    format = "xml"
    mime_type = "text/xml"

    # --- Encode ---

    def to_xml(self, value: Any) -> ET.Element:
        """Build an element for *value*.

        Raises:
            UnmarshalableValue: If no tag can be inferred for a value, or a
                mapping key is not a valid element name.
        """
        if isinstance(value, Labelled):
            return self._labelled_element(value.label, value.value)
        if isinstance(value, TypedValue) or is_envelope(value):
            return self.to_xml(Labelled("item", value))
        if isinstance(value, Marshalable):
            return value.to_xml(self)
        if isinstance(value, Mapping):
            return self._typed_element("map", value)
        if isinstance(value, (list, tuple, set, frozenset)):
            return self._typed_element("list", value)
        return self.to_xml(Labelled("item", value))

    def _labelled_element(self, label: str, value: Any) -> ET.Element:
        if not isinstance(label, str) or not _XML_NAME.match(label):
            raise UnmarshalableValue(label, "not a valid XML element name")
        if isinstance(value, TypedValue):
            element = self._typed_element(value.tag, value.value)
        elif is_envelope(value):
            element = self._typed_element(value["type"], value["value"])
        else:
            tag = infer_tag(value)
            if tag is None:
                raise UnmarshalableValue(value, "cannot infer a type tag")
            element = self._typed_element(tag, value)
        element.tag = label
        return element

    def _typed_element(self, tag: str, value: Any) -> ET.Element:
        if isinstance(value, Marshalable):
            element = value.to_xml(self)
        elif isinstance(value, Mapping):
            element = ET.Element("items")
            for key, item in value.items():
                element.append(self.to_xml(Labelled(key, item)))
        elif isinstance(value, (list, tuple, set, frozenset)):
            element = ET.Element("items")
            items = stable_order(value) if isinstance(value, (set, frozenset)) else value
            for item in items:
                element.append(self.to_xml(Labelled("item", item)))
        else:
            element = ET.Element("item")
            element.text = _text(value)
        element.set("type", tag)
        return element

    def to_string(self, value: Any) -> str:
        return XML_DECLARATION + ET.tostring(self.to_xml(value), encoding="unicode")

    # --- Decode ---

    def from_xml(self, element: ET.Element, type: TypeHint = None) -> Any:  # noqa: A002
        """Decode *element*, using *type* in place of its ``type`` attribute.

        Raises:
            MalformedEnvelope: If the element's content does not fit its tag.
            UnresolvableType: If a member tag has no registered class.
        """
        tag = hint_tag(type) or element.get("type")
        if tag is None:
            tag = "map" if len(element) else "string"

        kind = resolve(tag)
        if kind.category is Category.DOMAIN_OBJECT:
            return DomainObject(tag).from_xml(element, self)
        if kind.category is Category.MEMBER:
            return get_member_class(tag)().from_xml(element, self)
        if kind.category is Category.COLLECTION:
            if tag in MAPPING_TAGS:
                return self.load_dict(element)
            return self.load_list(element)
        if kind.category is Category.PRIMITIVE:
            parsed = _parse(tag, kind.base, _direct_text(element))
            return parsed if kind.is_native else TypedValue(tag, parsed)
        if len(element):
            return TypedValue(tag, self.load_dict(element))
        return TypedValue(tag, _direct_text(element))

    def load_dict(
        self,
        element: ET.Element,
        fields: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Decode the children of *element* into a dict keyed by element name.

        Same-named siblings merge into a list under one key. With *fields*,
        only the named children are decoded and untyped ones take the
        declared tag.
        """
        result: dict[str, Any] = {}
        repeated: set[str] = set()
        for child in element:
            if fields is not None and child.tag not in fields:
                continue
            hint = None if child.get("type") or fields is None else fields[child.tag]
            value = self.from_xml(child, type=hint)
            if child.tag in repeated:
                result[child.tag].append(value)
            elif child.tag in result:
                result[child.tag] = [result[child.tag], value]
                repeated.add(child.tag)
            else:
                result[child.tag] = value
        return result

    def load_list(self, element: ET.Element) -> list[Any]:
        return [self.from_xml(child) for child in element]

    def from_string(self, text: str | bytes, type: TypeHint = None) -> Any:  # noqa: A002
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise MalformedEnvelope(f"invalid XML: {exc}") from exc
        return self.from_xml(root, type=type)

    # --- Marshaler contract ---

    def dump(self, value: Any) -> ET.Element:
        return self.to_xml(value)

    def dumps(self, value: Any) -> str:
        return self.to_string(value)

    def load(self, data: ET.Element, type: TypeHint = None) -> Any:  # noqa: A002
        return self.from_xml(data, type=type)

    def loads(self, text: str | bytes, type: TypeHint = None) -> Any:  # noqa: A002
        return self.from_string(text, type=type)


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, (int, float, str)):
        return str(value)
    raise UnmarshalableValue(value)


def _direct_text(element: ET.Element) -> str:
    """Concatenate the element's own text nodes, skipping descendants."""
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts)


def _parse(tag: str, base: str | None, text: str) -> Any:
    try:
        if base == "integer":
            return int(text.strip())
        if base == "float":
            return float(text.strip())
        if base == "bytes":
            return base64.b64decode(text.strip(), validate=True)
    except (ValueError, binascii.Error) as exc:
        raise MalformedEnvelope(f"cannot read {text!r} as {base}", tag=tag) from exc
    if base == "boolean":
        if text.strip() == "true":
            return True
        if text.strip() == "false":
            return False
        raise MalformedEnvelope(f"cannot read {text!r} as boolean", tag=tag)
    return text
