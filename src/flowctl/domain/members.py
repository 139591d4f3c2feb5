"""Composite member types: structured field values with their own codecs.

Members are self-describing sub-objects embedded as field values (access
control lists, templates, constraints). Each member owns its wire shape and
implements the full ``to_json/from_json/to_xml/from_xml`` contract; the
codecs delegate to it instead of applying generic structural rules.

A member is constructed either from positional field values or, when
decoding, with no arguments and then populated from parsed input.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Self

from flowctl.domain.errors import MalformedEnvelope, UnresolvableType
from flowctl.domain.fields import FieldSet
from flowctl.domain.types import Category, Labelled, TypedValue, ensure_registered, is_envelope
from flowctl.domain.values import untyped

if TYPE_CHECKING:
    from flowctl.marshal.json_codec import JsonMarshaler
    from flowctl.marshal.xml_codec import XmlMarshaler


class CompositeMember(ABC):
    """Abstract base for composite member types."""

    type_name: ClassVar[str]

    @abstractmethod
    def to_json(self, marshaler: JsonMarshaler) -> dict[str, Any]:
        """Return the member as a ``{"type", "value"}`` envelope."""
        ...

    @abstractmethod
    def from_json(self, data: Any, marshaler: JsonMarshaler) -> Self:
        """Populate the member from the envelope's inner value."""
        ...

    @abstractmethod
    def to_xml(self, marshaler: XmlMarshaler) -> ET.Element:
        """Return an element named and typed after the member."""
        ...

    @abstractmethod
    def from_xml(self, element: ET.Element, marshaler: XmlMarshaler) -> Self:
        """Populate the member from its element."""
        ...


class RecordMember(FieldSet, CompositeMember):
    """A member shaped like a small domain object: named, typed fields."""

    FIELDS: ClassVar[dict[str, str]] = {}

    def __init__(self, *args: Any) -> None:
        super().__init__()
        if len(args) > len(self.FIELDS):
            msg = f"{self.type_name} takes at most {len(self.FIELDS)} values, got {len(args)}"
            raise TypeError(msg)
        for name, value in zip(self.FIELDS, args, strict=False):
            self.set_field(name, value)

    @property
    def field_types(self) -> Mapping[str, str]:
        return self.FIELDS

    def __getitem__(self, name: str) -> Any:
        return self.get_value(name)


# ---------------------------------------------------------------------------
# Record members
# ---------------------------------------------------------------------------


class Constraint(RecordMember):
    """A single field constraint in a flow's drop template."""

    type_name = "constraint"
    FIELDS = {
        "name": "string",
        "valueType": "string",
        "displayName": "string",
        "description": "string",
        "isOptional": "boolean",
    }


class FlowTemplate(RecordMember):
    type_name = "flowTemplate"
    FIELDS = {
        "name": "string",
        "path": "path",
        "filter": "string",
        "template": "constraints",
    }


class TrackTemplate(RecordMember):
    type_name = "trackTemplate"
    FIELDS = {
        "from": "path",
        "to": "path",
        "filterString": "string",
    }


class DropTemplate(RecordMember):
    type_name = "dropTemplate"
    FIELDS = {
        "path": "path",
        "elems": "map",
    }


class ApplicationTemplate(RecordMember):
    """The flows, tracks, and seed drops an application installs."""

    type_name = "applicationTemplate"
    FIELDS = {
        "flowTemplates": "list",
        "trackTemplates": "list",
        "dropTemplates": "list",
    }


# ---------------------------------------------------------------------------
# Irregular members
# ---------------------------------------------------------------------------


class Constraints(CompositeMember):
    """An ordered list of :class:`Constraint`: a flow's drop template."""

    type_name = "constraints"

    def __init__(self, *constraints: Constraint | Mapping[str, Any]) -> None:
        self.items: list[Constraint] = [self._coerce(c) for c in constraints]

    @staticmethod
    def _coerce(value: Any) -> Constraint:
        if isinstance(value, Constraint):
            return value
        if isinstance(value, Mapping):
            return Constraint().update_fields(value)
        raise MalformedEnvelope(f"expected a constraint, got {value!r}", tag="constraints")

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Constraints):
            return NotImplemented
        return self.items == other.items

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Constraints({', '.join(repr(c) for c in self.items)})"

    def to_json(self, marshaler: JsonMarshaler) -> dict[str, Any]:
        return {"type": self.type_name, "value": [c.to_json(marshaler) for c in self.items]}

    def from_json(self, data: Any, marshaler: JsonMarshaler) -> Self:
        if not isinstance(data, list):
            raise MalformedEnvelope("expected a list of constraints", tag=self.type_name)
        self.items = [
            self._coerce(marshaler.from_json(item) if is_envelope(item) else item)
            for item in data
        ]
        return self

    def to_xml(self, marshaler: XmlMarshaler) -> ET.Element:
        element = ET.Element(self.type_name, {"type": self.type_name})
        for constraint in self.items:
            element.append(marshaler.to_xml(Labelled("item", constraint)))
        return element

    def from_xml(self, element: ET.Element, marshaler: XmlMarshaler) -> Self:
        self.items = [
            self._coerce(marshaler.from_xml(child, type=Constraint.type_name))
            for child in element
        ]
        return self


class Permissions(CompositeMember):
    """Access control for a resource.

    Three role-scoped identifier lists, each with an inclusion flag: True
    makes the list an allow-list, False a deny-list.

    Wire shape (JSON value)::

        {"readers": {"access": true, "ids": ["..."]}, "writers": {...}, "deleters": {...}}

    Wire shape (XML)::

        <permissions type="permissions">
          <readers type="set" access="true"><item type="id">...</item></readers>
          ...
        </permissions>
    """

    type_name = "permissions"
    ROLES: ClassVar[tuple[str, ...]] = ("readers", "writers", "deleters")

    def __init__(
        self,
        readers: Iterable[str] = (),
        writers: Iterable[str] = (),
        deleters: Iterable[str] = (),
        read_access: bool = False,
        write_access: bool = False,
        delete_access: bool = False,
    ) -> None:
        self.ids: dict[str, list[str]] = {
            "readers": [untyped(i) for i in readers],
            "writers": [untyped(i) for i in writers],
            "deleters": [untyped(i) for i in deleters],
        }
        self.access: dict[str, bool] = {
            "readers": read_access,
            "writers": write_access,
            "deleters": delete_access,
        }

    @property
    def readers(self) -> list[str]:
        return self.ids["readers"]

    @property
    def writers(self) -> list[str]:
        return self.ids["writers"]

    @property
    def deleters(self) -> list[str]:
        return self.ids["deleters"]

    @property
    def flags(self) -> tuple[bool, bool, bool]:
        """Inclusion flags in ``(read, write, delete)`` order."""
        return tuple(self.access[role] for role in self.ROLES)  # type: ignore[return-value]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Permissions):
            return NotImplemented
        return self.ids == other.ids and self.access == other.access

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Permissions(readers={self.readers!r}, writers={self.writers!r}, "
            f"deleters={self.deleters!r}, flags={self.flags!r})"
        )

    def to_json(self, marshaler: JsonMarshaler) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "value": {
                role: {"access": self.access[role], "ids": list(self.ids[role])}
                for role in self.ROLES
            },
        }

    def from_json(self, data: Any, marshaler: JsonMarshaler) -> Self:
        if not isinstance(data, Mapping):
            raise MalformedEnvelope("expected an object of roles", tag=self.type_name)
        for role in self.ROLES:
            entry = data.get(role)
            if entry is None:
                continue
            if not isinstance(entry, Mapping):
                raise MalformedEnvelope(f"role {role!r} must be an object", tag=self.type_name)
            ids = entry.get("ids", [])
            if is_envelope(ids):
                ids = marshaler.from_json(ids)
            if not isinstance(ids, list):
                raise MalformedEnvelope(f"role {role!r} ids must be a list", tag=self.type_name)
            self.ids[role] = [str(untyped(i)) for i in ids]
            self.access[role] = _parse_access(entry.get("access"), self.type_name)
        return self

    def to_xml(self, marshaler: XmlMarshaler) -> ET.Element:
        element = ET.Element(self.type_name, {"type": self.type_name})
        for role in self.ROLES:
            ids = TypedValue("set", [TypedValue("id", i) for i in self.ids[role]])
            child = marshaler.to_xml(Labelled(role, ids))
            child.set("access", "true" if self.access[role] else "false")
            element.append(child)
        return element

    def from_xml(self, element: ET.Element, marshaler: XmlMarshaler) -> Self:
        for child in element:
            if child.tag not in self.ROLES:
                continue
            ids = marshaler.from_xml(child, type="set")
            self.ids[child.tag] = [str(untyped(i)) for i in ids]
            self.access[child.tag] = _parse_access(child.get("access"), self.type_name)
        return self


def _parse_access(value: Any, tag: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "grant", "allow"):
        return True
    if isinstance(value, str) and value.lower() in ("false", "deny"):
        return False
    raise MalformedEnvelope(f"unrecognized access flag {value!r}", tag=tag)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

MEMBER_REGISTRY: dict[str, type[CompositeMember]] = {}


def get_member_class(type_name: str) -> type[CompositeMember]:
    """Look up a member class by tag.

    Raises:
        UnresolvableType: If *type_name* is not a registered member.
    """
    cls = MEMBER_REGISTRY.get(type_name)
    if cls is None:
        raise UnresolvableType(type_name, expected="member")
    return cls


def new_member(type_name: str, *args: Any) -> CompositeMember:
    """Construct a member by tag from positional field values."""
    return get_member_class(type_name)(*args)


def _register_members() -> None:
    """Populate :data:`MEMBER_REGISTRY` with the built-in members."""
    for cls in (
        Permissions,
        ApplicationTemplate,
        FlowTemplate,
        TrackTemplate,
        DropTemplate,
        Constraints,
        Constraint,
    ):
        MEMBER_REGISTRY[cls.type_name] = cls
    ensure_registered(Category.MEMBER, MEMBER_REGISTRY)


_register_members()
