"""Shared service-layer helper functions."""

from __future__ import annotations

from typing import Any

from flowctl.domain.fields import FieldSet
from flowctl.domain.members import CompositeMember, Constraints, Permissions
from flowctl.domain.objects import DomainObject
from flowctl.domain.types import TypedValue, infer_tag
from flowctl.marshal import JsonMarshaler

_json = JsonMarshaler()


def describe(value: Any) -> dict[str, Any]:
    """Summarize a decoded value as JSON-safe data.

    Examples:
        >>> describe(5)
        {'kind': 'scalar', 'type': 'integer', 'value': 5}
        >>> describe(["a", "b"])
        {'kind': 'list', 'size': 2}
    """
    if isinstance(value, DomainObject):
        return {
            "kind": "object",
            "type": value.type_name,
            "uid": value.uid,
            "fields": describe_fields(value),
        }
    if isinstance(value, CompositeMember):
        return {"kind": "member", "type": value.type_name, **_member_body(value)}
    if isinstance(value, TypedValue):
        return {"kind": "typed", "type": value.tag, "value": _json.to_json(value.value)}
    if isinstance(value, dict):
        return {"kind": "map", "keys": list(value)}
    if isinstance(value, list):
        return {"kind": "list", "size": len(value)}
    return {"kind": "scalar", "type": infer_tag(value), "value": value}


def describe_fields(obj: FieldSet) -> dict[str, dict[str, Any]]:
    """Field name -> ``{"type", "value"}`` for every non-null field."""
    return {
        name: {"type": tv.tag, "value": _json.to_json(tv.value)}
        for name, tv in obj.fields().items()
    }


def _member_body(member: CompositeMember) -> dict[str, Any]:
    if isinstance(member, FieldSet):
        return {"fields": describe_fields(member)}
    if isinstance(member, Permissions):
        return {
            role: {"access": member.access[role], "ids": list(member.ids[role])}
            for role in Permissions.ROLES
        }
    if isinstance(member, Constraints):
        return {"size": len(member)}
    return {}
