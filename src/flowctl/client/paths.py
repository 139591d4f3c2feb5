"""Resource path resolution.

Paths derive from the object's schema: ``/flow`` for the collection,
``/flow/{uid}`` for one instance, and ``/drop/{flowId}`` for a listing
scoped by a context field.
"""

from __future__ import annotations

from flowctl.domain.objects import get_schema


def class_bound_path(type_name: str) -> str:
    """The path that governs all instances of *type_name*."""
    return get_schema(type_name).path


def instance_bound_path(type_name: str, uid: str) -> str:
    """The path that governs a single instance."""
    return f"{class_bound_path(type_name)}/{uid}"


def context_bound_path(type_name: str, context: str | None = None) -> str:
    """The path that governs instances bounded by *context*, e.g. a flow id."""
    if not context:
        return class_bound_path(type_name)
    return f"{class_bound_path(type_name)}/{context}"


def member_path(type_name: str, uid: str, member: str) -> str:
    """The path of a single field of a persisted instance."""
    return f"{instance_bound_path(type_name, uid)}/{member}"
