"""Persistence operations on domain objects.

Each operation takes the client explicitly and mutates the object in place
from the server's answer, so a saved object carries its new id and dates.

Usage::

    with JsonRestClient(key, secret) as client:
        flow = new_object("flow", name="bucket1", path="/test/bucket1")
        save(client, flow)
        drops = find(client, "drop", flowId=flow.get_value("id"), limit=10)
"""

from __future__ import annotations

from typing import Any

from flowctl.client.errors import MissingUidError
from flowctl.client.marshaling import MarshalingRestClient, ResultSet
from flowctl.client.paths import (
    class_bound_path,
    context_bound_path,
    instance_bound_path,
    member_path,
)
from flowctl.domain.objects import DomainObject, get_schema
from flowctl.domain.types import TypedValue, is_envelope

FIND_OPTIONS = ("query", "filter", "start", "limit", "sort", "order")
DROP_FLAGS = ("adult", "spam")
MAX_RATING = 10
MAX_WEIGHT = 1000


def save(client: MarshalingRestClient, obj: DomainObject) -> DomainObject:
    """Create *obj* when it has no uid, otherwise replace it remotely.

    The ``id`` field never travels in the body; the server addresses the
    object by path.
    """
    uid = obj.uid
    body = obj.copy()
    body.del_field("id")
    data = client.marshal(body)

    if uid is None:
        saved = client.create(obj.type_name, class_bound_path(obj.type_name), data)
    else:
        saved = client.update(obj.type_name, instance_bound_path(obj.type_name, uid), data)
    return _refresh(obj, saved)


def update(client: MarshalingRestClient, obj: DomainObject, member: str | None = None) -> DomainObject:
    """Persist *obj*, or only its *member* field."""
    uid = _require_uid(obj, "update")
    if member is None:
        return save(client, obj)
    obj.get_field(member)
    saved = client.update(obj.type_name, member_path(obj.type_name, uid, member), client.marshal(obj))
    return _refresh(obj, saved)


def delete(client: MarshalingRestClient, obj: DomainObject, member: str | None = None) -> bool:
    """Remove *obj*, or only its *member* field, from the platform.

    Returns whether the server reported success. A deleted member is also
    cleared locally.
    """
    uid = _require_uid(obj, "delete")
    if member is None:
        return client.delete(obj.type_name, instance_bound_path(obj.type_name, uid))

    obj.get_field(member)
    ok = client.delete(obj.type_name, member_path(obj.type_name, uid, member), client.marshal(obj))
    if ok:
        obj.del_field(member)
    return ok


def find(client: MarshalingRestClient, type_name: str, **criteria: Any) -> DomainObject | ResultSet:
    """Look objects up by id, or list those matching field criteria.

    ``id=...`` fetches one object. Otherwise the schema's context field
    (``flowId`` for drops) narrows the path, the listing options in
    :data:`FIND_OPTIONS` pass through, and the remaining keywords are
    coerced through the schema into a criteria object.
    """
    schema = get_schema(type_name)
    if "id" in criteria:
        return client.find_one(type_name, instance_bound_path(type_name, _plain(criteria.pop("id"))))

    context = None
    if schema.context_field and schema.context_field in criteria:
        context = _plain(criteria.pop(schema.context_field))
    uri = context_bound_path(type_name, context)

    opts = {name: criteria.pop(name) for name in FIND_OPTIONS if name in criteria}
    query = DomainObject(type_name, **criteria) if criteria else None
    return client.find_many(type_name, uri, query, **opts)


# ---------------------------------------------------------------------------
# Drop helpers
# ---------------------------------------------------------------------------


def flag(client: MarshalingRestClient, drop: DomainObject, value: str) -> DomainObject:
    """Flag a drop as ``adult`` or ``spam``."""
    _require_drop(drop)
    value = value.lower()
    if value not in DROP_FLAGS:
        msg = f"Unsupported flag value {value!r}. Choose from: {', '.join(DROP_FLAGS)}"
        raise ValueError(msg)
    return _put_drop_field(client, drop, "flag", flag=value)


def rate(client: MarshalingRestClient, drop: DomainObject, value: int) -> DomainObject:
    """Rate a drop from 0 to 10."""
    _require_drop(drop)
    if not 0 <= value <= MAX_RATING:
        msg = f"Unsupported rating value {value!r}. Ratings run from 0 to {MAX_RATING}"
        raise ValueError(msg)
    return _put_drop_field(client, drop, "rate", rating=value)


def weight(client: MarshalingRestClient, drop: DomainObject, value: int) -> DomainObject:
    """Weight a drop from 0 to 1000."""
    _require_drop(drop)
    if not 0 <= value <= MAX_WEIGHT:
        msg = f"Unsupported weight value {value!r}. Weights run from 0 to {MAX_WEIGHT}"
        raise ValueError(msg)
    return _put_drop_field(client, drop, "weight", weight=value)


def _put_drop_field(client: MarshalingRestClient, drop: DomainObject, operation: str, **field: Any) -> DomainObject:
    uid = _require_uid(drop, operation)
    data = client.marshal(DomainObject("drop", **field))
    return _refresh(drop, client.update("drop", instance_bound_path("drop", uid), data))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _refresh(obj: DomainObject, saved: DomainObject) -> DomainObject:
    obj.update_fields(saved.fields(), strict=False)
    return obj


def _require_uid(obj: DomainObject, operation: str) -> str:
    uid = obj.uid
    if uid is None:
        raise MissingUidError(obj.type_name, operation)
    return uid


def _require_drop(obj: DomainObject) -> None:
    if obj.type_name != "drop":
        msg = f"Expected a drop, got a {obj.type_name}"
        raise ValueError(msg)


def _plain(value: Any) -> Any:
    if isinstance(value, TypedValue):
        return value.value
    if is_envelope(value):
        return value["value"]
    return value
