"""Domain objects and the per-type schema registry.

Every Flow Platform resource is a :class:`DomainObject` parameterised by a
registered :class:`ObjectSchema`. Adding a resource type means registering
a schema, not writing a subclass.

All schemas share four implicit fields (``id``, ``creator``,
``creationDate``, ``lastEditDate``) ahead of their own fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from flowctl.domain.errors import UnresolvableType
from flowctl.domain.fields import FieldSet
from flowctl.domain.types import Category, ensure_registered
from flowctl.domain.values import untyped

DEFAULT_FIELDS: dict[str, str] = {
    "id": "id",
    "creator": "map",
    "creationDate": "date",
    "lastEditDate": "date",
}


@dataclass(frozen=True)
class ObjectSchema:
    """Field layout and addressing rules for one resource type.

    Attributes:
        name: Type tag, e.g. ``"flow"``.
        fields: Field name -> type tag, defaults first.
        path: Class-bound resource path, e.g. ``"/flow"``.
        uid_fields: Fields joined with ``/`` to form the uid.
        context_field: Field that scopes a listing (``/drop/{flowId}``).
    """

    name: str
    fields: Mapping[str, str]
    path: str
    uid_fields: tuple[str, ...] = ("id",)
    context_field: str | None = None
    description: str = field(default="", compare=False)


OBJECT_SCHEMAS: dict[str, ObjectSchema] = {}


def register_schema(
    name: str,
    fields: list[tuple[str, str]],
    *,
    description: str = "",
    path: str | None = None,
    uid_fields: tuple[str, ...] = ("id",),
    context_field: str | None = None,
) -> ObjectSchema:
    """Register the schema for resource type *name* and return it."""
    schema = ObjectSchema(
        name=name,
        fields={**DEFAULT_FIELDS, **dict(fields)},
        path=path or f"/{name}",
        uid_fields=uid_fields,
        context_field=context_field,
        description=description,
    )
    OBJECT_SCHEMAS[name] = schema
    return schema


def get_schema(type_name: str) -> ObjectSchema:
    """Look up a registered schema.

    Raises:
        UnresolvableType: If no schema is registered under *type_name*.
    """
    schema = OBJECT_SCHEMAS.get(type_name)
    if schema is None:
        raise UnresolvableType(type_name, expected="domain object")
    return schema


class DomainObject(FieldSet):
    """A Flow Platform resource instance.

    Usage::

        bucket = DomainObject("flow", name="bucket1", path="/test/bucket1")
        bucket.get_field("path")   # TypedValue(tag='path', value='/test/bucket1')
        bucket.uid                 # None until created remotely
    """

    def __init__(self, type_name: str, **fields: Any) -> None:
        super().__init__()
        self.schema = get_schema(type_name)
        self.update_fields(fields)

    @property
    def type_name(self) -> str:  # type: ignore[override]
        return self.schema.name

    @property
    def field_types(self) -> Mapping[str, str]:
        return self.schema.fields

    @property
    def uid(self) -> str | None:
        """Resource identifier used in URLs; None until every part is set."""
        parts = [untyped(self._values.get(name)) for name in self.schema.uid_fields]
        if not all(isinstance(p, str) and p for p in parts):
            return None
        return "/".join(parts)

    @classmethod
    def from_fields(cls, type_name: str, values: Mapping[str, Any]) -> DomainObject:
        """Build an object from a raw field mapping, dropping unknown names."""
        obj = cls(type_name)
        obj.update_fields(values, strict=False)
        return obj

    def copy(self) -> DomainObject:
        clone = DomainObject(self.type_name)
        clone._values = dict(self._values)
        return clone


def new_object(type_name: str, **fields: Any) -> DomainObject:
    """Construct a domain object by type tag.

    >>> new_object("user", email="alice@example.com")
    """
    return DomainObject(type_name, **fields)


# ---------------------------------------------------------------------------
# Built-in schemas
# ---------------------------------------------------------------------------


def _register_schemas() -> None:
    """Populate :data:`OBJECT_SCHEMAS` with the Flow resource catalog."""
    register_schema(
        "application",
        [
            ("name", "string"),
            ("displayName", "string"),
            ("description", "string"),
            ("email", "email"),
            ("url", "url"),
            ("icon", "url"),
            ("isDiscoverable", "boolean"),
            ("isInviteOnly", "boolean"),
            ("applicationTemplate", "applicationTemplate"),
            ("flowRefs", "set"),
            ("permissions", "permissions"),
        ],
        description="A user generated application: a template and a hierarchy of flows.",
    )
    register_schema(
        "flow",
        [
            ("name", "string"),
            ("description", "string"),
            ("path", "path"),
            ("filter", "string"),
            ("location", "location"),
            ("local", "boolean"),
            ("template", "constraints"),
            ("icon", "url"),
            ("permissions", "permissions"),
            ("dropPermissions", "permissions"),
        ],
        description="A container for drops.",
    )
    register_schema(
        "comment",
        [
            ("flowId", "id"),
            ("dropId", "id"),
            ("parentId", "id"),
            ("topParentId", "id"),
            ("text", "string"),
        ],
        description="A threaded remark attached to a drop.",
    )
    register_schema(
        "drop",
        [
            ("flowId", "id"),
            ("path", "path"),
            ("elems", "map"),
            ("flags", "flags"),
            ("flag", "string"),
            ("ratings", "rating"),
            ("rating", "integer"),
            ("weight", "integer"),
        ],
        description="An atomic unit of platform data with map-like behavior.",
        uid_fields=("flowId", "id"),
        context_field="flowId",
    )
    register_schema(
        "file",
        [
            ("name", "string"),
            ("mimeType", "string"),
            ("contents", "bytes"),
        ],
        description="A file stored on the platform file server.",
    )
    register_schema(
        "group",
        [
            ("name", "string"),
            ("displayName", "string"),
            ("identities", "set"),
            ("permissions", "permissions"),
            ("identityPermissions", "permissions"),
        ],
        description="A collection of identities that can act as a single persona.",
    )
    register_schema(
        "identity",
        [
            ("firstName", "string"),
            ("lastName", "string"),
            ("alias", "string"),
            ("avatar", "url"),
            ("groupIds", "set"),
            ("userId", "id"),
            ("appIds", "set"),
            ("permissions", "permissions"),
        ],
        description="A user's persona.",
    )
    register_schema(
        "track",
        [
            ("from", "path"),
            ("to", "path"),
            ("filterString", "string"),
            ("transformFunction", "transformFunction"),
            ("permissions", "permissions"),
        ],
        description="Data pipeline connecting one flow to another.",
    )
    register_schema(
        "user",
        [
            ("email", "email"),
            ("initialEmail", "email"),
            ("password", "password"),
            ("defaultIdentity", "identity"),
            ("identityIds", "set"),
            ("permissions", "permissions"),
        ],
        description="A system user and a container for identities.",
    )
    ensure_registered(Category.DOMAIN_OBJECT, OBJECT_SCHEMAS)


_register_schemas()
