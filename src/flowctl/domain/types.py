"""Type registry: the static catalog of wire type tags.

Every tagged value on the wire carries a type tag. The registry maps each
tag to a :class:`TypeKind` so the codecs can decide how a value should be
instantiated. It is built at import time and never mutated afterwards.

Unknown tags resolve to :attr:`Category.UNKNOWN` instead of failing, which
lets the client pass through types the server adds before we model them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, NamedTuple

from flowctl.domain.errors import UnresolvableType


class Category(StrEnum):
    """How a tagged value is interpreted at decode time."""

    PRIMITIVE = "primitive"
    COLLECTION = "collection"
    DOMAIN_OBJECT = "domain_object"
    MEMBER = "member"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TypeKind:
    """Resolution result for a type tag.

    ``base`` is the native primitive kind backing a primitive tag
    (``string``, ``integer``, ``float``, ``boolean`` or ``bytes``); it is
    ``None`` for every other category.
    """

    tag: str
    category: Category
    base: str | None = None

    @property
    def is_native(self) -> bool:
        """True for tags that JSON carries as bare scalars."""
        return self.category is Category.PRIMITIVE and self.tag in NATIVE_TAGS


class TypedValue(NamedTuple):
    """A ``(tag, value)`` pair: the in-memory form of a wire envelope."""

    tag: str
    value: Any


class Labelled(NamedTuple):
    """A field name carried alongside its value while building XML elements."""

    label: str
    value: Any


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

NATIVE_TAGS: frozenset[str] = frozenset({"string", "boolean", "integer", "float"})

PRIMITIVE_TAGS: dict[str, str] = {
    "string": "string",
    "boolean": "boolean",
    "integer": "integer",
    "float": "float",
    "bytes": "bytes",
    # labelled strings
    "id": "string",
    "path": "string",
    "email": "string",
    "password": "string",
    "flowRef": "string",
    "url": "string",
    "upc": "string",
    "vin": "string",
    "phone": "string",
    "isbn": "string",
    # milliseconds since the epoch
    "date": "integer",
}

COLLECTION_TAGS: frozenset[str] = frozenset({"map", "sortedMap", "set", "sortedSet", "list"})
MAPPING_TAGS: frozenset[str] = frozenset({"map", "sortedMap"})
SEQUENCE_TAGS: frozenset[str] = frozenset({"set", "sortedSet", "list"})

OBJECT_TAGS: tuple[str, ...] = (
    "application",
    "flow",
    "comment",
    "drop",
    "file",
    "group",
    "identity",
    "track",
    "user",
)

MEMBER_TAGS: tuple[str, ...] = (
    "permissions",
    "applicationTemplate",
    "flowTemplate",
    "trackTemplate",
    "dropTemplate",
    "constraints",
    "constraint",
)


def _build_registry() -> dict[str, TypeKind]:
    registry: dict[str, TypeKind] = {}
    for tag, base in PRIMITIVE_TAGS.items():
        registry[tag] = TypeKind(tag, Category.PRIMITIVE, base)
    for tag in COLLECTION_TAGS:
        registry[tag] = TypeKind(tag, Category.COLLECTION)
    for tag in OBJECT_TAGS:
        registry[tag] = TypeKind(tag, Category.DOMAIN_OBJECT)
    for tag in MEMBER_TAGS:
        registry[tag] = TypeKind(tag, Category.MEMBER)
    return registry


TYPE_REGISTRY: Mapping[str, TypeKind] = _build_registry()


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def resolve(tag: str | None) -> TypeKind:
    """Return the :class:`TypeKind` for *tag*; unknown tags never raise."""
    if tag is None:
        return TypeKind("", Category.UNKNOWN)
    kind = TYPE_REGISTRY.get(tag)
    if kind is None:
        return TypeKind(tag, Category.UNKNOWN)
    return kind


def require(tag: str, category: Category) -> TypeKind:
    """Resolve *tag* and insist on *category*.

    Raises:
        UnresolvableType: If the tag is unknown or of another category.
    """
    kind = resolve(tag)
    if kind.category is not category:
        raise UnresolvableType(tag, expected=category.value)
    return kind


def require_object(tag: str) -> TypeKind:
    return require(tag, Category.DOMAIN_OBJECT)


def require_member(tag: str) -> TypeKind:
    return require(tag, Category.MEMBER)


def ensure_registered(category: Category, registered: Iterable[str]) -> None:
    """Check that every tag of *category* has an entry in *registered*.

    Raises:
        RuntimeError: Naming the tags left without a schema or class.
    """
    expected = {kind.tag for kind in TYPE_REGISTRY.values() if kind.category is category}
    missing = expected - set(registered)
    if missing:
        msg = f"{category.value} tags not registered: {', '.join(sorted(missing))}"
        raise RuntimeError(msg)


def is_envelope(value: Any) -> bool:
    """True for a wire envelope: a dict holding exactly ``type`` and ``value``."""
    return (
        isinstance(value, dict)
        and len(value) == 2
        and "type" in value
        and "value" in value
        and isinstance(value["type"], str)
    )


# Runtime shape -> tag. Order matters: bool is a subclass of int.
_INFERENCE_TABLE: tuple[tuple[type | tuple[type, ...], str], ...] = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "float"),
    (str, "string"),
    (bytes, "bytes"),
    (Mapping, "map"),
    ((set, frozenset), "set"),
    ((list, tuple), "list"),
)


def infer_tag(value: Any) -> str | None:
    """Infer a wire tag from the runtime shape of an untagged value.

    Objects and members report their own ``type_name``. Returns ``None``
    when no tag fits (e.g. ``None`` or an arbitrary object).
    """
    type_name = getattr(value, "type_name", None)
    if isinstance(type_name, str):
        return type_name
    for py_type, tag in _INFERENCE_TABLE:
        if isinstance(value, py_type):
            return tag
    return None
