"""Typed value construction and normalization.

:func:`typed` is the single coercion point between caller-supplied Python
values and :class:`~flowctl.domain.types.TypedValue`. Field setters on
objects and members route through it.

INVARIANT: inside collections, native scalars are carried bare and every
other tagged element is a TypedValue. Decoding produces exactly this
shape, so values built here compare equal after a round trip.
"""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Mapping
from typing import Any

from flowctl.domain.errors import InvalidFieldValue
from flowctl.domain.types import (
    MAPPING_TAGS,
    Category,
    TypedValue,
    is_envelope,
    resolve,
)

EXPRESSION_TAG = "expression"


def typed(tag: str, value: Any) -> TypedValue:
    """Coerce *value* into a :class:`TypedValue` tagged *tag*.

    Already-tagged input (a TypedValue or an envelope dict) is accepted as
    is, even when its tag differs from *tag*; the server may answer with a
    more specific type than the schema declares.

    Raises:
        InvalidFieldValue: If *value* does not fit the tag's kind.
    """
    if isinstance(value, TypedValue):
        return _normalize_typed(value)
    if is_envelope(value):
        return _normalize_typed(TypedValue(value["type"], value["value"]))

    kind = resolve(tag)

    if isinstance(value, re.Pattern) and kind.base == "string":
        return expression(value)

    if kind.category is Category.PRIMITIVE:
        return TypedValue(tag, _coerce_primitive(tag, kind.base, value))

    if kind.category is Category.COLLECTION:
        return TypedValue(tag, _coerce_collection(tag, value))

    if kind.category is Category.DOMAIN_OBJECT:
        if getattr(value, "type_name", None) == tag:
            return TypedValue(tag, value)
        if isinstance(value, Mapping):
            from flowctl.domain.objects import new_object

            return TypedValue(tag, new_object(tag, **dict(value)))
        raise InvalidFieldValue(tag, value)

    if kind.category is Category.MEMBER:
        if getattr(value, "type_name", None) == tag:
            return TypedValue(tag, value)
        raise InvalidFieldValue(tag, value)

    return TypedValue(tag, value)


def expression(pattern: re.Pattern[str] | str) -> TypedValue:
    """Build a regex match expression usable in place of any string value."""
    operand = pattern.pattern if isinstance(pattern, re.Pattern) else pattern
    return TypedValue(EXPRESSION_TAG, {"operator": "regex", "operand": operand})


def to_millis(value: dt.datetime | dt.date) -> int:
    """Milliseconds since the epoch; naive values are taken as local time."""
    if not isinstance(value, dt.datetime):
        value = dt.datetime.combine(value, dt.time())
    return int(value.timestamp() * 1000)


def from_millis(value: int) -> dt.datetime:
    """Inverse of :func:`to_millis`, as an aware UTC datetime."""
    return dt.datetime.fromtimestamp(value / 1000, tz=dt.UTC)


def untyped(value: Any) -> Any:
    """Strip the tag from a TypedValue; other values are returned unchanged."""
    if isinstance(value, TypedValue):
        return value.value
    return value


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize(value: Any) -> Any:
    """Normalize an element held inside a collection.

    Only labelled scalars and unknown tags keep their TypedValue wrapper;
    native scalars, nested collections, objects and members are carried
    bare because that is how the codecs hand them back.
    """
    if isinstance(value, TypedValue):
        kind = resolve(value.tag)
        if kind.category is Category.UNKNOWN:
            return value
        if kind.category is Category.PRIMITIVE and not kind.is_native:
            return value
        return normalize(value.value)
    if is_envelope(value):
        return normalize(TypedValue(value["type"], value["value"]))
    if isinstance(value, (bytes, bytearray)):
        return TypedValue("bytes", bytes(value))
    if isinstance(value, Mapping):
        return {k: normalize(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return [normalize(v) for v in stable_order(value)]
    if isinstance(value, (list, tuple)):
        return [normalize(v) for v in value]
    return value


def _normalize_typed(value: TypedValue) -> TypedValue:
    if resolve(value.tag).category is Category.COLLECTION:
        return TypedValue(value.tag, _coerce_collection(value.tag, value.value))
    return value


def stable_order(values: set[Any] | frozenset[Any]) -> list[Any]:
    """Sorted when the elements are orderable, else iteration order."""
    try:
        return sorted(values)
    except TypeError:
        return list(values)


def _coerce_collection(tag: str, value: Any) -> Any:
    if tag in MAPPING_TAGS:
        if not isinstance(value, Mapping) or not all(isinstance(k, str) for k in value):
            raise InvalidFieldValue(tag, value)
        return {k: normalize(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return [normalize(v) for v in stable_order(value)]
    if isinstance(value, (list, tuple)):
        return [normalize(v) for v in value]
    raise InvalidFieldValue(tag, value)


def _coerce_primitive(tag: str, base: str | None, value: Any) -> Any:
    if base == "string" and isinstance(value, str):
        return value
    if base == "boolean" and isinstance(value, bool):
        return value
    if base == "float" and isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if base == "bytes" and isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if base == "integer" and not isinstance(value, bool):
        if isinstance(value, int):
            return value
        if tag == "date":
            if isinstance(value, (dt.datetime, dt.date)):
                return to_millis(value)
            if isinstance(value, str) and value.strip().lstrip("-").isdigit():
                return int(value)
    raise InvalidFieldValue(tag, value)
