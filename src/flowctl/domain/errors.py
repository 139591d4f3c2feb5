"""Exceptions raised by the domain model and the marshaling core.

These exceptions are fatal to the single encode/decode call that raised
them. The core never logs, retries, or suppresses them.
"""

from __future__ import annotations

from typing import Any


class FlowError(Exception):
    """Base exception for all flowctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# --- Marshaling ---


class MarshalError(FlowError):
    """Base exception for encode/decode failures."""


class UnresolvableType(MarshalError):
    """Raised when a concrete type is demanded but the tag is not registered."""

    def __init__(self, tag: str, expected: str | None = None) -> None:
        message = f"Unresolvable type: {tag!r}"
        if expected:
            message = f"Unresolvable {expected} type: {tag!r}"
        super().__init__(message, details={"tag": tag, "expected": expected})
        self.tag = tag


class UnmarshalableValue(MarshalError):
    """Raised when encoding meets a value with no wire representation."""

    def __init__(self, value: Any, reason: str | None = None) -> None:
        message = f"Cannot marshal value {value!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message, details={"value": repr(value), "reason": reason})
        self.value = value


class MalformedEnvelope(MarshalError):
    """Raised when wire input lacks the structure its tag claims."""

    def __init__(self, reason: str, tag: str | None = None) -> None:
        message = f"Malformed envelope for {tag!r}: {reason}" if tag else reason
        super().__init__(message, details={"tag": tag, "reason": reason})
        self.tag = tag


# --- Field access ---


class FieldError(FlowError):
    """Base exception for schema-checked field access."""


class UnknownField(FieldError, KeyError):
    """Raised when a field name is not declared by the owner's schema."""

    def __init__(self, owner: str, name: str) -> None:
        super().__init__(
            f"{name!r} is not a field of {owner!r}",
            details={"owner": owner, "field": name},
        )
        self.name = name

    def __str__(self) -> str:
        return self.message


class InvalidFieldValue(FieldError, ValueError):
    """Raised when a value cannot be coerced to a field's declared tag."""

    def __init__(self, tag: str, value: Any) -> None:
        super().__init__(
            f"Cannot coerce {value!r} to type {tag!r}",
            details={"tag": tag, "value": repr(value)},
        )
        self.tag = tag
