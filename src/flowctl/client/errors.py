"""Exceptions raised while talking to the Flow API.

Responses come back as ``{"head": {...}, "body": ...}``. A response that
cannot be parsed raises :class:`UnparsableResponseError`; a parsed response
whose head is not ok raises a :class:`ResponseError` subclass that knows how
to read that format's head.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flowctl.domain.errors import FlowError


class UnparsableResponseError(FlowError):
    """The response text could not be decoded."""

    def __init__(self, raw_response: str, reason: str | None = None) -> None:
        super().__init__(
            reason or "Response data could not be parsed",
            details={"response": raw_response[:500]},
        )
        self.response = raw_response


class ResponseError(FlowError):
    """The API answered, but its head reports failure."""

    def __init__(self, response: Mapping[str, Any], description: str | None = None) -> None:
        self.response = response
        super().__init__(
            description or "Response status not 'ok'",
            details={"status": self._status_or_none()},
        )

    @property
    def head(self) -> Mapping[str, Any]:
        head = self.response.get("head")
        return head if isinstance(head, Mapping) else {}

    def status(self) -> int:
        return int(self.head["status"])

    def messages(self) -> list[str]:
        return []

    def errors(self) -> list[str]:
        return []

    def _status_or_none(self) -> int | None:
        try:
            return self.status()
        except (KeyError, TypeError, ValueError):
            return None


class JsonResponseError(ResponseError):
    """Head entries are ``[code, text]`` pairs."""

    def messages(self) -> list[str]:
        return [_entry_text(m) for m in self.head.get("messages") or []]

    def errors(self) -> list[str]:
        return [_entry_text(e) for e in self.head.get("errors") or []]


class XmlResponseError(ResponseError):
    """Head entries are repeated ``<message>``/``<error>`` elements."""

    def messages(self) -> list[str]:
        return _repeated(self.head.get("messages"), "message")

    def errors(self) -> list[str]:
        return _repeated(self.head.get("errors"), "error")


class MissingUidError(FlowError, ValueError):
    """An operation needs a persisted object but the uid is not set."""

    def __init__(self, type_name: str, operation: str) -> None:
        super().__init__(
            f"Cannot {operation} a {type_name} without an id",
            details={"type": type_name, "operation": operation},
        )


def _entry_text(entry: Any) -> str:
    if isinstance(entry, (list, tuple)) and len(entry) > 1:
        return str(entry[1])
    return str(entry)


def _repeated(container: Any, name: str) -> list[str]:
    if not isinstance(container, Mapping) or name not in container:
        return []
    value = container[name]
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]
