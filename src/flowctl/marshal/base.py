"""Shared marshaling contract.

:class:`Marshalable` is the capability the codecs look for before applying
their generic structural rules. Domain objects and composite members
implement it; anything else is encoded by shape.

:class:`Marshaler` is the format-independent surface used by the REST
clients and the services: ``dump``/``dumps`` to encode, ``load``/``loads``
to decode with an optional type hint.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Protocol, runtime_checkable

TypeHint = str | type | None


@runtime_checkable
class Marshalable(Protocol):
    """A value that encodes and decodes itself in both wire formats."""

    type_name: str

    def to_json(self, marshaler: Any) -> Any: ...

    def from_json(self, data: Any, marshaler: Any) -> Any: ...

    def to_xml(self, marshaler: Any) -> Any: ...

    def from_xml(self, element: Any, marshaler: Any) -> Any: ...


def hint_tag(hint: TypeHint | Any) -> str | None:
    """Normalize a decode hint to a type tag.

    A hint is a tag string, a member class, or an existing object or
    member whose ``type_name`` names the type.
    """
    if hint is None or isinstance(hint, str):
        return hint
    type_name = getattr(hint, "type_name", None)
    if isinstance(type_name, str):
        return type_name
    msg = f"type hint must be a tag or carry a type_name, got {hint!r}"
    raise TypeError(msg)


class Marshaler(ABC):
    """Base class for the wire codecs."""

    format: ClassVar[str]
    mime_type: ClassVar[str]

    @abstractmethod
    def dump(self, value: Any) -> Any:
        """Encode *value* into the format's native tree."""

    @abstractmethod
    def dumps(self, value: Any) -> str:
        """Encode *value* into wire text."""

    @abstractmethod
    def load(self, data: Any, type: TypeHint = None) -> Any:  # noqa: A002
        """Decode a native tree, optionally forcing its type tag."""

    @abstractmethod
    def loads(self, text: str | bytes, type: TypeHint = None) -> Any:  # noqa: A002
        """Decode wire text, optionally forcing its type tag."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
