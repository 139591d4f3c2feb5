"""Wire codecs: JSON and XML marshalers over the domain model."""

from __future__ import annotations

from flowctl.marshal.base import Marshalable, Marshaler
from flowctl.marshal.json_codec import JsonMarshaler
from flowctl.marshal.xml_codec import XmlMarshaler

MARSHALERS: dict[str, type[Marshaler]] = {
    JsonMarshaler.format: JsonMarshaler,
    XmlMarshaler.format: XmlMarshaler,
}


def get_marshaler(fmt: str) -> Marshaler:
    """Return a marshaler for *fmt* (``"json"`` or ``"xml"``).

    Raises:
        ValueError: If the format is not supported.
    """
    cls = MARSHALERS.get(fmt.lower())
    if cls is None:
        msg = f"Unsupported wire format {fmt!r}. Choose from: {', '.join(MARSHALERS)}"
        raise ValueError(msg)
    return cls()


__all__ = ["JsonMarshaler", "MARSHALERS", "Marshalable", "Marshaler", "XmlMarshaler", "get_marshaler"]
