"""flowctl: Flow Platform client library and CLI.

The marshaling core lives in :mod:`flowctl.domain` and :mod:`flowctl.marshal`;
the REST transport in :mod:`flowctl.client`.
"""

from __future__ import annotations

__version__ = "0.2.0"

from flowctl.domain.members import (
    ApplicationTemplate,
    Constraint,
    Constraints,
    DropTemplate,
    FlowTemplate,
    Permissions,
    TrackTemplate,
)
from flowctl.domain.objects import DomainObject, new_object
from flowctl.domain.types import Labelled, TypedValue
from flowctl.marshal import JsonMarshaler, XmlMarshaler, get_marshaler

__all__ = [
    "ApplicationTemplate",
    "Constraint",
    "Constraints",
    "DomainObject",
    "DropTemplate",
    "FlowTemplate",
    "JsonMarshaler",
    "Labelled",
    "Permissions",
    "TrackTemplate",
    "TypedValue",
    "XmlMarshaler",
    "__version__",
    "get_marshaler",
    "new_object",
]
