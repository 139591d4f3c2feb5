"""REST transport and the marshaling clients built on it."""

from __future__ import annotations

from flowctl.client.errors import (
    JsonResponseError,
    MissingUidError,
    ResponseError,
    UnparsableResponseError,
    XmlResponseError,
)
from flowctl.client.marshaling import (
    JsonRestClient,
    MarshalingRestClient,
    ResultSet,
    XmlRestClient,
    client_for,
)
from flowctl.client.rest import RestClient

__all__ = [
    "JsonResponseError",
    "JsonRestClient",
    "MarshalingRestClient",
    "MissingUidError",
    "ResponseError",
    "RestClient",
    "ResultSet",
    "UnparsableResponseError",
    "XmlResponseError",
    "XmlRestClient",
    "client_for",
]
