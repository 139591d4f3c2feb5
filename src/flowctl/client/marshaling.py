"""REST clients that speak in domain objects.

A :class:`MarshalingRestClient` pairs the signed transport with one wire
codec. Request bodies are marshaled from domain objects; response bodies are
checked for ``head.ok`` and decoded back into objects.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import httpx

from flowctl.client.errors import (
    JsonResponseError,
    ResponseError,
    UnparsableResponseError,
    XmlResponseError,
)
from flowctl.client.rest import MIME_JSON, MIME_XML, RestClient
from flowctl.config.models import ApiConfig
from flowctl.domain.errors import MarshalError
from flowctl.domain.objects import DomainObject
from flowctl.domain.types import is_envelope, require_object
from flowctl.marshal import JsonMarshaler, Marshaler, XmlMarshaler

logger = logging.getLogger(__name__)


class ResultSet(Sequence[Any]):
    """Results of a listing or search, with the server's total when known."""

    def __init__(self, results: list[Any] | None = None, total: int | None = None) -> None:
        self.results = results or []
        self._total = total

    def size(self) -> int:
        return len(self.results)

    def total(self) -> int:
        """Total matches on the server.

        Raises:
            ValueError: If the server did not report a total; use
                :meth:`size` for the number of results held.
        """
        if self._total is None:
            msg = "Total size of set unknown. To obtain the size of the result set call size()."
            raise ValueError(msg)
        return self._total

    def __getitem__(self, index: Any) -> Any:
        return self.results[index]

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.results)

    def __repr__(self) -> str:
        return f"ResultSet(size={self.size()}, total={self._total})"


class MarshalingRestClient(RestClient):
    """A REST client that serializes and deserializes domain objects.

    Subclasses fix the codec and know how to read their format's response
    head; see :class:`JsonRestClient` and :class:`XmlRestClient`.
    """

    response_error: type[ResponseError] = ResponseError

    def __init__(
        self,
        marshaler: Marshaler,
        key: str,
        secret: str,
        actor: str | None = None,
        *,
        hints: int = 1,
        api: ApiConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(key, secret, actor, api=api, transport=transport)
        self.marshaler = marshaler
        self.mime_type = marshaler.mime_type
        self.set_opts({"qs": {"hints": hints}, "headers": {"Accept": marshaler.mime_type}})

    # --- Codec ---

    def marshal(self, obj: Any) -> str:
        """Serialize *obj* into wire text."""
        return self.marshaler.dumps(obj)

    def unmarshal(self, data: Any, type: Any = None) -> Any:  # noqa: A002
        """Decode wire text, or an already parsed tree, into domain values."""
        if isinstance(data, (str, bytes)):
            return self.marshaler.loads(data, type)
        return self.marshaler.load(data, type)

    # --- Response envelope ---

    def _parse_response(self, raw_response: str) -> Mapping[str, Any]:
        try:
            response = self.marshaler.loads(raw_response, "map")
        except MarshalError as exc:
            msg = f"{self.marshaler.format.upper()} response data could not be parsed"
            raise UnparsableResponseError(raw_response, msg) from exc
        if not isinstance(response, Mapping):
            raise UnparsableResponseError(raw_response, "Response is not a head/body document")
        return response

    def _head_ok(self, head: Mapping[str, Any]) -> bool:
        return head.get("ok") is True

    def response_ok(self, response: str | Mapping[str, Any]) -> bool:
        """Did the request execute successfully?"""
        if isinstance(response, str):
            response = self._parse_response(response)
        head = response.get("head")
        return "body" in response and isinstance(head, Mapping) and self._head_ok(head)

    def response_body(self, response: str | Mapping[str, Any]) -> Any:
        """The payload of a response, without its head.

        Raises:
            UnparsableResponseError: If the response text cannot be decoded.
            ResponseError: If the head does not report success.
        """
        if isinstance(response, str):
            response = self._parse_response(response)
        if not self.response_ok(response):
            raise self.response_error(response)
        return response["body"]

    def _to_object(self, type_name: str, body: Any) -> DomainObject:
        if isinstance(body, DomainObject):
            return body
        if is_envelope(body) or isinstance(body, Mapping):
            return self.unmarshal(body, type_name)
        msg = f"Expected a {type_name} in the response body"
        raise UnparsableResponseError(repr(body), msg)

    def _results(self, body: Any, type_name: str | None) -> ResultSet:
        raise NotImplementedError

    # --- Persistence ---

    def create(self, type_name: str, uri: str, data: str) -> DomainObject:
        """POST *data* to *uri* and return the created object."""
        require_object(type_name)
        return self._to_object(type_name, self.response_body(self.http_post(uri, data)))

    def update(self, type_name: str, uri: str, data: str) -> DomainObject:
        """PUT *data* to *uri* and return the updated object."""
        require_object(type_name)
        return self._to_object(type_name, self.response_body(self.http_put(uri, data)))

    def delete(self, type_name: str, uri: str, data: str | None = None) -> bool:
        """DELETE *uri*; returns whether the server reported success."""
        require_object(type_name)
        return self.response_ok(self.http_delete(uri, data))

    def find_one(self, type_name: str, uri: str) -> DomainObject:
        require_object(type_name)
        return self._to_object(type_name, self.response_body(self.http_get(uri)))

    def find_many(
        self,
        type_name: str,
        uri: str,
        criteria: Any = None,
        **opts: Any,
    ) -> ResultSet:
        """Objects of one type matching *criteria*.

        *criteria* is marshaled into the ``criteria`` query parameter;
        *opts* (``start``, ``limit``, ``sort``, ``order``, ``query``,
        ``filter``) pass through as query parameters.
        """
        require_object(type_name)
        qs = {"criteria": self.marshal(criteria)} if criteria else {}
        qs.update(opts)
        return self._results(self.response_body(self.http_get(uri, qs=qs)), type_name)

    def search(self, *type_names: str, **opts: Any) -> ResultSet:
        """Full-text search across one or more object types."""
        for type_name in type_names:
            require_object(type_name)
        qs = {**opts, "type": ",".join(type_names)}
        return self._results(self.response_body(self.http_get("/search", qs=qs)), None)


class JsonRestClient(MarshalingRestClient):
    """A marshaling REST client that uses JSON as its data interchange format."""

    response_error = JsonResponseError

    def __init__(self, key: str, secret: str, actor: str | None = None, **kwargs: Any) -> None:
        super().__init__(JsonMarshaler(), key, secret, actor, **kwargs)

    def _results(self, body: Any, type_name: str | None) -> ResultSet:
        if not isinstance(body, list):
            raise UnparsableResponseError(repr(body), "Expected a list of results")
        return ResultSet([self._result(item, type_name) for item in body])

    def _result(self, item: Any, type_name: str | None) -> Any:
        if type_name is not None:
            return self._to_object(type_name, item)
        return self.unmarshal(item)


class XmlRestClient(MarshalingRestClient):
    """A marshaling REST client that uses XML as its data interchange format."""

    response_error = XmlResponseError

    def __init__(self, key: str, secret: str, actor: str | None = None, **kwargs: Any) -> None:
        super().__init__(XmlMarshaler(), key, secret, actor, **kwargs)

    def _head_ok(self, head: Mapping[str, Any]) -> bool:
        return head.get("ok") in ("true", True)

    def _results(self, body: Any, type_name: str | None) -> ResultSet:
        try:
            result = body["results"]["result"]
        except (KeyError, TypeError):
            return ResultSet([])
        results = result if isinstance(result, list) else [result]
        if type_name is not None:
            results = [self._to_object(type_name, r) for r in results]
        return ResultSet(results)

    def _to_object(self, type_name: str, body: Any) -> DomainObject:
        if isinstance(body, Mapping) and not isinstance(body, DomainObject):
            return DomainObject.from_fields(type_name, body)
        return super()._to_object(type_name, body)


CLIENTS: dict[str, type[MarshalingRestClient]] = {
    "json": JsonRestClient,
    "xml": XmlRestClient,
}


def client_for(fmt: str, key: str, secret: str, actor: str | None = None, **kwargs: Any) -> MarshalingRestClient:
    """Build the marshaling client for wire format *fmt*."""
    cls = CLIENTS.get(fmt)
    if cls is None:
        msg = f"Unsupported wire format {fmt!r}. Choose from: {', '.join(CLIENTS)}"
        raise ValueError(msg)
    logger.debug("Using %s client for %s", fmt, (kwargs.get("api") or ApiConfig()).base_url)
    return cls(key, secret, actor, **kwargs)


__all__ = [
    "CLIENTS",
    "MIME_JSON",
    "MIME_XML",
    "JsonRestClient",
    "MarshalingRestClient",
    "ResultSet",
    "XmlRestClient",
    "client_for",
]
