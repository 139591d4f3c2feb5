"""Signed HTTP access to the Flow Platform REST API.

Every request carries credential headers: ``X-Key``, ``X-Timestamp``
(milliseconds since the epoch), ``X-Actor`` (the identity or application
acted for, empty when there is none) and ``X-Signature``: the SHA-1 hex
digest of the sorted ``lower(name):value`` credential pairs followed by the
secret. An empty actor is still signed, as ``x-actor:``.

Global options set with :meth:`RestClient.set_opts` apply to every request;
per-request headers and query parameters override them.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Self
from urllib.parse import urlencode

import httpx

from flowctl import __version__
from flowctl.config.models import ApiConfig

logger = logging.getLogger(__name__)

MIME_JSON = "application/json"
MIME_XML = "text/xml"


class RestClient:
    """A handle to the Flow Platform's REST API.

    Args:
        key: Application key.
        secret: Application secret, used only to sign requests.
        actor: Identity or application on whose behalf calls are made.
        api: Endpoint and timeout settings.
        transport: Custom httpx transport (tests use ``httpx.MockTransport``).
    """

    mime_type = MIME_JSON

    def __init__(
        self,
        key: str,
        secret: str,
        actor: str | None = None,
        *,
        api: ApiConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.key = key
        self.secret = secret
        self.actor = actor
        self.api = api or ApiConfig()
        self.opts: dict[str, dict[str, Any]] = {"headers": {}, "qs": {}}
        self._http = httpx.Client(
            base_url=self.api.base_url,
            timeout=httpx.Timeout(self.api.timeout, connect=self.api.connect_timeout),
            transport=transport,
        )

    def set_actor(self, actor: str | None) -> None:
        """Make requests on behalf of this identity or application."""
        self.actor = actor

    def set_opts(self, opts: dict[str, dict[str, Any]]) -> None:
        """Replace the global ``headers``/``qs`` options applied to all requests."""
        self.opts = {
            "headers": dict(opts.get("headers") or {}),
            "qs": dict(opts.get("qs") or {}),
        }

    # --- Request construction ---

    def _mk_creds(self) -> dict[str, str]:
        creds = {
            "X-Actor": self.actor or "",
            "X-Key": self.key,
            "X-Timestamp": str(int(time.time() * 1000)),
        }
        creds["X-Signature"] = self._mk_signature(creds)
        return creds

    def _mk_signature(self, creds: dict[str, str]) -> str:
        md = hashlib.sha1()  # noqa: S324
        for name, value in sorted(creds.items()):
            md.update(f"{name.lower()}:{value}".encode())
        md.update(self.secret.encode())
        return md.hexdigest()

    def _mk_headers(self, method: str, given: dict[str, str] | None) -> dict[str, str]:
        headers = {"Accept": self.mime_type}
        if method in ("POST", "PUT"):
            headers["Content-Type"] = self.mime_type
        headers.update(self.opts["headers"])
        headers.update(given or {})
        headers["User-Agent"] = f"flowctl/{__version__}"
        return {**headers, **self._mk_creds()}

    def _mk_uri(self, uri: str, qs: dict[str, Any] | None) -> str:
        params = {**self.opts["qs"], **(qs or {})}
        if not params:
            return uri
        base, _, existing = uri.partition("?")
        encoded = urlencode(params)
        return f"{base}?{existing}&{encoded}" if existing else f"{base}?{encoded}"

    # --- Execution ---

    def request(
        self,
        method: str,
        uri: str,
        data: str | None = None,
        qs: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        """Execute a signed request and return the response text.

        Raises:
            httpx.HTTPError: On transport failure. HTTP status codes are not
                errors here; the API reports failure in the response head.
        """
        uri = self._mk_uri(uri, qs)
        content = data.encode("utf-8") if data else None
        response = self._http.request(
            method,
            uri,
            content=content,
            headers=self._mk_headers(method, headers),
        )
        logger.debug(
            "%s %s -> %d (sent %d bytes, received %d bytes)",
            method,
            uri,
            response.status_code,
            len(content or b""),
            len(response.content),
        )
        return response.text

    def http_get(self, uri: str, qs: dict[str, Any] | None = None, headers: dict[str, str] | None = None) -> str:
        return self.request("GET", uri, None, qs, headers)

    def http_post(
        self, uri: str, data: str, qs: dict[str, Any] | None = None, headers: dict[str, str] | None = None
    ) -> str:
        return self.request("POST", uri, data, qs, headers)

    def http_put(
        self, uri: str, data: str, qs: dict[str, Any] | None = None, headers: dict[str, str] | None = None
    ) -> str:
        return self.request("PUT", uri, data, qs, headers)

    def http_delete(
        self,
        uri: str,
        data: str | None = None,
        qs: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        if data:
            headers = {"Content-Type": self.mime_type, **(headers or {})}
        return self.request("DELETE", uri, data, qs, headers)

    def oauth_uri(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Absolute URI of an OAuth endpoint, e.g. ``oauth_uri("/token", {"response_type": "code"})``.

        With *params*, the query also carries the global ``qs`` options.
        """
        uri = f"{self.api.base_url}/oauth{path}"
        if params is None:
            return uri
        return self._mk_uri(uri, params)

    def file_uri(self, path: str) -> str:
        """Absolute URI of a resource on the file store host."""
        return f"{self.api.file_url}{path}"

    # --- Lifecycle ---

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
