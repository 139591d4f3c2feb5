"""Tests for the signed REST transport."""

from __future__ import annotations

import hashlib
from collections.abc import Iterator

import pytest

from flowctl import __version__
from flowctl.client.rest import MIME_JSON, RestClient
from flowctl.config.models import ApiConfig


@pytest.fixture
def rest(api) -> Iterator[RestClient]:
    client = RestClient("app-key", "app-secret", transport=api.transport)
    yield client
    client.close()


def _expected_signature(headers, secret: str) -> str:
    creds = {name: headers[name] for name in ("X-Key", "X-Timestamp", "X-Actor") if name in headers}
    md = hashlib.sha1()  # noqa: S324
    for name, value in sorted(creds.items()):
        md.update(f"{name.lower()}:{value}".encode())
    md.update(secret.encode())
    return md.hexdigest()


class TestCredentials:
    def test_signature(self, api, rest: RestClient) -> None:
        api.reply("ok")
        rest.http_get("/flow")
        headers = api.last.headers
        assert headers["X-Key"] == "app-key"
        assert headers["X-Timestamp"].isdigit()
        assert headers["X-Signature"] == _expected_signature(headers, "app-secret")

    def test_missing_actor_is_signed_empty(self, api, rest: RestClient) -> None:
        api.reply("ok")
        rest.http_get("/flow")
        headers = api.last.headers
        assert headers["X-Actor"] == ""
        signed = f"x-actor:x-key:app-keyx-timestamp:{headers['X-Timestamp']}app-secret"
        assert headers["X-Signature"] == hashlib.sha1(signed.encode()).hexdigest()  # noqa: S324

    def test_actor_is_signed(self, api, rest: RestClient) -> None:
        rest.set_actor("identity-1")
        api.reply("ok")
        rest.http_get("/flow")
        headers = api.last.headers
        assert headers["X-Actor"] == "identity-1"
        assert headers["X-Signature"] == _expected_signature(headers, "app-secret")

    def test_secret_never_sent(self, api, rest: RestClient) -> None:
        api.reply("ok")
        rest.http_get("/flow")
        assert "app-secret" not in str(api.last.headers.raw)
        assert "app-secret" not in str(api.last.url)


class TestRequests:
    def test_returns_response_text(self, api, rest: RestClient) -> None:
        api.reply("hello")
        assert rest.http_get("/flow") == "hello"

    def test_base_url(self, api, rest: RestClient) -> None:
        api.reply("ok")
        rest.http_get("/flow/f1")
        assert api.last.url.host == "api.flow.net"
        assert api.last.url.scheme == "http"
        assert api.last.url.path == "/flow/f1"

    def test_custom_api(self, api) -> None:
        config = ApiConfig(host="localhost", port=8080, scheme="https")
        with RestClient("k", "s", api=config, transport=api.transport) as client:
            api.reply("ok")
            client.http_get("/flow")
        assert str(api.last.url) == "https://localhost:8080/flow"

    def test_default_headers(self, api, rest: RestClient) -> None:
        api.reply("ok")
        rest.http_get("/flow")
        assert api.last.headers["Accept"] == MIME_JSON
        assert api.last.headers["User-Agent"] == f"flowctl/{__version__}"
        assert "Content-Type" not in api.last.headers

    def test_post_body_and_content_type(self, api, rest: RestClient) -> None:
        api.reply("ok")
        rest.http_post("/flow", '{"a":1}')
        assert api.last.method == "POST"
        assert api.last.content == b'{"a":1}'
        assert api.last.headers["Content-Type"] == MIME_JSON

    def test_delete_with_body_has_content_type(self, api, rest: RestClient) -> None:
        api.reply("ok")
        api.reply("ok")
        rest.http_delete("/flow/f1")
        assert "Content-Type" not in api.last.headers
        rest.http_delete("/flow/f1/permissions", "{}")
        assert api.last.headers["Content-Type"] == MIME_JSON

    def test_global_and_request_query(self, api, rest: RestClient) -> None:
        rest.set_opts({"qs": {"hints": 1}})
        api.reply("ok")
        rest.http_get("/flow?a=b", qs={"limit": 5})
        params = api.last.url.params
        assert params["a"] == "b"
        assert params["hints"] == "1"
        assert params["limit"] == "5"

    def test_request_query_overrides_global(self, api, rest: RestClient) -> None:
        rest.set_opts({"qs": {"hints": 1}})
        api.reply("ok")
        rest.http_get("/flow", qs={"hints": 0})
        assert api.last.url.params["hints"] == "0"

    def test_global_headers(self, api, rest: RestClient) -> None:
        rest.set_opts({"headers": {"X-Trace": "t1"}})
        api.reply("ok")
        rest.http_put("/flow/f1", "{}", headers={"X-Extra": "e"})
        assert api.last.headers["X-Trace"] == "t1"
        assert api.last.headers["X-Extra"] == "e"
        assert api.last.method == "PUT"


class TestUris:
    def test_oauth_uri(self, rest: RestClient) -> None:
        assert rest.oauth_uri("/token") == "http://api.flow.net:80/oauth/token"

    def test_oauth_uri_merges_global_query(self, rest: RestClient) -> None:
        rest.set_opts({"qs": {"hints": 0}})
        uri = rest.oauth_uri("/token", {"key": "app-key", "response_type": "code"})
        assert uri == "http://api.flow.net:80/oauth/token?hints=0&key=app-key&response_type=code"

    def test_file_uri_uses_file_host(self, rest: RestClient) -> None:
        assert rest.file_uri("/f/1") == "http://file.flow.net:80/f/1"

    def test_custom_file_host(self, api) -> None:
        config = ApiConfig(file_host="files.local", port=8443, scheme="https")
        with RestClient("k", "s", api=config, transport=api.transport) as client:
            assert client.file_uri("/f/1") == "https://files.local:8443/f/1"
            assert client.oauth_uri("/authorize") == "https://api.flow.net:8443/oauth/authorize"
