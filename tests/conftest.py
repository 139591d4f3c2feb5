"""Shared pytest fixtures and test helpers for flowctl tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from flowctl.client.marshaling import JsonRestClient, XmlRestClient
from flowctl.domain.objects import DomainObject, new_object


class FakeFlowApi:
    """A canned Flow API: records requests, answers from a queue.

    Queue response texts with :meth:`reply` (or the ``json_*``/``xml_*``
    builders) before exercising a client; each request pops one.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            return httpx.Response(500, text="no reply queued")
        return httpx.Response(200, text=self._replies.pop(0))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def reply(self, text: str) -> None:
        self._replies.append(text)

    # --- JSON responses ---

    def json_ok(self, body: Any) -> None:
        self.reply(json.dumps({"head": {"ok": True, "status": 200}, "body": body}))

    def json_fail(self, status: int, *errors: str) -> None:
        head = {
            "ok": False,
            "status": status,
            "messages": [],
            "errors": [[status, e] for e in errors],
        }
        self.reply(json.dumps({"head": head, "body": None}))

    # --- XML responses ---

    def xml_ok(self, body: str, type_name: str | None = None) -> None:
        attr = f' type="{type_name}"' if type_name else ""
        self.reply(
            "<response><head><ok>true</ok><status>200</status></head>"
            f"<body{attr}>{body}</body></response>"
        )

    def xml_fail(self, status: int, *errors: str) -> None:
        errs = "".join(f"<error>{e}</error>" for e in errors)
        self.reply(
            f"<response><head><ok>false</ok><status>{status}</status>"
            f"<errors>{errs}</errors></head><body/></response>"
        )


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def api() -> FakeFlowApi:
    return FakeFlowApi()


@pytest.fixture
def json_client(api: FakeFlowApi) -> Iterator[JsonRestClient]:
    client = JsonRestClient("app-key", "app-secret", transport=api.transport)
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def xml_client(api: FakeFlowApi) -> Iterator[XmlRestClient]:
    client = XmlRestClient("app-key", "app-secret", transport=api.transport)
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def flow() -> DomainObject:
    """An unsaved flow with a string and a labelled field."""
    return new_object("flow", name="bucket1", path="/test/bucket1")


@pytest.fixture
def credentials(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """API credentials via env vars, with cwd isolated from any flowctl.toml."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FLOWCTL_CONFIG", raising=False)
    monkeypatch.setenv("FLOWCTL_AUTH__KEY", "app-key")
    monkeypatch.setenv("FLOWCTL_AUTH__SECRET", "app-secret")
