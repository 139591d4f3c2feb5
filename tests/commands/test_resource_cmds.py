"""Tests for the get/find/save/delete commands against a canned API."""

from __future__ import annotations

import json
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from flowctl.cli import cli
from flowctl.commands.resources import parse_where

FLOW_F1 = {"type": "flow", "value": {"id": {"type": "id", "value": "f1"}, "name": "bucket1"}}
FLOW_F2 = {"type": "flow", "value": {"id": {"type": "id", "value": "f2"}, "name": "bucket2"}}


def _invoke(runner: CliRunner, api, *args: str, **kwargs):
    return runner.invoke(cli, list(args), obj={"transport": api.transport}, **kwargs)


class TestParseWhere:
    def test_string_fields_stay_strings(self) -> None:
        assert parse_where("drop", ("flowId=123", "path=/a")) == {"flowId": "123", "path": "/a"}

    def test_other_fields_read_as_json(self) -> None:
        assert parse_where("drop", ("rating=3", "elems={\"a\": 1}")) == {"rating": 3, "elems": {"a": 1}}
        assert parse_where("flow", ("local=true",)) == {"local": True}

    def test_unparseable_json_stays_raw(self) -> None:
        assert parse_where("drop", ("rating=high",)) == {"rating": "high"}

    def test_value_may_contain_equals(self) -> None:
        assert parse_where("flow", ("filter=a=b",)) == {"filter": "a=b"}

    def test_missing_separator(self) -> None:
        with pytest.raises(click.BadParameter):
            parse_where("flow", ("name",))


@pytest.mark.usefixtures("credentials")
class TestGetCommand:
    def test_get(self, cli_runner: CliRunner, api) -> None:
        api.json_ok(FLOW_F1)
        result = _invoke(cli_runner, api, "--json", "get", "flow", "f1")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["data"]["uid"] == "f1"
        assert data["data"]["fields"]["name"]["value"] == "bucket1"
        assert api.last.url.path == "/flow/f1"
        assert api.last.headers["X-Key"] == "app-key"

    def test_get_drop(self, cli_runner: CliRunner, api) -> None:
        api.json_ok({"type": "drop", "value": {}})
        result = _invoke(cli_runner, api, "get", "drop", "f1/d1")
        assert result.exit_code == 0, result.output
        assert api.last.url.path == "/drop/f1/d1"

    def test_human_output(self, cli_runner: CliRunner, api) -> None:
        api.json_ok(FLOW_F1)
        result = _invoke(cli_runner, api, "get", "flow", "f1")
        assert "OK" in result.output
        assert "bucket1" in result.output

    def test_not_found(self, cli_runner: CliRunner, api) -> None:
        api.json_fail(404, "Not found")
        result = _invoke(cli_runner, api, "--json", "get", "flow", "nope")
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["error"]["code"] == "RESPONSE_ERROR"
        assert data["error"]["detail"]["errors"] == ["Not found"]

    def test_unknown_type_rejected(self, cli_runner: CliRunner, api) -> None:
        result = _invoke(cli_runner, api, "get", "hologram", "x")
        assert result.exit_code == 2
        assert not api.requests

    def test_xml_wire_format(self, cli_runner: CliRunner, api, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLOWCTL_CLIENT__FORMAT", "xml")
        api.xml_ok('<id type="id">f1</id>', "flow")
        result = _invoke(cli_runner, api, "-q", "get", "flow", "f1")
        assert result.exit_code == 0, result.output
        assert result.output == "f1\n"
        assert api.last.headers["Accept"] == "text/xml"


class TestCredentials:
    def test_missing_credentials(
        self, cli_runner: CliRunner, api, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("FLOWCTL_CONFIG", raising=False)
        monkeypatch.delenv("FLOWCTL_AUTH__KEY", raising=False)
        monkeypatch.delenv("FLOWCTL_AUTH__SECRET", raising=False)
        result = _invoke(cli_runner, api, "get", "flow", "f1")
        assert result.exit_code == 2
        assert "No API credentials" in result.output

    def test_credentials_from_toml(
        self, cli_runner: CliRunner, api, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        config = tmp_path / "flowctl.toml"
        config.write_text('[auth]\nkey = "toml-key"\nsecret = "toml-secret"\nactor = "me"\n')
        monkeypatch.delenv("FLOWCTL_AUTH__KEY", raising=False)
        monkeypatch.delenv("FLOWCTL_AUTH__SECRET", raising=False)
        api.json_ok(FLOW_F1)
        result = _invoke(cli_runner, api, "-c", str(config), "get", "flow", "f1")
        assert result.exit_code == 0, result.output
        assert api.last.headers["X-Key"] == "toml-key"
        assert api.last.headers["X-Actor"] == "me"


@pytest.mark.usefixtures("credentials")
class TestFindCommand:
    def test_find_with_criteria(self, cli_runner: CliRunner, api) -> None:
        api.json_ok([FLOW_F1, FLOW_F2])
        result = _invoke(
            cli_runner, api, "--json", "find", "flow", "--where", "name=bucket1", "--limit", "5", "--order", "desc"
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["data"]["count"] == 2
        params = api.last.url.params
        assert json.loads(params["criteria"]) == {"type": "flow", "value": {"name": "bucket1"}}
        assert params["limit"] == "5"
        assert params["order"] == "desc"

    def test_find_drops_in_flow(self, cli_runner: CliRunner, api) -> None:
        api.json_ok([])
        result = _invoke(cli_runner, api, "find", "drop", "-w", "flowId=f1")
        assert result.exit_code == 0, result.output
        assert api.last.url.path == "/drop/f1"
        assert "0 items" in result.output

    def test_quiet_lists_uids(self, cli_runner: CliRunner, api) -> None:
        api.json_ok([FLOW_F1, FLOW_F2])
        result = _invoke(cli_runner, api, "-q", "find", "flow")
        assert result.output == "f1\nf2\n"

    def test_bad_where(self, cli_runner: CliRunner, api) -> None:
        result = _invoke(cli_runner, api, "find", "flow", "--where", "name")
        assert result.exit_code == 2
        assert not api.requests

    def test_unknown_field(self, cli_runner: CliRunner, api) -> None:
        result = _invoke(cli_runner, api, "--json", "find", "flow", "--where", "colour=red")
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "FIELD_ERROR"


@pytest.mark.usefixtures("credentials")
class TestSaveDeleteCommands:
    def test_save_from_stdin(self, cli_runner: CliRunner, api) -> None:
        api.json_ok(FLOW_F1)
        payload = '{"type":"flow","value":{"name":"bucket1"}}'
        result = _invoke(cli_runner, api, "--json", "save", input=payload)
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["data"]["created"] is True
        assert data["data"]["uid"] == "f1"
        assert api.last.method == "POST"

    def test_save_file_with_type(self, cli_runner: CliRunner, api, tmp_path: Path) -> None:
        source = tmp_path / "flow.json"
        source.write_text('{"id": {"type": "id", "value": "f1"}, "name": "bucket1"}')
        api.json_ok(FLOW_F1)
        result = _invoke(cli_runner, api, "-q", "save", str(source), "--type", "flow")
        assert result.exit_code == 0, result.output
        assert result.output == "f1\n"
        assert api.last.method == "PUT"

    def test_delete(self, cli_runner: CliRunner, api) -> None:
        api.json_ok(None)
        result = _invoke(cli_runner, api, "delete", "flow", "f1")
        assert result.exit_code == 0, result.output
        assert api.last.method == "DELETE"
        assert "delete" in result.output

    def test_delete_refused(self, cli_runner: CliRunner, api) -> None:
        api.json_fail(403, "Forbidden")
        result = _invoke(cli_runner, api, "delete", "flow", "f1")
        assert result.exit_code == 1
        assert "ERROR" in result.output
