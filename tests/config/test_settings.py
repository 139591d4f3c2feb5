"""Tests for FlowSettings: unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from flowctl.config.models import ApiConfig
from flowctl.config.settings import FlowSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FLOWCTL_CONFIG", "FLOWCTL_AUTH__KEY", "FLOWCTL_AUTH__SECRET", "FLOWCTL_API__HOST"):
        monkeypatch.delenv(name, raising=False)


class TestFlowSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = FlowSettings.from_cli(start=tmp_path)
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.api.host == "api.flow.net"
        assert settings.api.port == 80
        assert settings.auth.key == ""
        assert settings.client.format == "json"
        assert settings.client.hints == 1

    def test_frozen(self, tmp_path: Path) -> None:
        settings = FlowSettings.from_cli(start=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]

    def test_base_url(self) -> None:
        assert ApiConfig().base_url == "http://api.flow.net:80"
        assert ApiConfig(scheme="https", port=443).base_url == "https://api.flow.net:443"

    def test_file_url(self) -> None:
        assert ApiConfig().file_url == "http://file.flow.net:80"
        assert ApiConfig(file_host="files.local", port=8080).file_url == "http://files.local:8080"

    def test_port_range(self) -> None:
        with pytest.raises(ValueError):
            ApiConfig(port=0)


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "flowctl.toml").write_text(
            '[auth]\nkey = "k1"\nsecret = "s1"\n[client]\nformat = "xml"\n'
        )
        settings = FlowSettings.from_cli(start=tmp_path)
        assert settings.auth.key == "k1"
        assert settings.auth.secret == "s1"
        assert settings.client.format == "xml"
        assert settings.client.hints == 1  # default preserved
        assert settings.config_path == tmp_path / "flowctl.toml"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[api]\nhost = "localhost"\nport = 8080\nfile_host = "files.local"\n')
        settings = FlowSettings.from_cli(config_path=str(custom))
        assert settings.api.base_url == "http://localhost:8080"
        assert settings.api.file_url == "http://files.local:8080"
        assert settings.config_path == custom

    def test_missing_explicit_path_uses_defaults(self, tmp_path: Path) -> None:
        settings = FlowSettings.from_cli(config_path=str(tmp_path / "nope.toml"))
        assert settings.config_path is None
        assert settings.api.host == "api.flow.net"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "flowctl.toml").write_text("[auth\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            FlowSettings.from_cli(start=tmp_path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / "flowctl.toml").write_text('[client]\nformat = "yaml"\n')
        with pytest.raises(ValueError):
            FlowSettings.from_cli(start=tmp_path)


class TestEnvAndFlags:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "flowctl.toml").write_text('[api]\nhost = "from-toml"\n')
        monkeypatch.setenv("FLOWCTL_API__HOST", "from-env")
        settings = FlowSettings.from_cli(start=tmp_path)
        assert settings.api.host == "from-env"

    def test_env_credentials(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLOWCTL_AUTH__KEY", "env-key")
        monkeypatch.setenv("FLOWCTL_AUTH__SECRET", "env-secret")
        settings = FlowSettings.from_cli(start=tmp_path)
        assert settings.auth.key == "env-key"
        assert settings.auth.secret == "env-secret"

    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = FlowSettings.from_cli(start=tmp_path, json_output=True, quiet=True, verbose=True)
        assert settings.json_output is True
        assert settings.quiet is True
        assert settings.verbose is True
