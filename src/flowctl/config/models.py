"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``flowctl.toml`` only contains
overrides. A working setup needs only ``[auth] key`` and ``[auth] secret``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# --- flowctl.toml sections ---


class ApiConfig(BaseModel):
    """[api] section."""

    model_config = {"frozen": True}

    host: str = "api.flow.net"
    file_host: str = "file.flow.net"
    port: int = Field(default=80, ge=1, le=65535)
    scheme: Literal["http", "https"] = "http"
    timeout: float = 60.0
    connect_timeout: float = 10.0

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def file_url(self) -> str:
        """Base URL of the file store, which shares the API's scheme and port."""
        return f"{self.scheme}://{self.file_host}:{self.port}"


class AuthConfig(BaseModel):
    """[auth] section."""

    model_config = {"frozen": True}

    key: str = ""
    secret: str = ""
    actor: str | None = None


class ClientConfig(BaseModel):
    """[client] section."""

    model_config = {"frozen": True}

    format: Literal["json", "xml"] = "json"
    hints: int = 1
