"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy client construction and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from flowctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    import httpx

    from flowctl.client.marshaling import MarshalingRestClient
    from flowctl.config.settings import FlowSettings
    from flowctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The REST client is created on first use so offline commands
    (``convert``, ``inspect``) never need credentials.
    """

    def __init__(self, settings: FlowSettings, *, transport: httpx.BaseTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport
        self._client: MarshalingRestClient | None = None

        from flowctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, quiet=settings.quiet, log_json=settings.log_json)

    @property
    def client(self) -> MarshalingRestClient:
        """The marshaling client for the configured wire format."""
        if self._client is None:
            auth = self.settings.auth
            if not auth.key or not auth.secret:
                msg = (
                    "No API credentials configured. Set [auth] key and secret in "
                    "flowctl.toml or FLOWCTL_AUTH__KEY / FLOWCTL_AUTH__SECRET."
                )
                raise click.UsageError(msg)

            from flowctl.client.marshaling import client_for

            self._client = client_for(
                self.settings.client.format,
                auth.key,
                auth.secret,
                auth.actor,
                hints=self.settings.client.hints,
                api=self.settings.api,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
