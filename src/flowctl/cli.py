"""Root CLI group for flowctl with global flags and command registration."""

from __future__ import annotations

import click

from flowctl import __version__
from flowctl.commands import register_commands
from flowctl.commands._base import FlowGroup
from flowctl.commands._context import AppContext
from flowctl.config.settings import FlowSettings


@click.group(
    cls=FlowGroup,
    invoke_without_command=True,
    examples="""\
  flowctl convert flow.json --to xml
  flowctl find flow --where name=bucket1
  flowctl --json get flow 4f8e2a
  flowctl -c staging.toml -v delete drop 4f8e2a/9b1c07""",
)
@click.version_option(version=__version__, prog_name="flowctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """flowctl: Flow Platform client and payload codec."""
    ctx.ensure_object(dict)
    transport = ctx.obj.get("transport") if isinstance(ctx.obj, dict) else None
    settings = FlowSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings, transport=transport)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
