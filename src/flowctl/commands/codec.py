"""Offline commands: convert and inspect wire payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import click

from flowctl.commands._base import FlowCommand
from flowctl.marshal import MARSHALERS
from flowctl.services.convert import ConvertService

if TYPE_CHECKING:
    from flowctl.commands._context import AppContext

_FORMATS = click.Choice(sorted(MARSHALERS))


def sniff_format(text: str) -> str:
    """Guess the wire format of *text*: XML documents open with ``<``."""
    return "xml" if text.lstrip().startswith("<") else "json"


@click.command(
    cls=FlowCommand,
    examples="""\
  flowctl convert flow.json
  flowctl convert flow.xml --to json
  cat drop.json | flowctl convert --from json --to xml
  flowctl convert payload.xml --type flow""",
)
@click.argument("source_file", type=click.File("r"), default="-")
@click.option("--from", "source", type=_FORMATS, default=None, help="Input format (sniffed when omitted).")
@click.option("--to", "target", type=_FORMATS, default=None, help="Output format (the other one when omitted).")
@click.option("--type", "type_hint", default=None, help="Type tag for a payload without an envelope.")
@click.pass_obj
def convert(
    app: AppContext,
    source_file: TextIO,
    source: str | None,
    target: str | None,
    type_hint: str | None,
) -> None:
    """Transcode a payload between JSON and XML."""
    text = source_file.read()
    source = source or sniff_format(text)
    target = target or ("xml" if source == "json" else "json")
    app.emit(ConvertService().convert(text, source=source, target=target, type_hint=type_hint))


@click.command(
    "inspect",
    cls=FlowCommand,
    examples="""\
  flowctl inspect flow.json
  flowctl --json inspect drop.xml
  echo '{"type":"date","value":0}' | flowctl inspect""",
)
@click.argument("source_file", type=click.File("r"), default="-")
@click.option("--from", "source", type=_FORMATS, default=None, help="Input format (sniffed when omitted).")
@click.option("--type", "type_hint", default=None, help="Type tag for a payload without an envelope.")
@click.pass_obj
def inspect_cmd(app: AppContext, source_file: TextIO, source: str | None, type_hint: str | None) -> None:
    """Decode a payload and show its type and fields."""
    text = source_file.read()
    app.emit(ConvertService().inspect(text, source=source or sniff_format(text), type_hint=type_hint))
