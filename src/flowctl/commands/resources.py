"""Remote commands: get, find, save and delete platform objects."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TextIO

import click

from flowctl.commands._base import FlowCommand
from flowctl.domain.objects import OBJECT_SCHEMAS
from flowctl.domain.types import OBJECT_TAGS, resolve
from flowctl.services.resources import ResourceService

if TYPE_CHECKING:
    from flowctl.commands._context import AppContext

_TYPES = click.Choice(OBJECT_TAGS)


def parse_where(type_name: str, pairs: tuple[str, ...]) -> dict[str, Any]:
    """Turn ``field=value`` pairs into criteria.

    Values for string-based fields stay strings; others are read as JSON
    (``5``, ``true``, ``["a"]``) and fall back to the raw string.

    Raises:
        click.BadParameter: If a pair has no ``=``.
    """
    schema = OBJECT_SCHEMAS.get(type_name)
    criteria: dict[str, Any] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name:
            msg = f"Expected field=value, got {pair!r}"
            raise click.BadParameter(msg, param_hint="--where")
        tag = schema.fields.get(name) if schema else None
        if tag is not None and resolve(tag).base == "string":
            criteria[name] = raw
            continue
        try:
            criteria[name] = json.loads(raw)
        except ValueError:
            criteria[name] = raw
    return criteria


@click.command(
    cls=FlowCommand,
    examples="""\
  flowctl get flow 4f8e2a
  flowctl get drop 4f8e2a/9b1c07
  flowctl --json get identity 51c2d0""",
)
@click.argument("type_name", metavar="TYPE", type=_TYPES)
@click.argument("uid")
@click.pass_obj
def get(app: AppContext, type_name: str, uid: str) -> None:
    """Fetch one object by uid (FLOW_ID/ID for drops)."""
    app.emit(ResourceService(app.client).get(type_name, uid))


@click.command(
    cls=FlowCommand,
    examples="""\
  flowctl find flow --where name=bucket1
  flowctl find drop --where flowId=4f8e2a --limit 10 --order desc
  flowctl find identity --query alice
  flowctl -q find flow --sort name""",
)
@click.argument("type_name", metavar="TYPE", type=_TYPES)
@click.option("-w", "--where", "where", multiple=True, help="Field criterion as field=value (repeatable).")
@click.option("--query", default=None, help="Full-text query.")
@click.option("--filter", "filter_", default=None, help="Filter expression.")
@click.option("--start", default=None, type=int, help="Offset of the first result.")
@click.option("--limit", default=None, type=int, help="Max results.")
@click.option("--sort", default=None, help="Field to sort by.")
@click.option("--order", type=click.Choice(["asc", "desc"]), default=None, help="Sort order.")
@click.pass_obj
def find(
    app: AppContext,
    type_name: str,
    where: tuple[str, ...],
    query: str | None,
    filter_: str | None,
    start: int | None,
    limit: int | None,
    sort: str | None,
    order: str | None,
) -> None:
    """List objects of TYPE matching field criteria."""
    criteria = parse_where(type_name, where)
    svc = ResourceService(app.client)
    result = svc.find(
        type_name,
        criteria,
        query=query,
        filter=filter_,
        start=start,
        limit=limit,
        sort=sort,
        order=order,
    )
    app.emit(result)


@click.command(
    cls=FlowCommand,
    examples="""\
  flowctl save flow.json
  cat drop.json | flowctl save
  flowctl save bucket.xml --type flow""",
)
@click.argument("source_file", type=click.File("r"), default="-")
@click.option("--type", "type_hint", type=_TYPES, default=None, help="Object type for a payload without an envelope.")
@click.pass_obj
def save(app: AppContext, source_file: TextIO, type_hint: str | None) -> None:
    """Create or replace the object held in a payload.

    The payload must be in the configured wire format ([client] format).
    """
    app.emit(ResourceService(app.client).save_payload(source_file.read(), type_hint))


@click.command(
    cls=FlowCommand,
    examples="""\
  flowctl delete flow 4f8e2a
  flowctl -q delete drop 4f8e2a/9b1c07""",
)
@click.argument("type_name", metavar="TYPE", type=_TYPES)
@click.argument("uid")
@click.pass_obj
def delete(app: AppContext, type_name: str, uid: str) -> None:
    """Delete one object by uid."""
    app.emit(ResourceService(app.client).delete(type_name, uid))
