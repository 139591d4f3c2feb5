"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from flowctl.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from flowctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    if result.op == "convert":
        return str(result.data.get("output", ""))

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["uid"]) for item in items if item.get("uid"))

    uid = result.data.get("uid")
    if uid:
        return str(uid)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="flow.ok")
    op = Text(f"  {result.op}", style="flow.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="flow.key")
    if key == "uid":
        v = Text(str(value), style="flow.uid")
    elif key == "type":
        v = Text(str(value), style="flow.tag")
    else:
        v = Text(_compact(value))
    console.print(k, v, end="")
    console.print()


def _compact(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _fields_table(fields: dict[str, dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Field", style="flow.key", no_wrap=True)
    table.add_column("Type", style="flow.tag")
    table.add_column("Value")
    for name, entry in fields.items():
        table.add_row(name, str(entry.get("type", "")), _compact(entry.get("value")))
    return table


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(Text(f"    {k}: {v}"))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="flow.error")
    op = Text(f"  {result.op}", style="flow.op")
    console.print(label, op, Text(": "), Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_convert(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Converted payloads print bare so they can be piped."""
    console.out(result.data.get("output", ""), highlight=False)
    if verbose:
        _render_meta(console, result)


def _render_described(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render inspect/get/save results: a decoded value and its fields."""
    _status_line(console, result)
    d = result.data
    for key in ("kind", "type", "uid", "created", "size", "keys", "value"):
        if d.get(key) is not None:
            _field(console, key, d[key])
    for role in ("readers", "writers", "deleters"):
        if role in d:
            entry = d[role]
            mode = "allow" if entry.get("access") else "deny"
            _field(console, role, f"{mode} {', '.join(entry.get('ids', [])) or '-'}")

    fields = d.get("fields")
    if fields:
        console.print()
        table = _fields_table(fields)
        table.border_style = style_for_kind(str(d.get("kind", ""))) or None
        console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_listing(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render find results as a table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("UID", style="flow.uid", no_wrap=True)
    table.add_column("Type", style="flow.tag")
    table.add_column("Fields")
    for item in items:
        fields = item.get("fields", {})
        names = [n for n in fields if n not in ("id", "creator", "creationDate", "lastEditDate")]
        summary = ", ".join(f"{n}={_compact(fields[n].get('value'))}" for n in names[:3])
        table.add_row(str(item.get("uid") or ""), str(item.get("type", "")), summary)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} items")


def _render_delete(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("type", "uid"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS = {
    "convert": _render_convert,
    "inspect": _render_described,
    "get": _render_described,
    "save": _render_described,
    "find": _render_listing,
    "delete": _render_delete,
}
