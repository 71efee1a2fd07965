"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from genesisctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from genesisctl.services.result import ServiceResult


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
        _render_warnings(console, result)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode.

    Genesis operations print just the waypoint, listings just the paths.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    data = result.data
    if "waypoint" in data:
        return str(data["waypoint"])
    if "text" in data:
        return str(data["text"]).rstrip("\n")
    items = data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item.get("path", "")) for item in items)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="gen.ok")
    op = Text(f"  {result.op}", style="gen.op")
    console.print(label, op, end="")
    console.print()


def _format_value(value: Any) -> str:
    if isinstance(value, dict | list):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="gen.key")
    if key == "waypoint":
        v = Text(str(value), style="gen.waypoint")
    elif key in ("path", "genesis", "waypoint_file", "location") or key.endswith("_keys"):
        v = Text(str(value), style="gen.path")
    elif key.endswith("address"):
        v = Text(str(value), style="gen.address")
    else:
        v = Text(_format_value(value))
    console.print(k, v, end="")
    console.print()


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text("  warning: ", style="gen.warning"), Text(warning), end="")
        console.print()


def _render_timings(console: Console, result: ServiceResult) -> None:
    """Stage timings, slowest highlighted (verbose only)."""
    timings = (result.meta or {}).get("timings_ms")
    if not timings:
        return
    console.print()
    console.print(Text("  timings:", style="dim"))
    for stage, duration in timings.items():
        if duration > 1000:
            style = "bold red"
        elif duration > 100:
            style = "yellow"
        else:
            style = "dim"
        console.print(f"    [{style}]{duration:>8.2f}ms[/{style}]  {stage}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="gen.error")
    op = Text(f"  {result.op}", style="gen.op")
    sep = Text(" — ")
    console.print(label, op, sep, Text(msg))

    if err and err.detail and (verbose or "missing" in err.detail):
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {_format_value(v)}"))


# ── Generic renderer ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_timings(console, result)


# ── Layout renderers ──────────────────────────────────────────────────


def _render_template(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """``layout template`` without a store prints the YAML itself."""
    text = result.data.get("text")
    if text is None:
        _render_layout(result, console, verbose=verbose)
        return
    console.print(Text(str(text).rstrip("\n")))


def _render_layout(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("location", "path", "changed"):
        if key in result.data:
            _field(console, key, result.data[key])

    layout: dict[str, Any] = result.data.get("layout", {})
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Field", style="gen.key", no_wrap=True)
    table.add_column("Value")
    for key, value in layout.items():
        if key == "users":
            continue
        table.add_row(key, "—" if value is None else _format_value(value))
    console.print(table)

    users = layout.get("users", [])
    console.print(f"\n{len(users)} participants")
    for name in users:
        console.print(Text(f"  {name}", style="gen.name"))


# ── Store renderers ───────────────────────────────────────────────────


def _render_store_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    published = set(result.data.get("published", []))
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Path", style="gen.path")
    for item in items:
        table.add_row(str(item.get("path", "")))
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} entries, {len(published)} published participants")


# ── Genesis renderers ─────────────────────────────────────────────────


def _render_genesis(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render generate/bootstrap results as a panel."""
    d = result.data
    participants = d.get("participants", [])
    lines = [
        f"waypoint: {d.get('waypoint')}",
        f"chain_id: {d.get('chain_id')}",
        f"is_test: {d.get('is_test')}",
        f"validators: {len(participants)} ({', '.join(participants)})",
        f"genesis: {d.get('genesis')} ({d.get('size')} bytes)",
        f"waypoint file: {d.get('waypoint_file')}",
    ]
    _status_line(console, result)
    console.print(Panel(Text("\n".join(lines)), title="genesis", border_style="green", expand=False))
    if verbose:
        _render_timings(console, result)


def _render_waypoint(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "genesis", result.data.get("genesis"))
    _field(console, "waypoint", result.data.get("waypoint"))
    if "matches" in result.data:
        matches = result.data["matches"]
        text = Text("matches waypoint.txt", style="gen.ok") if matches else Text(
            "differs from waypoint.txt", style="gen.error"
        )
        console.print(Text("  "), text)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "layout_template": _render_template,
    "layout_setup": _render_layout,
    "layout_update": _render_layout,
    "layout_show": _render_layout,
    "store_list": _render_store_list,
    "generate_genesis": _render_genesis,
    "bootstrap_local": _render_genesis,
    "derive_waypoint": _render_waypoint,
}
