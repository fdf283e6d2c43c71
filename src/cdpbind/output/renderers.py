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

from cdpbind.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from cdpbind.services.result import ServiceResult


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
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        err = result.error
        if err and "reply" in err.detail:
            return str(err.detail["reply"])
        msg = err.message if err else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    data = result.data
    match result.op:
        case "domains":
            return "\n".join(row["name"] for row in data.get("items", []))
        case "deprecated":
            return "\n".join(row["path"] for row in data.get("items", []))
        case "borrows" if "chain" in data:
            return "yes" if data["borrows"] else "no"
        case "borrows":
            return "\n".join(data.get("borrowing", []))
        case "generate":
            return "\n".join(data.get("files", []))
        case "parse_message":
            return str(data.get("method", ""))
        case _:
            return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="cdp.ok")
    op = Text(f"  {result.op}", style="cdp.op")
    console.print(label, op, sep="")


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="cdp.key")
    if isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":"), ensure_ascii=False))
    elif key in ("path", "output_dir"):
        v = Text(str(value), style="cdp.path")
    elif isinstance(value, int) and not isinstance(value, bool):
        v = Text(str(value), style="cdp.count")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += f"  ({', '.join(f'{k}={v}' for k, v in annotations.items())})"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _flags(row: dict[str, Any]) -> Text:
    text = Text()
    if row.get("experimental"):
        text.append("experimental", style="cdp.experimental")
    if row.get("deprecated"):
        if text:
            text.append(" ")
        text.append("deprecated", style="cdp.deprecated")
    return text


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="cdp.error")
    op = Text(f"  {result.op}", style="cdp.op")
    console.print(label, op, Text(": "), msg, sep="")

    if err is None:
        return
    # A protocol failure always shows the reply a server would send.
    if "reply" in err.detail:
        _field(console, "reply", err.detail["reply"])
    if verbose:
        console.print(Text(f"  code: {err.code}", style="dim"))
        for k, v in err.detail.items():
            if k != "reply":
                console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render schema check counts."""
    _status_line(console, result)
    for key in (
        "version",
        "domains",
        "commands",
        "events",
        "types",
        "declarations",
        "borrowing",
        "deprecated",
    ):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_domains(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the domain listing as a table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Domain", style="cdp.name", no_wrap=True)
    table.add_column("Module", style="cdp.path")
    table.add_column("Commands", justify="right")
    table.add_column("Events", justify="right")
    table.add_column("Types", justify="right")
    table.add_column("Flags")
    if verbose:
        table.add_column("Depends on", style="dim")

    for row in items:
        cells: list[Any] = [
            row["name"],
            row["module"],
            str(row["commands"]),
            str(row["events"]),
            str(row["types"]),
            _flags(row),
        ]
        if verbose:
            cells.append(", ".join(row.get("dependencies", [])))
        table.add_row(*cells)

    console.print(table)
    count = result.data.get("count", len(items))
    console.print(f"\n{count} domains (protocol {result.data.get('version', '?')})")


def _render_borrows(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the borrowing set, or the explanation chain for one type."""
    data = result.data
    if "chain" in data:
        target = Text(str(data["target"]), style="cdp.name")
        if not data["borrows"]:
            console.print(target, Text(" owns all of its data"), sep="")
            return
        console.print(target, Text(" borrows via:"), sep="")
        for depth, node in enumerate(data["chain"]):
            console.print(f"{'  ' * (depth + 1)}{node}")
        return

    _status_line(console, result)
    borrowing = data.get("borrowing", [])
    for name in borrowing:
        console.print(Text(f"  {name}", style="cdp.name"))
    console.print(f"\n{len(borrowing)} borrowing types")
    if verbose:
        owned = data.get("owned", [])
        console.print(Text(f"{len(owned)} owned types:", style="dim"))
        for name in owned:
            console.print(Text(f"  {name}", style="dim"))


def _render_deprecated(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render deprecated nodes as a table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Node", style="cdp.name", no_wrap=True)
    table.add_column("Warning", style="cdp.deprecated")
    if verbose:
        table.add_column("Source", style="dim")

    for row in items:
        cells = [row["path"], row.get("warning") or ""]
        if verbose:
            cells.append("own" if row.get("own_warning") else "inherited")
        table.add_row(*cells)

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} deprecated nodes")


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a generate run."""
    _status_line(console, result)
    for key in ("package", "version", "output_dir", "count", "declarations"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        for path in result.data.get("files", []):
            console.print(Text(f"    {path}", style="cdp.path"))


def _render_message(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a parsed incoming message."""
    _status_line(console, result)
    for key in ("id", "method", "type", "params", "value"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose and "borrows" in result.data:
        _field(console, "borrows", result.data["borrows"])


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Any] = {
    "check": _render_check,
    "domains": _render_domains,
    "borrows": _render_borrows,
    "deprecated": _render_deprecated,
    "generate": _render_generate,
    "parse_message": _render_message,
}
