"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.padding import Padding
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from chaosselect.output.console import create_console, get_output, style_for_phase

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from chaosselect.services.result import ServiceResult

    Renderer = Callable[..., None]


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
    """Render minimal output for ``--quiet`` mode.

    Pod lists collapse to one ``namespace/name`` per line.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    pods = result.data.get("pods")
    if isinstance(pods, list):
        return "\n".join(f"{p['namespace']}/{p['name']}" for p in pods)
    if "meets" in result.data:
        return "true" if result.data["meets"] else "false"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="cs.ok")
    op = Text(f"  {result.op}", style="cs.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="cs.key")
    console.print(k, Text(str(value)), sep="", end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta, drawing the stage telemetry as a tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            console.print(Padding(_stage_tree(value), (0, 0, 0, 4)))
        else:
            console.print(f"    {key}: {value}")


def _stage_label(span_data: dict[str, Any]) -> Text:
    duration = span_data.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"
    label = Text(f"{duration:>8.2f}ms", style=style)
    label.append(f"  {span_data.get('name', '?')}")
    counts = span_data.get("annotations") or {}
    if counts:
        label.append("  (" + ", ".join(f"{k}={v}" for k, v in counts.items()) + ")", "cs.key")
    return label


def _stage_tree(span_data: dict[str, Any], tree: Tree | None = None) -> Tree:
    """Build a Rich tree of pipeline stages with timing and pod counts."""
    node = Tree(_stage_label(span_data)) if tree is None else tree.add(_stage_label(span_data))
    for child in span_data.get("children", []):
        _stage_tree(child, node)
    return node


def _pod_table(pods: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Namespace", style="cs.namespace", no_wrap=True)
    table.add_column("Name", style="cs.name", no_wrap=True)
    table.add_column("Phase")
    table.add_column("Node", style="cs.node")
    for pod in pods:
        phase = str(pod.get("phase", ""))
        table.add_row(
            str(pod.get("namespace", "")),
            str(pod.get("name", "")),
            Text(phase, style=style_for_phase(phase)),
            str(pod.get("node") or "-"),
        )
    return table


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text("  warning: ", style="cs.warning"), Text(warning), sep="", end="")
        console.print()


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="cs.error")
    op = Text(f"  {result.op}", style="cs.op")
    code = Text(f" [{err.code}]" if err else "", style="dim")
    console.print(label, op, code, Text(" — "), Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_selection(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render select_pods / select_and_filter_pods as a pod table."""
    d = result.data
    _status_line(console, result)
    if "mode" in d:
        mode = d["mode"] if not d.get("value") else f"{d['mode']} ({d['value']})"
        _field(console, "mode", mode)
        _field(console, "candidates", d.get("candidates", 0))
    _field(console, "count", d.get("count", 0))
    _render_warnings(console, result)

    pods = d.get("pods") or []
    if pods:
        console.print()
        console.print(_pod_table(pods))
    if verbose:
        _render_meta(console, result)


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "pod", f"{d['namespace']}/{d['name']}")
    if d["meets"]:
        verdict = Text("meets selector", style="cs.ok")
    else:
        verdict = Text("does not meet selector", style="cs.warning")
    console.print(Text("  result: ", style="cs.key"), verdict, sep="", end="")
    console.print()
    if verbose:
        _render_meta(console, result)


def _render_parse(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "expression", d["expression"] or "(empty — matches everything)")
    _render_warnings(console, result)
    reqs = d.get("requirements") or []
    if reqs:
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("Key", no_wrap=True)
        table.add_column("Operator")
        table.add_column("Values")
        for req in reqs:
            table.add_row(req["key"], req["operator"], ", ".join(req["values"]))
        console.print()
        console.print(table)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "select_pods": _render_selection,
    "select_and_filter_pods": _render_selection,
    "check_pod": _render_check,
    "parse_expression": _render_parse,
}
