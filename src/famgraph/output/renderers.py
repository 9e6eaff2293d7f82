"""Human-readable rendering of ServiceResult.

``render_result`` picks a renderer by ``result.op``; graph-shaped results
(``graph``, ``layout``) get a node table, save/clear results get their
key fields, anything else is printed as ``key: value`` lines.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from famgraph.output.console import create_console, get_output, style_for_relation

if TYPE_CHECKING:
    from rich.console import Console

    from famgraph.services.result import ServiceResult

type Renderer = Callable[["ServiceResult", "Console", bool], None]

_GRAPH_FIELDS = ("layout_key", "family_id", "stored_layout_applied")
_MUTATION_FIELDS = ("layout_key", "family_id", "count", "removed")


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* for a terminal; plain text when output is not a TTY."""
    console = create_console()
    if not result.ok:
        _render_error(result, console, verbose)
    else:
        _RENDERERS.get(result.op, _render_fields)(result, console, verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """One node id per line for graph results, else a one-line status."""
    if not result.ok:
        message = result.error.message if result.error else "unknown error"
        return f"ERROR: {result.op}: {message}"
    nodes = result.data.get("nodes") or []
    ids = [str(n["id"]) for n in nodes if isinstance(n, dict) and "id" in n]
    return "\n".join(ids) if ids else f"OK: {result.op}"


def _header(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "fam.ok"), ("  " + result.op, "fam.op")))


def _print_fields(console: Console, data: Mapping[str, Any], keys: Iterable[str]) -> None:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        style = "fam.id" if key == "layout_key" or key.endswith("_id") else ""
        console.print(Text.assemble((f"  {key}: ", "fam.key"), (str(value), style)))


def _fmt_coord(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return ""
    return f"{value:.1f}"


def _nodes_table(nodes: list[dict[str, Any]]) -> Table:
    positioned = any("x" in n for n in nodes)
    table = Table(pad_edge=False)
    table.add_column("ID", style="fam.id", no_wrap=True)
    table.add_column("Name", style="fam.label")
    table.add_column("Gender")
    if positioned:
        table.add_column("X", style="fam.coord", justify="right")
        table.add_column("Y", style="fam.coord", justify="right")
    for node in nodes:
        cells = [str(node.get(k, "")) for k in ("id", "label", "gender")]
        if positioned:
            cells.extend((_fmt_coord(node.get("x")), _fmt_coord(node.get("y"))))
        table.add_row(*cells)
    return table


def _edges_table(edges: list[dict[str, Any]]) -> Table:
    table = Table(pad_edge=False)
    for name in ("Source", "Target"):
        table.add_column(name, style="fam.id")
    table.add_column("Relation")
    for edge in edges:
        kind = str(edge.get("type", ""))
        table.add_row(
            str(edge.get("source", "")),
            str(edge.get("target", "")),
            Text(kind, style=style_for_relation(kind)),
        )
    return table


def _totals(data: Mapping[str, Any], nodes: list[Any], edges: list[dict[str, Any]]) -> str:
    line = (
        f"{data.get('node_count', len(nodes))} people, "
        f"{data.get('edge_count', len(edges))} edges"
    )
    by_kind = Counter(str(e.get("type", "")) for e in edges)
    if not by_kind:
        return line
    breakdown = ", ".join(f"{n} {kind.lower()}" for kind, n in sorted(by_kind.items()))
    return f"{line} ({breakdown})"


def _render_error(result: ServiceResult, console: Console, verbose: bool) -> None:
    error = result.error
    console.print(
        Text.assemble(
            ("ERROR", "fam.error"),
            ("  " + result.op, "fam.op"),
            ": " + (error.message if error else "unknown error"),
        )
    )
    if verbose and error is not None and error.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in error.detail.items():
            console.print(f"    {key}: {value}")


def _render_graph(result: ServiceResult, console: Console, verbose: bool) -> None:
    data = result.data
    nodes = data.get("nodes") or []
    edges = data.get("edges") or []
    _header(console, result)
    _print_fields(console, data, _GRAPH_FIELDS)
    if nodes:
        console.print()
        console.print(_nodes_table(nodes))
    if verbose and edges:
        console.print()
        console.print(_edges_table(edges))
    console.print()
    console.print(_totals(data, nodes, edges))


def _render_mutation(result: ServiceResult, console: Console, verbose: bool) -> None:
    _header(console, result)
    _print_fields(console, result.data, _MUTATION_FIELDS)


def _render_fields(result: ServiceResult, console: Console, verbose: bool) -> None:
    _header(console, result)
    _print_fields(console, result.data, result.data)


_RENDERERS: dict[str, Renderer] = {
    "graph": _render_graph,
    "layout": _render_graph,
    "save_layout": _render_mutation,
    "clear_layout": _render_mutation,
}
