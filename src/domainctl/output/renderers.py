"""Human-readable rendering of ServiceResult.

:func:`render_result` looks up a renderer by ``result.op`` in
``_OP_RENDERERS``; ops without an entry print every data key. Failures
always go through :func:`_render_failure` so the error code is visible
whatever the operation. :func:`render_quiet` is the pipe-friendly form.
"""

from __future__ import annotations

import json as _json
from collections import defaultdict
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from domainctl.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from domainctl.services.result import ServiceResult

Renderer = Callable[["ServiceResult", "Console", bool], None]

# Value styles by data key; keys not listed print unstyled.
_VALUE_STYLES: dict[str, str] = {
    **dict.fromkeys(("name", "full_name", "parent"), "dom.name"),
    **dict.fromkeys(("controller", "recipient", "admin"), "dom.identity"),
    **dict.fromkeys(("payment", "fee", "previous_fee", "balance", "amount"), "dom.amount"),
    **dict.fromkeys(("registered_at", "timestamp"), "dom.time"),
}

_SEVERITY_STYLES = {"error": "dom.error", "warning": "dom.warning"}


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* for a terminal.

    The console writes to a buffer, so the text carries no ANSI codes
    unless a terminal is attached (never the case under CliRunner).
    """
    console = create_console()
    if not result.ok:
        _render_failure(result, console, verbose)
    else:
        _OP_RENDERERS.get(result.op, _render_generic)(result, console, verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """One bare value (or one name per line) for ``--quiet``."""
    if not result.ok:
        message = result.error.message if result.error else "Unknown error"
        return f"{result.code or 'ERROR'}: {message}"

    data = result.data
    if isinstance(data.get("items"), list):
        return "\n".join(
            str(item.get("name", "")) if isinstance(item, dict) else str(item)
            for item in data["items"]
        )
    for key in ("controller", "fee", "balance", "receipt"):
        if data.get(key) is not None:
            return str(data[key])
    return f"OK: {result.op}"


# -- building blocks --------------------------------------------------------


def _header(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "dom.ok"), (f"  {result.op}", "dom.op")))


def _pairs(console: Console, pairs: Iterable[tuple[str, Any]], *, indent: int = 2) -> None:
    """Print ``key: value`` lines, styling values by key."""
    pad = " " * indent
    for key, value in pairs:
        console.print(
            Text.assemble((f"{pad}{key}: ", "dom.key"), (str(value), _VALUE_STYLES.get(key, "")))
        )


def _present(data: dict[str, Any], keys: Iterable[str]) -> list[tuple[str, Any]]:
    return [(key, data[key]) for key in keys if data.get(key) is not None]


def _timing_style(duration_ms: float) -> str:
    if duration_ms > 1000:
        return "bold red"
    return "yellow" if duration_ms > 100 else "dim"


def _span_label(span: dict[str, Any]) -> Text:
    duration = float(span.get("duration_ms") or 0.0)
    label = Text.assemble(
        (f"{duration:>8.2f}ms", _timing_style(duration)), f"  {span.get('name', '?')}"
    )
    notes = span.get("annotations") or {}
    if notes:
        label.append("  (" + ", ".join(f"{k}={v}" for k, v in notes.items()) + ")", style="dim")
    return label


def _span_tree(span: dict[str, Any], parent: Tree | None = None) -> Tree:
    node = Tree(_span_label(span)) if parent is None else parent.add(_span_label(span))
    for child in span.get("children", []):
        _span_tree(child, node)
    return node


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Meta block for ``--verbose``: plain keys, then the timing tree."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    _pairs(console, ((k, v) for k, v in result.meta.items() if k != "telemetry"), indent=4)
    if "telemetry" in result.meta:
        console.print(_span_tree(result.meta["telemetry"]))


def _render_failure(result: ServiceResult, console: Console, verbose: bool) -> None:
    err = result.error
    line = Text.assemble(("ERROR", "dom.error"), (f"  {result.op}", "dom.op"))
    if err is not None:
        line.append(f"  [{err.code}]", style="dom.error")
    line.append(f": {err.message if err else 'Unknown error'}")
    console.print(line)
    if verbose and err is not None and err.detail:
        console.print(Text("  detail:", style="dim"))
        _pairs(console, err.detail.items(), indent=4)


# -- mutations --------------------------------------------------------------


def _render_registration(result: ServiceResult, console: Console, verbose: bool) -> None:
    data = result.data
    _header(console, result)
    _pairs(console, [("name", data.get("full_name") or data.get("name"))])
    _pairs(console, _present(data, ("controller", "payment", "registered_at")))
    if verbose:
        _pairs(console, [("seq", data.get("seq"))])
        _render_meta(console, result)


def _render_withdraw(result: ServiceResult, console: Console, verbose: bool) -> None:
    _header(console, result)
    _pairs(console, _present(result.data, ("recipient", "amount", "receipt")))
    if verbose:
        _render_meta(console, result)


# -- queries ----------------------------------------------------------------


def _render_domain(result: ServiceResult, console: Console, verbose: bool) -> None:
    """A domain record followed by the subdomains registered under it."""
    data = result.data
    console.print(Text(data["name"], style="dom.name"))
    _pairs(console, [("controller", data["controller"]), ("registered_at", data["registered_at"])])

    subdomains = data.get("subdomains") or []
    if not subdomains:
        _pairs(console, [("subdomains", 0)])
        return
    table = Table(pad_edge=False)
    table.add_column("Subdomain", style="dom.name", no_wrap=True)
    table.add_column("Controller", style="dom.identity")
    table.add_column("Registered", style="dom.time")
    for sub in subdomains:
        table.add_row(f"{sub['name']}.{sub['parent']}", sub["controller"], sub["registered_at"])
    console.print(table)


def _render_domain_list(result: ServiceResult, console: Console, verbose: bool) -> None:
    names = result.data.get("items") or []
    if not names:
        console.print("No domains registered.", style="dim")
        return
    for name in names:
        console.print(Text(f"  {name}", style="dom.name"))
    console.print(f"\n{len(names)} domains")


def _render_events(result: ServiceResult, console: Console, verbose: bool) -> None:
    """Events in log order; the timestamp column only with ``--verbose``."""
    events = result.data.get("items") or []
    if not events:
        console.print("No matching events.", style="dim")
        return

    columns = ["seq", "kind", "name", "controller", "payment"] + (["timestamp"] if verbose else [])
    table = Table(pad_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind")
    table.add_column("Name", style="dom.name", no_wrap=True)
    table.add_column("Controller", style="dom.identity")
    table.add_column("Payment", justify="right", style="dom.amount")
    if verbose:
        table.add_column("Timestamp", style="dom.time")
    for event in events:
        kind = str(event.get("kind", ""))
        cells: list[str | Text] = [str(event.get(col, "")) for col in columns]
        cells[1] = Text(kind, style=style_for_kind(kind))
        table.add_row(*cells)

    console.print(table)
    console.print(f"\n{result.data.get('count', len(events))} events")


def _render_metrics(result: ServiceResult, console: Console, verbose: bool) -> None:
    data = result.data
    _header(console, result)
    _pairs(
        console,
        (
            (key, data.get(key))
            for key in ("total_registrations", "domain_count", "subdomain_count", "fee", "balance")
        ),
    )
    if data.get("controller") is None:
        return
    console.print()
    _pairs(
        console,
        [
            ("controller", data["controller"]),
            ("owned_domains", ", ".join(data.get("owned_domains") or []) or "-"),
            ("owned_subdomains", ", ".join(data.get("owned_subdomains") or []) or "-"),
        ],
    )


# -- maintenance ------------------------------------------------------------


def _render_check(result: ServiceResult, console: Console, verbose: bool) -> None:
    """Integrity findings, one section per category."""
    issues = result.data.get("issues") or []
    if not issues:
        console.print(Text.assemble(("OK", "dom.ok"), "  No issues found."))
        return

    sections: defaultdict[str, list[dict[str, Any]]] = defaultdict(list)
    for issue in issues:
        sections[str(issue.get("category") or "unknown")].append(issue)

    for category, found in sections.items():
        console.print(f"\n{category}", style="bold", markup=False)
        for issue in found:
            severity = str(issue.get("severity") or "warning")
            line = Text("  ").append(severity, style=_SEVERITY_STYLES.get(severity, ""))
            if issue.get("name"):
                line.append(f" {issue['name']}")
            line.append(f": {issue.get('message', '')}")
            console.print(line)

    errors = result.data.get("error_count")
    if errors is None:
        errors = sum(issue.get("severity") == "error" for issue in issues)
    console.print(f"\n{errors} errors, {len(issues) - errors} warnings")


def _render_rollback(result: ServiceResult, console: Console, verbose: bool) -> None:
    _header(console, result)
    _pairs(console, _present(result.data, ("backup_file", "restored_from")))


def _render_upgrade(result: ServiceResult, console: Console, verbose: bool) -> None:
    data = result.data
    _header(console, result)
    _pairs(
        console,
        _present(
            data,
            (
                "applied_count",
                "pending_count",
                "current",
                "head",
                "stamped",
                "backup_path",
                "message",
            ),
        ),
    )
    revisions = data.get("pending") or data.get("applied") or []
    if verbose and revisions:
        console.print()
        for rev in revisions:
            console.print(f"  {rev['revision']}: {escape(rev['description'])}")


def _compact(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return _json.dumps(value, separators=(",", ":"))
    return value


def _render_generic(result: ServiceResult, console: Console, verbose: bool) -> None:
    _header(console, result)
    _pairs(console, ((key, _compact(value)) for key, value in result.data.items()))
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Renderer] = {
    "register_domain": _render_registration,
    "register_subdomain": _render_registration,
    "withdraw": _render_withdraw,
    "get_domain": _render_domain,
    "list_domains": _render_domain_list,
    "filter_events": _render_events,
    "metrics": _render_metrics,
    "check": _render_check,
    "rollback": _render_rollback,
    "upgrade": _render_upgrade,
}
