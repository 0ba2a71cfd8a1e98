"""Rich/JSON output helpers.

The CLI renders ServiceResult for humans (Rich tables), for machines
(``--json``), or for shell pipelines (``--quiet``, one file path per line).
Human renderers are dispatched by ``result.op``; unknown ops fall through
to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from closuredeps.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from closuredeps.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display according to *settings*."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)


def render_quiet(result: ServiceResult) -> str:
    """Minimal output: file paths for resolution results, a status line otherwise."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    files = result.data.get("files")
    if isinstance(files, list) and result.op != "bundle":
        return "\n".join(files)
    return f"OK: {result.op}"


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
    else:
        _render_error(result, console)
    if verbose and result.meta:
        console.print(Text("  meta:", style="dim"))
        for key, value in result.meta.items():
            console.print(f"    {key}: {value}")
    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="deps.ok"), Text(f"  {result.op}", style="deps.op"))


def _field(console: Console, key: str, value: Any) -> None:
    if isinstance(value, (dict, list)):
        value = _json.dumps(value, separators=(",", ":"))
    console.print(Text(f"  {key}: ", style="deps.key"), Text(str(value)), sep="")


# ── Renderers ─────────────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


def _render_ordered(result: ServiceResult, console: Console) -> None:
    """Numbered package/path table, in resolution order."""
    _status_line(console, result)
    entries = result.data.get("entries") or [result.data.get("package")]
    _field(console, "entries", ", ".join(str(e) for e in entries))
    items = result.data.get("items", [])
    if not items:
        console.print(Text("  (no packages)", style="dim"))
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("package", style="deps.package")
    table.add_column("path", style="deps.path", overflow="fold")
    for index, item in enumerate(items, start=1):
        table.add_row(str(index), item["name"], item["path"])
    console.print(table)


def _render_packages(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("package", style="deps.package")
    table.add_column("requires")
    table.add_column("path", style="deps.path", overflow="fold")
    for item in result.data.get("items", []):
        table.add_row(item["name"], ", ".join(item["requires"]), item["path"])
    console.print(table)
    _field(console, "count", result.data.get("count", 0))


def _render_bundle(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key in ("output", "count", "bytes"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_error(result: ServiceResult, console: Console) -> None:
    msg = result.error.message if result.error else "Unknown error"
    console.print(
        Text("ERROR", style="deps.error"),
        Text(f"  {result.op}", style="deps.op"),
        Text(f"  {msg}"),
    )
    if result.error is None:
        return
    issues = result.error.detail.get("issues")
    if issues:
        table = Table(show_edge=False, pad_edge=False)
        table.add_column("kind", style="deps.warning")
        table.add_column("from", style="deps.package")
        table.add_column("to", style="deps.package")
        table.add_column("path", style="deps.path", overflow="fold")
        for issue in issues:
            table.add_row(issue["kind"], issue["from"] or "", issue["to"] or "", issue["path"])
        console.print(table)
        return
    for key, value in result.error.detail.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Callable[[ServiceResult, Console], None]] = {
    "resolve": _render_ordered,
    "resolve_file": _render_ordered,
    "dependencies": _render_ordered,
    "packages": _render_packages,
    "bundle": _render_bundle,
}
