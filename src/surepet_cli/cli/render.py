"""Presentation of dispatcher results — Rich tables or JSON.

This module is responsible for:

* Rendering pets, devices, history reports and mutation receipts as
  Rich tables / messages on stdout.
* Serialising the same payloads as JSON under ``--json``.
* Rendering a :class:`~surepet_cli.exceptions.SurePetError` verbatim,
  with its hint, and choosing the exit code.

No business logic, no network calls.
"""

from __future__ import annotations

import dataclasses
import json
import sys
from collections.abc import Sequence
from datetime import datetime
from enum import Enum
from typing import Any

from surepet_cli.cli import exit_codes
from surepet_cli.cli.console import console, err_console, escape_markup
from surepet_cli.core.dispatcher import CommandFailure, CommandResult
from surepet_cli.core.models import (
    Device,
    HistoryKind,
    HistoryReport,
    Location,
    MutationReceipt,
    Pet,
)
from surepet_cli.exceptions import AmbiguousError, ApiError, EnvironmentError, SurePetError


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for result rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
            hint="Or pass --json for machine-readable output.",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Formatting helpers (pure, no I/O)
# ---------------------------------------------------------------------------

_LOCATION_STYLE: dict[Location, str] = {
    Location.INSIDE: "[green]inside[/green]",
    Location.OUTSIDE: "[yellow]outside[/yellow]",
    Location.UNKNOWN: "[dim]unknown[/dim]",
}


def format_duration(seconds: int | None) -> str:
    """Render seconds as ``"2h 05m"`` (or ``"12m"`` below one hour)."""
    if seconds is None:
        return "-"
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def format_amount(amount: float | None, kind: HistoryKind) -> str:
    if amount is None:
        return "-"
    unit = "ml" if kind is HistoryKind.DRINKING else "g"
    return f"{amount:.1f} {unit}"


def _format_since(since: str | None) -> str:
    if not since:
        return "-"
    try:
        moment = datetime.fromisoformat(since.replace("Z", "+00:00"))
    except ValueError:
        return since
    return moment.astimezone().strftime("%Y-%m-%d %H:%M")


def _format_curfew(device: Device) -> str:
    curfew = device.curfew
    if curfew is None or not curfew.enabled:
        return "off"
    return f"{curfew.lock_time} - {curfew.unlock_time}"


def _format_online(online: bool | None) -> str:
    if online is None:
        return "-"
    return "[green]yes[/green]" if online else "[red]no[/red]"


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def to_jsonable(value: Any) -> Any:
    """Convert payload dataclasses, enums and datetimes to JSON types."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: to_jsonable(getattr(value, field.name))
            for field in dataclasses.fields(value)
            if field.repr
        }
    if isinstance(value, Enum):
        return value.label if hasattr(value, "label") else value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    return value


def error_to_dict(error: SurePetError) -> dict[str, Any]:
    body: dict[str, Any] = {
        "kind": error.kind,
        "message": error.message,
        "hint": error.hint,
    }
    if isinstance(error, ApiError):
        body["status_code"] = error.status_code
        body["reason"] = error.reason
    if isinstance(error, AmbiguousError):
        body["candidates"] = [{"id": ident, "name": name} for ident, name in error.candidates]
    return body


def _emit_json(document: dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(document, indent=2, ensure_ascii=False) + "\n")


# ---------------------------------------------------------------------------
# Rich rendering
# ---------------------------------------------------------------------------

def _render_pets(pets: Sequence[Pet]) -> None:
    if not pets:
        console.print("[yellow]No pets found.[/yellow]")
        return

    table = _import_rich_table()(
        title="Pets",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("Name", style="bold", min_width=10)
    table.add_column("ID", style="dim")
    table.add_column("Location", min_width=8)
    table.add_column("Since", min_width=16)
    table.add_column("Class", min_width=7)

    for pet in pets:
        table.add_row(
            escape_markup(pet.name),
            escape_markup(pet.id),
            _LOCATION_STYLE[pet.location],
            escape_markup(_format_since(pet.location_since)),
            pet.pet_class.label,
        )
    console.print(table)


def _render_devices(devices: Sequence[Device]) -> None:
    if not devices:
        console.print("[yellow]No devices found.[/yellow]")
        return

    table = _import_rich_table()(
        title="Devices",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("Name", style="bold", min_width=10)
    table.add_column("ID", style="dim")
    table.add_column("Lock mode", min_width=9)
    table.add_column("Curfew", min_width=13)
    table.add_column("Battery", justify="right")
    table.add_column("Online", justify="center")

    for device in devices:
        table.add_row(
            escape_markup(device.name),
            escape_markup(device.id),
            device.lock_mode.label if device.lock_mode is not None else "-",
            _format_curfew(device),
            f"{device.battery:.2f}" if device.battery is not None else "-",
            _format_online(device.online),
        )
    console.print(table)


def _render_history(report: HistoryReport) -> None:
    title = (
        f"{report.kind.value.capitalize()} history for {escape_markup(report.pet.name)} "
        f"({report.range.start:%Y-%m-%d} to {report.range.end:%Y-%m-%d})"
    )
    if not report.records:
        console.print(f"[yellow]No {report.kind.value} records in this range.[/yellow]")
        return

    table = _import_rich_table()(
        title=title,
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("Date", min_width=10)
    if report.kind is HistoryKind.ACTIVITY:
        table.add_column("Time outside", justify="right")
    else:
        table.add_column("Consumed", justify="right")
    table.add_column("Device", style="dim")

    for record in report.records:
        value = (
            format_duration(record.duration_seconds)
            if report.kind is HistoryKind.ACTIVITY
            else format_amount(record.amount, report.kind)
        )
        table.add_row(f"{record.at:%Y-%m-%d}", value, escape_markup(record.device_id or "-"))
    console.print(table)


def _render_payload(command: str, payload: Any) -> None:
    if isinstance(payload, MutationReceipt):
        console.print(f"[bold green]✓[/bold green] {escape_markup(payload.detail)}")
    elif isinstance(payload, HistoryReport):
        _render_history(payload)
    elif command in ("status", "search-devices"):
        _render_devices(payload)
    elif command == "list":
        _render_pets(payload)
    else:
        console.print(escape_markup(payload))


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def render_error(error: SurePetError, *, as_json: bool, command: str | None = None) -> int:
    """Render *error* and return :data:`exit_codes.GENERAL_ERROR`."""
    if as_json:
        _emit_json({"ok": False, "command": command, "error": error_to_dict(error)})
        return exit_codes.GENERAL_ERROR

    err_console.print(f"[bold red]Error:[/bold red] {escape_markup(error)}")
    if isinstance(error, ApiError) and error.status_code is not None:
        reason = f" {escape_markup(error.reason)}" if error.reason else ""
        err_console.print(f"[dim]HTTP {error.status_code}{reason}[/dim]")
    if error.hint:
        err_console.print(f"[yellow]Hint:[/yellow] {escape_markup(error.hint)}")
    return exit_codes.GENERAL_ERROR


def render_result(result: CommandResult, *, as_json: bool) -> int:
    """Present a dispatcher outcome and return the process exit code."""
    if isinstance(result, CommandFailure):
        return render_error(result.error, as_json=as_json, command=result.command)

    if as_json:
        _emit_json({"ok": True, "command": result.command, "data": to_jsonable(result.payload)})
    else:
        _render_payload(result.command, result.payload)
    return exit_codes.SUCCESS
