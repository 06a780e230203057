"""``surepet doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment satisfies surepet-cli's requirements
and where the next run would find its token.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No network calls are made.
"""

from __future__ import annotations

import os
import platform
import sys
from collections.abc import Mapping

from surepet_cli.cli import exit_codes
from surepet_cli.cli.console import console, escape_markup
from surepet_cli.config import Settings
from surepet_cli.core.session_store import TOKEN_ENV
from surepet_cli.infra.token_file import TokenFile
from surepet_cli.version import __version__


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    major, minor = sys.version_info[:2]
    ok = major >= 3 and minor >= 10
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _package_check(label: str, module: str, *, required: bool) -> tuple[str, str, str]:
    """Return (label, value, status) for an installed-package row."""
    try:
        imported = __import__(module)
    except ImportError:
        status = "[red]FAIL[/red]" if required else "[yellow]WARN[/yellow]"
        return label, "NOT INSTALLED", status
    return label, str(getattr(imported, "__version__", "unknown")), "[green]OK[/green]"


def _token_check(settings: Settings, environ: Mapping[str, str]) -> tuple[str, str, str]:
    """Return (label, value, status) for the token row.

    Mirrors the session-store lookup order without contacting the API.
    """
    if environ.get(TOKEN_ENV, "").strip():
        return "Token", f"${TOKEN_ENV}", "[green]OK[/green]"
    token_file = TokenFile(settings.token_file)
    if token_file.exists():
        return "Token", str(token_file.path), "[green]OK[/green]"
    return "Token", "not found (login required)", "[yellow]WARN[/yellow]"


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    release = platform.release()
    machine = platform.machine()
    value = f"{system_display} {release} ({machine})"
    return "OS", value, "[green]OK[/green]"


def _surepet_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the surepet-cli version row."""
    return "surepet-cli", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "WARN" in status:
        return "WARN"
    if "OK" in status:
        return "OK"
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nsurepet doctor", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<36} {'Status':<8}", file=sys.stderr)
    print("-" * 60, file=sys.stderr)
    for label, value, status in checks:
        plain_status = _status_plain(status)
        print(f"{label:<12} {value:<36} {plain_status:<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(
    settings: Settings | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = [
        _surepet_version_check(),
        _python_version_check(),
        _package_check("httpx", "httpx", required=True),
        _package_check("questionary", "questionary", required=False),
        _os_check(),
    ]
    if settings is not None:
        checks.insert(4, _token_check(settings, os.environ if environ is None else environ))

    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="surepet doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)

        for label, value, status in checks:
            table.add_row(label, escape_markup(value), status)

        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(checks)

    if has_failure:
        if rich_available:
            console.print("[bold red]Some checks failed.[/bold red]")
        else:
            print("Some checks failed.", file=sys.stderr)
        return exit_codes.GENERAL_ERROR

    if rich_available:
        console.print("[bold green]All checks passed.[/bold green]")
    else:
        print("All checks passed.", file=sys.stderr)
    return exit_codes.SUCCESS
