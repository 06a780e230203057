"""CLI application entry point and command routing for surepet-cli.

This module is the **sole error boundary** for the entire application.
It catches :class:`~surepet_cli.exceptions.SurePetError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich (or JSON under ``--json``) and returning
well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — every command is turned into a
  :class:`~surepet_cli.core.dispatcher.CommandRequest` and handed to the
  dispatcher.
* ``print()`` is forbidden outside the CLI layer; Rich console is used
  exclusively.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from surepet_cli.cli import exit_codes
from surepet_cli.cli.console import configure_logging, err_console, escape_markup
from surepet_cli.config import Settings, load_settings
from surepet_cli.core.dispatcher import (
    CLASS_COMMANDS,
    HISTORY_COMMANDS,
    LOCK_COMMANDS,
    CommandDispatcher,
    CommandRequest,
)
from surepet_cli.core.device_listing import DEVICE_TYPES
from surepet_cli.core.models import ExportFormat, ExportKind
from surepet_cli.core.range_parser import ACCEPTED_FORMS
from surepet_cli.core.session_store import SessionStore
from surepet_cli.exceptions import SurePetError
from surepet_cli.infra.export_file import ExportFile
from surepet_cli.infra.surehub_client import SureHubClient
from surepet_cli.infra.token_file import TokenFile
from surepet_cli.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Without a sub-command the interactive menu starts.
    """
    parser = argparse.ArgumentParser(
        prog="surepet",
        description="Command-line client for SureHub pet flaps and feeders.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results and errors as JSON.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log request flow to stderr.",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    sub.add_parser("status", help="Show devices with lock mode and curfew.")

    list_parser = sub.add_parser("list", help="List pets and where they are.")
    list_parser.add_argument("--name", help="Only pets whose name contains this text.")
    list_parser.add_argument("--location", help="Only pets inside or outside.")
    list_parser.add_argument(
        "--sort",
        default="name",
        help="Sort by name, activity or location (default: name).",
    )
    list_parser.add_argument(
        "--active-since",
        metavar="HOURS",
        default=None,
        help="Only pets that moved within the last HOURS hours.",
    )

    search_parser = sub.add_parser("search-devices", help="Find devices by name, type, status or battery.")
    search_parser.add_argument("--name", help="Only devices whose name contains this text.")
    search_parser.add_argument(
        "--type",
        dest="device_type",
        help=f"Device type: {', '.join(DEVICE_TYPES)} (or a name fragment).",
    )
    search_parser.add_argument("--online", metavar="yes|no", help="Only online or offline devices.")
    search_parser.add_argument(
        "--min-battery",
        metavar="PERCENT",
        help="Only devices with at least this battery level.",
    )

    location_parser = sub.add_parser("set-location", help="Set where a pet is.")
    location_parser.add_argument("pet", help="Pet name or ID.")
    location_parser.add_argument("location", help="inside|in|1 or outside|out|2.")

    for command, pet_class in CLASS_COMMANDS.items():
        class_parser = sub.add_parser(command, help=f"Mark a pet as {pet_class.label}.")
        class_parser.add_argument("pet", help="Pet name or ID.")

    for command in LOCK_COMMANDS:
        lock_parser = sub.add_parser(command, help=f"Set a flap to '{command}'.")
        lock_parser.add_argument("device", help="Device name or ID.")

    curfew_parser = sub.add_parser("set-curfew", help="Set or disable a flap curfew.")
    curfew_parser.add_argument("device", help="Device name or ID.")
    curfew_parser.add_argument("lock_time", nargs="?", help="Lock time, HH:MM.")
    curfew_parser.add_argument("unlock_time", nargs="?", help="Unlock time, HH:MM.")
    curfew_parser.add_argument("--disable", action="store_true", help="Disable the curfew.")

    for command, kind in HISTORY_COMMANDS.items():
        history_parser = sub.add_parser(command, help=f"Show {kind.value} history for a pet.")
        history_parser.add_argument("pet", help="Pet name or ID.")
        history_parser.add_argument(
            "--range",
            dest="range_expr",
            default=None,
            help=f"{ACCEPTED_FORMS} (default: week).",
        )

    export_parser = sub.add_parser("export", help="Export pets, devices and history to CSV or JSON.")
    export_parser.add_argument(
        "--format",
        dest="export_format",
        choices=[fmt.value for fmt in ExportFormat],
        default="csv",
        help="Output format (default: csv).",
    )
    export_parser.add_argument(
        "--types",
        default=None,
        help="Comma-separated datasets: "
        + ",".join(kind.value for kind in ExportKind)
        + " (default: all).",
    )
    export_parser.add_argument(
        "--range",
        dest="range_expr",
        default=None,
        help=f"History window, {ACCEPTED_FORMS} (default: month).",
    )
    export_parser.add_argument("--output", help="File to write (default: a dated name in the current directory).")

    sub.add_parser("logout", help="Delete the saved authentication token.")
    sub.add_parser("doctor", help="Show environment diagnostics.")

    return parser


def _request_from_args(args: argparse.Namespace) -> CommandRequest:
    """Translate parsed arguments into a dispatcher request."""
    command: str = args.command

    if command == "list":
        return CommandRequest(
            command,
            options={
                "name": args.name,
                "location": args.location,
                "sort": args.sort,
                "active_since": args.active_since,
            },
        )
    if command == "search-devices":
        return CommandRequest(
            command,
            options={
                "name": args.name,
                "device_type": args.device_type,
                "online": args.online,
                "min_battery": args.min_battery,
            },
        )
    if command == "export":
        return CommandRequest(
            command,
            range_expr=args.range_expr,
            options={"format": args.export_format, "types": args.types, "output": args.output},
        )
    if command == "set-location":
        return CommandRequest(command, target=args.pet, options={"location": args.location})
    if command in CLASS_COMMANDS:
        return CommandRequest(command, target=args.pet)
    if command in LOCK_COMMANDS:
        return CommandRequest(command, target=args.device)
    if command == "set-curfew":
        return CommandRequest(
            command,
            target=args.device,
            options={
                "lock_time": args.lock_time,
                "unlock_time": args.unlock_time,
                "disable": args.disable,
            },
        )
    if command in HISTORY_COMMANDS:
        return CommandRequest(command, target=args.pet, range_expr=args.range_expr)
    return CommandRequest(command)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def _open_client(settings: Settings) -> SureHubClient:
    """Create the root API client; patched in tests."""
    return SureHubClient(settings)


def _handle_doctor(settings: Settings) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from surepet_cli.cli.doctor import run_doctor

    return run_doctor(settings)


def _handle_dispatch(args: argparse.Namespace, settings: Settings) -> int:
    """Run one direct command, or the interactive menu when none is given."""
    from surepet_cli.cli.prompts import QuestionaryLogin
    from surepet_cli.cli.render import render_result

    with _open_client(settings) as client:
        store = SessionStore(
            environ=os.environ,
            storage=TokenFile(settings.token_file),
            login=QuestionaryLogin(client),
        )
        dispatcher = CommandDispatcher(store, client.bind, exporter=ExportFile())

        if args.command is None:
            from surepet_cli.cli.menu import run_menu

            return run_menu(dispatcher, as_json=args.json)

        result = dispatcher.dispatch(_request_from_args(args))
        return render_result(result, as_json=args.json)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the surepet CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    settings = load_settings()
    logger.debug("API base URL: %s", settings.base_url)

    if args.command == "doctor":
        return _handle_doctor(settings)

    return _handle_dispatch(args, settings)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    as_json = "--json" in sys.argv[1:]
    try:
        code = main()
        sys.exit(code)
    except SurePetError as exc:
        from surepet_cli.cli.render import render_error

        sys.exit(render_error(exc, as_json=as_json))
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        err_console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape_markup(exc)}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
