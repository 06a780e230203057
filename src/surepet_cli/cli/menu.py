"""Interactive menu — the no-argument front end.

Loops over a questionary selector, builds one
:class:`~surepet_cli.core.dispatcher.CommandRequest` per pick and hands
it to the same dispatcher the direct commands use.  Pet and device
pickers are fed by the ``list`` / ``status`` commands, so the chosen
target is always an exact ID.

All display-related logic lives here or in :mod:`surepet_cli.cli.render`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from surepet_cli.cli import exit_codes
from surepet_cli.cli.console import console
from surepet_cli.cli.prompts import import_questionary
from surepet_cli.cli.render import render_result
from surepet_cli.core.dispatcher import (
    CLASS_COMMANDS,
    HISTORY_COMMANDS,
    LOCK_COMMANDS,
    CommandDispatcher,
    CommandFailure,
    CommandRequest,
)
from surepet_cli.core.models import ExportFormat
from surepet_cli.core.params import SORT_KEYS
from surepet_cli.core.range_parser import ACCEPTED_FORMS

EXIT: str = "exit"
DISABLE_CURFEW: str = "disable-curfew"

MENU_ENTRIES: tuple[tuple[str, str], ...] = (
    ("Show device status", "status"),
    ("List pets", "list"),
    ("Set pet location", "set-location"),
    ("Mark pet as indoor", "set-indoor"),
    ("Mark pet as outdoor", "set-outdoor"),
    ("Lock flap", "lock"),
    ("Unlock flap", "unlock"),
    ("Keep pets in", "lock-in"),
    ("Keep pets out", "lock-out"),
    ("Set curfew", "set-curfew"),
    ("Disable curfew", DISABLE_CURFEW),
    ("Feeding history", "feeding-history"),
    ("Drinking history", "drinking-history"),
    ("Activity history", "activity-history"),
    ("Export data", "export"),
    ("Log out", "logout"),
    ("Exit", EXIT),
)

_PET_COMMANDS = {"set-location", *CLASS_COMMANDS, *HISTORY_COMMANDS}
_DEVICE_COMMANDS = {"set-curfew", DISABLE_CURFEW, *LOCK_COMMANDS}


class MenuCancelled(Exception):
    """Internal signal: the user backed out of a sub-prompt."""


def _ask(question: Any) -> Any:
    answer = question.ask()  # None on Ctrl+C / Esc
    if answer is None:
        raise MenuCancelled
    return answer


# ---------------------------------------------------------------------------
# Pickers
# ---------------------------------------------------------------------------

def _pick(
    questionary: Any,
    dispatcher: CommandDispatcher,
    command: str,
    label: str,
    *,
    as_json: bool,
) -> str:
    """Offer the entities returned by *command* and return the chosen ID."""
    result = dispatcher.dispatch(CommandRequest(command))
    if isinstance(result, CommandFailure):
        render_result(result, as_json=as_json)
        raise MenuCancelled

    entities: Sequence[Any] = result.payload
    if not entities:
        console.print(f"[yellow]No {label}s on this account.[/yellow]")
        raise MenuCancelled

    choices = [
        questionary.Choice(title=f"{entity.name}  ({entity.id})", value=entity.id)
        for entity in entities
    ]
    return _ask(questionary.select(f"Select {label}:", choices=choices, use_arrow_keys=True))


# ---------------------------------------------------------------------------
# Request builders
# ---------------------------------------------------------------------------

def build_request(
    questionary: Any,
    dispatcher: CommandDispatcher,
    command: str,
    *,
    as_json: bool = False,
) -> CommandRequest:
    """Collect the parameters *command* needs and return the request.

    Raises
    ------
    MenuCancelled
        When the user cancels a prompt or a picker cannot be filled.
    """
    target: str | None = None
    if command in _PET_COMMANDS:
        target = _pick(questionary, dispatcher, "list", "pet", as_json=as_json)
    elif command in _DEVICE_COMMANDS:
        target = _pick(questionary, dispatcher, "status", "device", as_json=as_json)

    if command == "list":
        sort = _ask(questionary.select("Sort by:", choices=list(SORT_KEYS)))
        return CommandRequest("list", options={"sort": sort})

    if command == "set-location":
        location = _ask(questionary.select("New location:", choices=["inside", "outside"]))
        return CommandRequest(command, target=target, options={"location": location})

    if command == DISABLE_CURFEW:
        return CommandRequest("set-curfew", target=target, options={"disable": True})

    if command == "set-curfew":
        lock_time = _ask(questionary.text("Lock time (HH:MM):", default="22:00"))
        unlock_time = _ask(questionary.text("Unlock time (HH:MM):", default="06:00"))
        return CommandRequest(
            command,
            target=target,
            options={"lock_time": lock_time, "unlock_time": unlock_time},
        )

    if command in HISTORY_COMMANDS:
        range_expr = _ask(
            questionary.text(f"Range ({ACCEPTED_FORMS}):", default="week")
        )
        return CommandRequest(command, target=target, range_expr=range_expr)

    if command == "export":
        fmt = _ask(questionary.select("Format:", choices=[option.value for option in ExportFormat]))
        range_expr = _ask(
            questionary.text(f"History range ({ACCEPTED_FORMS}):", default="month")
        )
        return CommandRequest(command, range_expr=range_expr, options={"format": fmt})

    return CommandRequest(command, target=target)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_menu(
    dispatcher: CommandDispatcher,
    *,
    as_json: bool = False,
    questionary: Any = None,
) -> int:
    """Run the menu until the user exits.

    Failed commands are rendered and the loop continues; the menu
    itself always exits with :data:`exit_codes.SUCCESS`.
    """
    if questionary is None:
        questionary = import_questionary()

    choices = [questionary.Choice(title=title, value=value) for title, value in MENU_ENTRIES]

    while True:
        command = questionary.select(
            "What would you like to do?",
            choices=choices,
            use_arrow_keys=True,
            use_shortcuts=False,
        ).ask()
        if command is None or command == EXIT:
            return exit_codes.SUCCESS

        try:
            request = build_request(questionary, dispatcher, command, as_json=as_json)
        except MenuCancelled:
            continue

        render_result(dispatcher.dispatch(request), as_json=as_json)
        console.print()
