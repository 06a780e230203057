"""Tests for the interactive menu (cli/menu.py).

questionary is replaced by a MagicMock whose prompts answer from a
queue; the dispatcher is a MagicMock returning canned results.
"""

from __future__ import annotations

from collections.abc import Iterable
from unittest.mock import MagicMock

import pytest

from surepet_cli.cli import exit_codes
from surepet_cli.cli.menu import DISABLE_CURFEW, EXIT, MenuCancelled, build_request, run_menu
from surepet_cli.core.dispatcher import CommandFailure, CommandRequest, CommandSuccess
from surepet_cli.core.models import Device, MutationReceipt, Pet
from surepet_cli.exceptions import AuthError


def _questionary(answers: Iterable[object]) -> MagicMock:
    """Every ``select``/``text`` prompt answers with the next queued value."""
    queue = list(answers)
    questionary = MagicMock()

    def prompt(*_args: object, **_kwargs: object) -> MagicMock:
        question = MagicMock()
        question.ask.return_value = queue.pop(0)
        return question

    questionary.select.side_effect = prompt
    questionary.text.side_effect = prompt
    return questionary


def _dispatcher(pets: list[Pet], devices: list[Device]) -> MagicMock:
    dispatcher = MagicMock()

    def dispatch(request: CommandRequest) -> CommandSuccess:
        if request.command == "list":
            return CommandSuccess("list", tuple(pets))
        if request.command == "status":
            return CommandSuccess("status", tuple(devices))
        return CommandSuccess(request.command, MutationReceipt(action=request.command, detail="done"))

    dispatcher.dispatch.side_effect = dispatch
    return dispatcher


# ---------------------------------------------------------------------------
# build_request
# ---------------------------------------------------------------------------

class TestBuildRequest:
    def test_set_location_picks_pet_id(self, pets: list[Pet], devices: list[Device]) -> None:
        questionary = _questionary(["456", "outside"])
        request = build_request(questionary, _dispatcher(pets, devices), "set-location")
        assert request == CommandRequest("set-location", target="456", options={"location": "outside"})

    def test_curfew_times(self, pets: list[Pet], devices: list[Device]) -> None:
        questionary = _questionary(["20", "21:30", "07:00"])
        request = build_request(questionary, _dispatcher(pets, devices), "set-curfew")
        assert request.target == "20"
        assert request.options == {"lock_time": "21:30", "unlock_time": "07:00"}

    def test_disable_curfew(self, pets: list[Pet], devices: list[Device]) -> None:
        request = build_request(_questionary(["20"]), _dispatcher(pets, devices), DISABLE_CURFEW)
        assert request == CommandRequest("set-curfew", target="20", options={"disable": True})

    def test_history_range(self, pets: list[Pet], devices: list[Device]) -> None:
        request = build_request(_questionary(["123", "month"]), _dispatcher(pets, devices), "feeding-history")
        assert request.range_expr == "month"

    def test_export_asks_format_and_range(self, pets: list[Pet], devices: list[Device]) -> None:
        request = build_request(_questionary(["json", "week"]), _dispatcher(pets, devices), "export")
        assert request == CommandRequest("export", range_expr="week", options={"format": "json"})

    def test_status_needs_no_prompt(self, pets: list[Pet], devices: list[Device]) -> None:
        questionary = _questionary([])
        assert build_request(questionary, _dispatcher(pets, devices), "status") == CommandRequest("status")

    def test_cancelled_picker(self, pets: list[Pet], devices: list[Device]) -> None:
        with pytest.raises(MenuCancelled):
            build_request(_questionary([None]), _dispatcher(pets, devices), "lock")

    def test_failed_picker_fetch(self, pets: list[Pet], devices: list[Device]) -> None:
        dispatcher = MagicMock()
        dispatcher.dispatch.return_value = CommandFailure("status", AuthError("No authentication token found."))
        with pytest.raises(MenuCancelled):
            build_request(_questionary([]), dispatcher, "unlock")

    def test_empty_account(self, devices: list[Device]) -> None:
        with pytest.raises(MenuCancelled):
            build_request(_questionary([]), _dispatcher([], devices), "set-indoor")


# ---------------------------------------------------------------------------
# run_menu
# ---------------------------------------------------------------------------

class TestRunMenu:
    def test_runs_commands_until_exit(self, pets: list[Pet], devices: list[Device]) -> None:
        dispatcher = _dispatcher(pets, devices)
        questionary = _questionary(["lock", "20", "logout", EXIT])

        assert run_menu(dispatcher, questionary=questionary) == exit_codes.SUCCESS

        commands = [call.args[0].command for call in dispatcher.dispatch.call_args_list]
        assert commands == ["status", "lock", "logout"]

    def test_escape_exits(self, pets: list[Pet], devices: list[Device]) -> None:
        dispatcher = _dispatcher(pets, devices)
        assert run_menu(dispatcher, questionary=_questionary([None])) == exit_codes.SUCCESS
        dispatcher.dispatch.assert_not_called()

    def test_cancelled_sub_prompt_returns_to_menu(self, pets: list[Pet], devices: list[Device]) -> None:
        dispatcher = _dispatcher(pets, devices)
        run_menu(dispatcher, questionary=_questionary(["unlock", None, EXIT]))
        commands = [call.args[0].command for call in dispatcher.dispatch.call_args_list]
        assert commands == ["status"]
