"""Tests for the interactive login prompt (cli/prompts.py).

questionary is mocked; stdin TTY state is faked.
"""

from __future__ import annotations

import io
from unittest.mock import MagicMock, patch

import pytest

from surepet_cli.cli.prompts import QuestionaryLogin, prompt_credentials
from surepet_cli.exceptions import AuthError, TransportError


class _Tty(io.StringIO):
    def isatty(self) -> bool:
        return True


def _questionary(email: str | None, password: str | None) -> MagicMock:
    questionary = MagicMock()
    questionary.text.return_value.ask.return_value = email
    questionary.password.return_value.ask.return_value = password
    return questionary


# ---------------------------------------------------------------------------
# prompt_credentials
# ---------------------------------------------------------------------------

class TestPromptCredentials:
    def test_refuses_non_tty(self) -> None:
        with pytest.raises(AuthError) as exc_info:
            prompt_credentials(io.StringIO())
        assert "SUREHUB_TOKEN" in (exc_info.value.hint or "")

    @patch("surepet_cli.cli.prompts.import_questionary")
    def test_returns_stripped_email(self, mock_import: MagicMock) -> None:
        mock_import.return_value = _questionary(" me@example.com ", "pw")
        assert prompt_credentials(_Tty()) == ("me@example.com", "pw")

    @patch("surepet_cli.cli.prompts.import_questionary")
    def test_cancelled_email(self, mock_import: MagicMock) -> None:
        mock_import.return_value = _questionary(None, "pw")
        with pytest.raises(AuthError, match="cancelled"):
            prompt_credentials(_Tty())

    @patch("surepet_cli.cli.prompts.import_questionary")
    def test_empty_password(self, mock_import: MagicMock) -> None:
        mock_import.return_value = _questionary("me@example.com", "")
        with pytest.raises(AuthError):
            prompt_credentials(_Tty())


# ---------------------------------------------------------------------------
# QuestionaryLogin
# ---------------------------------------------------------------------------

class TestQuestionaryLogin:
    @patch("surepet_cli.cli.prompts.import_questionary")
    def test_exchanges_credentials(self, mock_import: MagicMock) -> None:
        mock_import.return_value = _questionary("me@example.com", "pw")
        client = MagicMock()
        client.login.return_value = "token"

        assert QuestionaryLogin(client, stdin=_Tty())() == "token"
        client.login.assert_called_once_with("me@example.com", "pw")

    @patch("surepet_cli.cli.prompts.import_questionary")
    def test_transport_failure_becomes_auth_error(self, mock_import: MagicMock) -> None:
        mock_import.return_value = _questionary("me@example.com", "pw")
        client = MagicMock()
        client.login.side_effect = TransportError("Request to SureHub timed out.", hint="retry")

        with pytest.raises(AuthError, match="timed out") as exc_info:
            QuestionaryLogin(client, stdin=_Tty())()
        assert exc_info.value.hint == "retry"

    def test_non_tty_never_calls_api(self) -> None:
        client = MagicMock()
        with pytest.raises(AuthError):
            QuestionaryLogin(client, stdin=io.StringIO())()
        client.login.assert_not_called()
