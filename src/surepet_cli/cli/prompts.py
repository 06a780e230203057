"""Interactive login prompt for the CLI layer.

Collects the SureHub email and password with questionary and exchanges
them for a bearer token.  Satisfies
:class:`~surepet_cli.core.protocols.InteractiveLogin`.

Prompting is refused when stdin is not a terminal so scripts and CI
fail fast with a hint instead of hanging.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Protocol, TextIO

from surepet_cli.cli.console import err_console
from surepet_cli.core.session_store import TOKEN_ENV
from surepet_cli.exceptions import ApiError, AuthError, EnvironmentError

logger = logging.getLogger(__name__)


def import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


class TokenExchange(Protocol):
    def login(self, email: str, password: str) -> str:
        ...  # pragma: no cover


def prompt_credentials(stdin: TextIO | None = None) -> tuple[str, str]:
    """Ask for email and password.

    Raises
    ------
    AuthError
        When stdin is not interactive or the user cancels / leaves a
        field empty.
    """
    stream = stdin if stdin is not None else sys.stdin
    if not stream.isatty():
        raise AuthError(
            "Not logged in and no terminal available for interactive login.",
            hint=f"Set the {TOKEN_ENV} environment variable.",
        )

    questionary = import_questionary()
    err_console.print("[bold]Log in to SureHub[/bold]")

    email: str | None = questionary.text("Email address:").ask()
    if not email or not email.strip():
        raise AuthError("Login cancelled.", hint="An email address is required.")

    password: str | None = questionary.password("Password:").ask()
    if not password:
        raise AuthError("Login cancelled.", hint="A password is required.")

    return email.strip(), password


class QuestionaryLogin:
    """Prompt, then exchange credentials through *client*.

    Parameters
    ----------
    client:
        Anything with ``login(email, password) -> token``; in practice
        the unauthenticated :class:`~surepet_cli.infra.SureHubClient`.
    stdin:
        Stream checked for a TTY; defaults to ``sys.stdin``.
    """

    def __init__(self, client: TokenExchange, *, stdin: TextIO | None = None) -> None:
        self._client = client
        self._stdin = stdin

    def __call__(self) -> str:
        email, password = prompt_credentials(self._stdin)
        logger.debug("Exchanging credentials for %s", email)
        try:
            token = self._client.login(email, password)
        except AuthError:
            raise
        except ApiError as exc:
            raise AuthError(f"Login failed: {exc}", hint=exc.hint) from exc
        err_console.print("[green]Logged in.[/green]")
        return token
