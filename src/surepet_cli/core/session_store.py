"""Credential lifecycle — lookup order, persistence, invalidation.

The store is an ordered chain of strategies, each a callable returning a
:class:`Credential` or ``None``.  :meth:`SessionStore.acquire` takes the
first hit and keeps it for the rest of the process run:

1. environment variable (``SUREHUB_TOKEN``), used as-is when non-empty;
2. persisted token file, when present and non-empty;
3. interactive login, the only step that touches the network; on
   success the token overwrites the persisted file.

Filesystem and prompt access go through the injected
:class:`~surepet_cli.core.protocols.TokenStorage` and
:class:`~surepet_cli.core.protocols.InteractiveLogin`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from surepet_cli.core.models import Credential, CredentialSource
from surepet_cli.core.protocols import InteractiveLogin, TokenStorage
from surepet_cli.exceptions import AuthError

logger = logging.getLogger(__name__)

TOKEN_ENV: str = "SUREHUB_TOKEN"

Strategy = Callable[[], Credential | None]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def from_environment(environ: Mapping[str, str], name: str = TOKEN_ENV) -> Strategy:
    def lookup() -> Credential | None:
        token = environ.get(name, "").strip()
        if not token:
            return None
        logger.debug("%s found in environment", name)
        return Credential(token, CredentialSource.ENVIRONMENT)

    return lookup


def from_storage(storage: TokenStorage) -> Strategy:
    def lookup() -> Credential | None:
        token = storage.read()
        if not token:
            return None
        logger.debug("Using persisted token")
        return Credential(token, CredentialSource.PERSISTED)

    return lookup


def from_interactive_login(login: InteractiveLogin, storage: TokenStorage) -> Strategy:
    """Prompt, exchange, then persist — nothing is written on failure."""

    def lookup() -> Credential | None:
        token = login().strip()
        if not token:
            raise AuthError("Login succeeded but the API returned an empty token.")
        try:
            storage.write(token)
        except OSError as exc:
            logger.warning("Could not save token, next run will ask again: %s", exc)
        return Credential(token, CredentialSource.INTERACTIVE)

    return lookup


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class SessionStore:
    """Owns the single :class:`Credential` of a process run.

    Parameters
    ----------
    environ:
        Environment mapping, usually ``os.environ``.
    storage:
        Persisted-token backend.
    login:
        Interactive login collaborator, or ``None`` when prompting is not
        possible (scripts, CI); acquisition then stops after step 2.
    """

    def __init__(
        self,
        *,
        environ: Mapping[str, str],
        storage: TokenStorage,
        login: InteractiveLogin | None = None,
    ) -> None:
        self._storage: TokenStorage = storage
        self._interactive: Strategy | None = (
            from_interactive_login(login, storage) if login is not None else None
        )
        self._strategies: Sequence[Strategy] = [
            from_environment(environ),
            from_storage(storage),
            *([self._interactive] if self._interactive is not None else []),
        ]
        self._credential: Credential | None = None

    @property
    def current(self) -> Credential | None:
        return self._credential

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def acquire(self) -> Credential:
        """Return the run's credential, walking the chain on first use.

        Raises
        ------
        AuthError
            When every strategy comes up empty or interactive login fails.
        """
        if self._credential is not None:
            return self._credential

        for strategy in self._strategies:
            credential = strategy()
            if credential is not None:
                logger.debug("Credential acquired from %s", credential.source.value)
                self._credential = credential
                return credential

        raise AuthError(
            "No authentication token found.",
            hint=f"Set the {TOKEN_ENV} environment variable or run 'surepet' interactively to log in.",
        )

    def reauthenticate(self) -> Credential:
        """Drop the rejected credential and log in again (step 3 only).

        The token file is cleared only when it holds the rejected token;
        a rejected $SUREHUB_TOKEN leaves a saved token in place.

        Raises
        ------
        AuthError
            When interactive login is unavailable or fails.
        """
        rejected = self._credential
        logger.debug("Discarding rejected credential")
        self._credential = None
        if rejected is None or rejected.source is not CredentialSource.ENVIRONMENT:
            self._storage.delete()

        if self._interactive is None:
            raise AuthError(
                "Authentication token has expired or is invalid.",
                hint=f"Set a fresh {TOKEN_ENV} or log in interactively.",
            )

        credential = self._interactive()
        if credential is None:  # pragma: no cover - strategy always returns or raises
            raise AuthError("Re-authentication failed.")
        self._credential = credential
        return credential

    def logout(self) -> None:
        """Delete the persisted token.  Idempotent."""
        self._credential = None
        self._storage.delete()
