"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters and the CLI
layer must satisfy.  Core code depends ONLY on these protocols — never
on concrete implementations — preserving the dependency inversion
principle.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from surepet_cli.core.models import (
    Credential,
    Device,
    ExportBundle,
    ExportFormat,
    HistoryKind,
    HistoryRecord,
    Location,
    LockMode,
    Pet,
    PetClass,
    RangeSpec,
)


class ApiSession(Protocol):
    """Typed call surface of an authenticated SureHub connection.

    Every method takes already-resolved identifiers, never raw user
    text.  Implementations must map all transport exceptions to
    :class:`~surepet_cli.exceptions.ApiError` subclasses; an expired or
    refused token surfaces as
    :class:`~surepet_cli.exceptions.AuthRejectedError`.
    """

    def list_pets(self) -> Sequence[Pet]:
        ...  # pragma: no cover

    def list_devices(self) -> Sequence[Device]:
        ...  # pragma: no cover

    def set_pet_location(self, pet_id: str, location: Location) -> None:
        ...  # pragma: no cover

    def set_pet_class(
        self,
        pet_id: str,
        pet_class: PetClass,
        *,
        tag_id: str,
        flap_id: str,
    ) -> None:
        """Store *pet_class* on the tag profile of *pet_id* at *flap_id*."""
        ...  # pragma: no cover

    def set_lock_mode(self, device_id: str, mode: LockMode) -> None:
        ...  # pragma: no cover

    def set_curfew(self, device_id: str, lock_time: str, unlock_time: str) -> None:
        ...  # pragma: no cover

    def disable_curfew(self, device_id: str) -> None:
        ...  # pragma: no cover

    def get_history(
        self,
        pet_id: str,
        kind: HistoryKind,
        window: RangeSpec,
    ) -> Sequence[HistoryRecord]:
        """Return records of *kind* inside *window*, newest first."""
        ...  # pragma: no cover


class SessionFactory(Protocol):
    """Build an :class:`ApiSession` bound to *credential*."""

    def __call__(self, credential: Credential) -> ApiSession:
        ...  # pragma: no cover


class TokenStorage(Protocol):
    """Persistence for the single bearer token between runs."""

    def read(self) -> str | None:
        """Return the stored token, or ``None`` when absent or blank."""
        ...  # pragma: no cover

    def write(self, token: str) -> None:
        """Overwrite any previous token with *token*."""
        ...  # pragma: no cover

    def delete(self) -> None:
        """Remove the stored token.  Absent storage is not an error."""
        ...  # pragma: no cover


class InteractiveLogin(Protocol):
    """Prompt the user for credentials and exchange them for a token.

    Raises
    ------
    AuthError
        When the user declines, input is unavailable, or the exchange
        is refused.
    """

    def __call__(self) -> str:
        ...  # pragma: no cover


class ExportWriter(Protocol):
    """Write an :class:`ExportBundle` to disk.

    Raises
    ------
    ExportError
        When the file cannot be written.
    InvalidInputError
        When the bundle holds nothing the format can express.
    """

    def write(self, bundle: ExportBundle, fmt: ExportFormat, path: Path | None) -> Path:
        """Return the path actually written; ``None`` picks a default name."""
        ...  # pragma: no cover
