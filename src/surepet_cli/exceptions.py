"""Custom exception hierarchy for surepet-cli.

All exceptions that cross layer boundaries must inherit from
:class:`SurePetError`.  Raw third-party exceptions (e.g. from httpx)
must NEVER propagate beyond the infrastructure layer — they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
SurePetError
├── AuthError
├── NotFoundError
├── AmbiguousError
├── RangeParseError
├── InvalidInputError
├── ApiError
│   ├── AuthRejectedError
│   ├── TransportError
│   ├── ApiValidationError
│   └── MalformedResponseError
├── ConfigurationError
├── ExportError
└── EnvironmentError
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar


class SurePetError(Exception):
    """Base exception for all surepet-cli errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    kind: ClassVar[str] = "error"
    """Stable machine-readable tag used by the JSON output mode."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""

    @property
    def message(self) -> str:
        return str(self)


# --- Authentication --------------------------------------------------------

class AuthError(SurePetError):
    """Raised when no usable credential can be obtained."""

    kind = "auth"


# --- Name / ID resolution --------------------------------------------------

class NotFoundError(SurePetError):
    """Raised when a query matches no pet or device."""

    kind = "not_found"

    def __init__(self, query: str, entity: str = "pet or device") -> None:
        super().__init__(
            f"No {entity} found with name or ID '{query}'.",
            hint="Check the spelling, or pass the ID shown by 'list' or 'status'.",
        )
        self.query: str = query
        self.entity: str = entity


class AmbiguousError(SurePetError):
    """Raised when a query matches more than one pet or device.

    The message enumerates every candidate as ``name (ID: id)`` so the
    user can retry with the ID or a longer substring.
    """

    kind = "ambiguous"

    def __init__(
        self,
        query: str,
        candidates: Sequence[tuple[str, str]],
        entity: str = "pet or device",
    ) -> None:
        listing = ", ".join(f"{name} (ID: {ident})" for ident, name in candidates)
        super().__init__(
            f"Multiple {entity}s match '{query}': {listing}.",
            hint=f"Be more specific or use the {entity} ID.",
        )
        self.query: str = query
        self.entity: str = entity
        self.candidates: tuple[tuple[str, str], ...] = tuple(candidates)
        """``(id, name)`` pairs in candidate-set order."""


# --- Input validation ------------------------------------------------------

class RangeParseError(SurePetError):
    """Raised when a history range expression cannot be parsed."""

    kind = "range"


class InvalidInputError(SurePetError):
    """Raised when a command parameter fails validation."""

    kind = "invalid_input"


# --- Vendor API ------------------------------------------------------------

class ApiError(SurePetError):
    """Raised when the vendor API call fails.

    Carries the HTTP status (when one was received) and the reason
    phrase so the presentation layer can surface both.
    """

    kind = "api"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reason: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code: int | None = status_code
        self.reason: str | None = reason


class AuthRejectedError(ApiError):
    """Raised when the API refuses the bearer token (HTTP 401/403)."""

    kind = "auth_rejected"


class TransportError(ApiError):
    """Raised on timeouts, DNS failures and refused connections."""

    kind = "transport"


class ApiValidationError(ApiError):
    """Raised when the API rejects the request payload (other 4xx)."""

    kind = "api_validation"


class MalformedResponseError(ApiError):
    """Raised when a response body is not the JSON shape we expect."""

    kind = "malformed_response"


# --- Configuration ---------------------------------------------------------

class ConfigurationError(SurePetError):
    """Raised when settings from the environment or .env file are invalid."""

    kind = "config"


# --- Export ----------------------------------------------------------------

class ExportError(SurePetError):
    """Raised when an export file cannot be written."""

    kind = "export"


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(SurePetError):
    """Raised when a required runtime dependency is not available."""

    kind = "environment"
