"""Smoke tests — verify package wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

import pytest

from surepet_cli import __version__
from surepet_cli.cli import exit_codes
from surepet_cli.cli.app import main
from surepet_cli.exceptions import (
    AmbiguousError,
    ApiError,
    ApiValidationError,
    AuthError,
    AuthRejectedError,
    ConfigurationError,
    EnvironmentError,
    InvalidInputError,
    MalformedResponseError,
    NotFoundError,
    RangeParseError,
    SurePetError,
    TransportError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            AuthError,
            NotFoundError,
            AmbiguousError,
            RangeParseError,
            InvalidInputError,
            ApiError,
            ConfigurationError,
            EnvironmentError,
        ],
    )
    def test_all_exceptions_inherit_from_base(self, exc_class: type[SurePetError]) -> None:
        assert issubclass(exc_class, SurePetError)

    @pytest.mark.parametrize(
        "exc_class",
        [AuthRejectedError, TransportError, ApiValidationError, MalformedResponseError],
    )
    def test_api_errors_inherit_from_api_error(self, exc_class: type[ApiError]) -> None:
        assert issubclass(exc_class, ApiError)

    def test_rejected_token_is_not_an_auth_error(self) -> None:
        assert not issubclass(AuthRejectedError, AuthError)

    def test_hint_is_stored(self) -> None:
        err = SurePetError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.message == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        assert SurePetError("boom").hint is None

    def test_kinds_are_unique(self) -> None:
        classes = [
            SurePetError, AuthError, NotFoundError, AmbiguousError, RangeParseError,
            InvalidInputError, ApiError, AuthRejectedError, TransportError,
            ApiValidationError, MalformedResponseError, ConfigurationError, EnvironmentError,
        ]
        kinds = [cls.kind for cls in classes]
        assert len(kinds) == len(set(kinds))


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_values(self) -> None:
        assert exit_codes.SUCCESS == 0
        assert exit_codes.GENERAL_ERROR == 1
        assert exit_codes.UNEXPECTED_ERROR == 2
        assert exit_codes.KEYBOARD_INTERRUPT == 130


# ---------------------------------------------------------------------------
# CLI wiring
# ---------------------------------------------------------------------------

class TestCliWiring:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_unknown_subcommand_is_usage_error(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["fly"])
        assert exc_info.value.code == 2
