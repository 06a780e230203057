"""Shared pytest fixtures and configuration for the surepet-cli test suite.

Guidelines
----------
* No internet access in any test.
* HTTP is exercised through ``httpx.MockTransport`` at the infra boundary.
* Core tests must be pure — no side effects.
* Tests must not depend on OS state (no real token file, no real env).
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

import pytest

from surepet_cli.core.models import (
    Curfew,
    Device,
    HistoryKind,
    HistoryRecord,
    Location,
    LockMode,
    Pet,
    PetClass,
    RangeSpec,
)
from surepet_cli.exceptions import AuthRejectedError

NOW = datetime(2024, 3, 15, 14, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------

class MemoryStorage:
    """In-memory :class:`TokenStorage` recording writes and deletes."""

    def __init__(self, token: str | None = None) -> None:
        self.token = token
        self.writes: list[str] = []
        self.deletes = 0

    def read(self) -> str | None:
        return self.token

    def write(self, token: str) -> None:
        self.writes.append(token)
        self.token = token

    def delete(self) -> None:
        self.deletes += 1
        self.token = None


class FakeLogin:
    """Interactive login returning queued tokens and counting prompts."""

    def __init__(self, *tokens: str) -> None:
        self._tokens = list(tokens)
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        return self._tokens.pop(0)


class FakeSession:
    """:class:`ApiSession` double that records every call.

    ``reject_tokens`` lists bearer tokens for which every call raises
    :class:`AuthRejectedError`.
    """

    MUTATING = (
        "set_pet_location",
        "set_pet_class",
        "set_lock_mode",
        "set_curfew",
        "disable_curfew",
    )

    def __init__(
        self,
        token: str,
        pets: Sequence[Pet],
        devices: Sequence[Device],
        calls: list[tuple],
        *,
        reject_tokens: Sequence[str] = (),
        history: Sequence[HistoryRecord] = (),
    ) -> None:
        self.token = token
        self._pets = list(pets)
        self._devices = list(devices)
        self.calls = calls
        self._reject = set(reject_tokens)
        self._history = list(history)

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, self.token, *args))
        if self.token in self._reject:
            raise AuthRejectedError("Authentication token has expired or is invalid.", status_code=401)

    def list_pets(self) -> list[Pet]:
        self._record("list_pets")
        return self._pets

    def list_devices(self) -> list[Device]:
        self._record("list_devices")
        return self._devices

    def set_pet_location(self, pet_id: str, location: Location) -> None:
        self._record("set_pet_location", pet_id, location)

    def set_pet_class(self, pet_id: str, pet_class: PetClass, *, tag_id: str, flap_id: str) -> None:
        self._record("set_pet_class", pet_id, pet_class, tag_id, flap_id)

    def set_lock_mode(self, device_id: str, mode: LockMode) -> None:
        self._record("set_lock_mode", device_id, mode)

    def set_curfew(self, device_id: str, lock_time: str, unlock_time: str) -> None:
        self._record("set_curfew", device_id, lock_time, unlock_time)

    def disable_curfew(self, device_id: str) -> None:
        self._record("disable_curfew", device_id)

    def get_history(self, pet_id: str, kind: HistoryKind, window: RangeSpec) -> list[HistoryRecord]:
        self._record("get_history", pet_id, kind, window)
        return self._history


def mutating_calls(calls: list[tuple]) -> list[tuple]:
    return [call for call in calls if call[0] in FakeSession.MUTATING]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def pets() -> list[Pet]:
    return [
        Pet(
            id="123",
            name="Fluffy",
            location=Location.INSIDE,
            pet_class=PetClass.OUTDOOR,
            tag_id="9001",
            location_since="2024-03-15T08:00:00+00:00",
        ),
        Pet(
            id="456",
            name="Flint",
            location=Location.OUTSIDE,
            pet_class=PetClass.INDOOR,
            tag_id="9002",
            location_since="2024-03-15T12:00:00+00:00",
        ),
        Pet(id="789", name="Max"),
    ]


@pytest.fixture()
def devices() -> list[Device]:
    return [
        Device(id="10", name="Hub", product_id=1, online=True),
        Device(
            id="20",
            name="Back Door Flap",
            lock_mode=LockMode.UNLOCKED,
            curfew=Curfew("22:00", "06:00"),
            product_id=6,
            battery=5.6,
            online=True,
        ),
        Device(id="30", name="Kitchen Feeder", product_id=4),
    ]


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()
