"""Domain models for surepet-cli.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and trivial derived properties.  They carry
zero I/O and no dependency on external packages.

Numeric enum values are the codes the SureHub API uses on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Generic, Protocol, TypeVar, Union

from surepet_cli.exceptions import RangeParseError


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class CredentialSource(str, Enum):
    """Where the bearer token of the current run came from."""

    ENVIRONMENT = "environment"
    PERSISTED = "persisted"
    INTERACTIVE = "interactive"


class Location(Enum):
    """Pet position as reported by the flap."""

    INSIDE = 1
    OUTSIDE = 2
    UNKNOWN = -1

    @property
    def label(self) -> str:
        return self.name.lower()


class LockMode(Enum):
    """Flap locking modes (``locking`` control value)."""

    UNLOCKED = 0
    LOCK_IN = 1
    LOCK_OUT = 2
    LOCKED = 3

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


class PetClass(Enum):
    """Indoor/outdoor classification stored on the pet's tag profile."""

    OUTDOOR = 2
    INDOOR = 3
    UNKNOWN = -1

    @property
    def label(self) -> str:
        return self.name.lower()


class HistoryKind(str, Enum):
    FEEDING = "feeding"
    DRINKING = "drinking"
    ACTIVITY = "activity"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class ExportKind(str, Enum):
    """Datasets the ``export`` command can write."""

    PETS = "pets"
    DEVICES = "devices"
    FEEDING = "feeding"
    DRINKING = "drinking"
    ACTIVITY = "activity"

    @property
    def history_kind(self) -> HistoryKind | None:
        try:
            return HistoryKind(self.value)
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# Credential
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Credential:
    """Bearer token plus the source that yielded it."""

    token: str = field(repr=False)
    """Opaque bearer token.  Excluded from ``repr`` so it never hits logs."""

    source: CredentialSource


# ---------------------------------------------------------------------------
# Pets and devices
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Pet:
    """Snapshot of one pet, read through from the API per invocation."""

    id: str
    name: str
    location: Location = Location.UNKNOWN
    pet_class: PetClass = PetClass.UNKNOWN
    tag_id: str | None = None
    """Microchip tag identifier; needed to change the pet class."""

    location_since: str | None = None
    """ISO-8601 timestamp of the last position change, as sent by the API."""


@dataclass(frozen=True, slots=True)
class Curfew:
    lock_time: str
    """``HH:MM`` at which the flap locks."""

    unlock_time: str
    """``HH:MM`` at which the flap unlocks."""

    enabled: bool = True


# Product codes of devices that accept lock modes and tag profiles.
FLAP_PRODUCT_IDS: frozenset[int] = frozenset({3, 6})

PRODUCT_TYPES: dict[int, str] = {
    1: "hub",
    2: "repeater",
    3: "flap",
    4: "feeder",
    6: "flap",
    7: "feeder",
    8: "fountain",
}


@dataclass(frozen=True, slots=True)
class Device:
    """Snapshot of one hub-connected device (flap, feeder, hub...)."""

    id: str
    name: str
    lock_mode: LockMode | None = None
    curfew: Curfew | None = None
    product_id: int | None = None
    battery: float | None = None
    online: bool | None = None

    @property
    def is_flap(self) -> bool:
        return self.product_id in FLAP_PRODUCT_IDS

    @property
    def device_type(self) -> str:
        if self.product_id is None:
            return "unknown"
        return PRODUCT_TYPES.get(self.product_id, "unknown")


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RangeSpec:
    """Resolved ``[start, end)`` window for history queries.

    Only the range parser constructs these; an inverted window is
    rejected at construction time.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise RangeParseError(
                f"Range start {self.start:%Y-%m-%d} is after end {self.end:%Y-%m-%d}.",
            )

    @property
    def days(self) -> int:
        """Whole days covered, rounded up, never less than one."""
        span = self.end - self.start
        whole = span.days + (1 if span % timedelta(days=1) else 0)
        return max(1, whole)

    def __contains__(self, moment: object) -> bool:
        if not isinstance(moment, datetime):
            return False
        return self.start <= moment < self.end


@dataclass(frozen=True, slots=True)
class HistoryRecord:
    """One aggregated history event tied to a pet."""

    pet_id: str
    kind: HistoryKind
    at: datetime
    amount: float | None = None
    """Consumption for feeding/drinking records (grams or millilitres)."""

    duration_seconds: int | None = None
    """Time spent outside for activity records."""

    device_id: str | None = None


# ---------------------------------------------------------------------------
# Resolution results
# ---------------------------------------------------------------------------

class Identified(Protocol):
    """Anything the resolver can match: an ``id`` and a display ``name``."""

    @property
    def id(self) -> str: ...  # pragma: no cover

    @property
    def name(self) -> str: ...  # pragma: no cover


EntityT = TypeVar("EntityT", bound=Identified)


@dataclass(frozen=True)
class UniqueMatch(Generic[EntityT]):
    entity: EntityT


@dataclass(frozen=True)
class NoMatch:
    query: str


@dataclass(frozen=True)
class AmbiguousMatch(Generic[EntityT]):
    query: str
    candidates: tuple[EntityT, ...]
    """Matching entities in the order they appeared in the candidate set."""


ResolutionResult = Union[UniqueMatch[EntityT], NoMatch, AmbiguousMatch[EntityT]]


# ---------------------------------------------------------------------------
# Command payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class MutationReceipt:
    """Confirmation of a state-changing call, handed to the presenter."""

    action: str
    detail: str
    target_id: str | None = None
    target_name: str | None = None


@dataclass(frozen=True, slots=True)
class HistoryReport:
    pet: Pet
    kind: HistoryKind
    range: RangeSpec
    records: tuple[HistoryRecord, ...]

    def __len__(self) -> int:
        return len(self.records)

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class ExportBundle:
    """Everything gathered for one ``export`` run, ready to be written."""

    kinds: tuple[ExportKind, ...]
    range: RangeSpec
    created_at: datetime
    pets: tuple[Pet, ...] = ()
    devices: tuple[Device, ...] = ()
    records: tuple[HistoryRecord, ...] = ()

    @property
    def total_records(self) -> int:
        return len(self.pets) + len(self.devices) + len(self.records)
