"""Command dispatcher — one validated user intent, one API operation.

Shared entry point of the interactive menu and the direct-command
front end.  Per invocation::

    Start → Validate (incl. ParseRange) → AuthAcquire
          → (FetchCandidates → Resolve)? → Execute → Present

* Parameters that need no network (location, curfew times, sort key,
  history range, export options) are validated before a credential is
  requested.
* Name-targeted commands fetch pets or devices and resolve the typed
  name; no match or several matches end the invocation before any
  mutating call.
* Exactly one mutating or history call is issued.  When the API rejects
  the token, the credential is dropped, the user logs in again and the
  pipeline runs once more.  A second rejection is surfaced.
* Every :class:`~surepet_cli.exceptions.SurePetError` is returned as a
  :class:`CommandFailure`; nothing is printed here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Union

from surepet_cli.core.models import (
    Credential,
    Device,
    ExportBundle,
    ExportKind,
    HistoryKind,
    HistoryReport,
    LockMode,
    MutationReceipt,
    Pet,
    PetClass,
)
from surepet_cli.core.device_listing import select_devices
from surepet_cli.core.params import (
    parse_clock_time,
    parse_export_format,
    parse_export_kinds,
    parse_hours,
    parse_location,
    parse_online,
    parse_percentage,
    parse_sort_key,
)
from surepet_cli.core.pet_listing import select_pets
from surepet_cli.core.protocols import ApiSession, ExportWriter, SessionFactory
from surepet_cli.core.range_parser import parse_range
from surepet_cli.core.resolver import require_unique
from surepet_cli.core.session_store import SessionStore
from surepet_cli.exceptions import AuthRejectedError, ExportError, InvalidInputError, SurePetError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_RANGE: str = "week"
DEFAULT_EXPORT_RANGE: str = "month"

# Commands that act on the whole account rather than a named target.
UNTARGETED_COMMANDS: frozenset[str] = frozenset({"status", "list", "search-devices", "export"})

LOCK_COMMANDS: dict[str, LockMode] = {
    "lock": LockMode.LOCKED,
    "unlock": LockMode.UNLOCKED,
    "lock-in": LockMode.LOCK_IN,
    "lock-out": LockMode.LOCK_OUT,
}

HISTORY_COMMANDS: dict[str, HistoryKind] = {
    "feeding-history": HistoryKind.FEEDING,
    "drinking-history": HistoryKind.DRINKING,
    "activity-history": HistoryKind.ACTIVITY,
}

CLASS_COMMANDS: dict[str, PetClass] = {
    "set-indoor": PetClass.INDOOR,
    "set-outdoor": PetClass.OUTDOOR,
}

_LOCK_DESCRIPTIONS: dict[LockMode, str] = {
    LockMode.LOCKED: "locked (no access allowed)",
    LockMode.UNLOCKED: "unlocked (free access)",
    LockMode.LOCK_IN: "set to keep pets in",
    LockMode.LOCK_OUT: "set to keep pets out",
}


# ---------------------------------------------------------------------------
# Request / result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CommandRequest:
    """Everything a front end collected for one command.

    ``options`` holds command-specific values: ``location`` for
    ``set-location``; ``lock_time``/``unlock_time``/``disable`` for
    ``set-curfew``; ``name``/``location``/``active_since``/``sort`` for
    ``list``; ``name``/``device_type``/``online``/``min_battery`` for
    ``search-devices``; ``format``/``types``/``output`` for ``export``.
    """

    command: str
    target: str | None = None
    range_expr: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CommandSuccess:
    command: str
    payload: Any
    """``tuple[Pet, ...]``, ``tuple[Device, ...]``, a
    :class:`HistoryReport` or a :class:`MutationReceipt`."""


@dataclass(frozen=True)
class CommandFailure:
    command: str
    error: SurePetError


CommandResult = Union[CommandSuccess, CommandFailure]

Handler = Callable[[ApiSession, CommandRequest, Mapping[str, Any]], Any]


def _local_now() -> datetime:
    return datetime.now().astimezone()


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

class CommandDispatcher:
    """Validate, resolve and execute one command per :meth:`dispatch` call.

    Parameters
    ----------
    store:
        Session store providing the bearer token.
    session_factory:
        Builds an :class:`ApiSession` for a credential.
    clock:
        Returns "now" for range parsing; injectable for tests.
    exporter:
        Writes ``export`` bundles; without one ``export`` fails.
    """

    def __init__(
        self,
        store: SessionStore,
        session_factory: SessionFactory,
        *,
        clock: Callable[[], datetime] = _local_now,
        exporter: ExportWriter | None = None,
    ) -> None:
        self._store: SessionStore = store
        self._session_factory: SessionFactory = session_factory
        self._clock: Callable[[], datetime] = clock
        self._exporter: ExportWriter | None = exporter

        self._handlers: dict[str, Handler] = {
            "status": self._status,
            "list": self._list,
            "set-location": self._set_location,
            "set-curfew": self._set_curfew,
            "search-devices": self._search_devices,
            "export": self._export,
        }
        self._handlers.update({name: self._set_lock_mode for name in LOCK_COMMANDS})
        self._handlers.update({name: self._set_class for name in CLASS_COMMANDS})
        self._handlers.update({name: self._history for name in HISTORY_COMMANDS})

    @property
    def commands(self) -> tuple[str, ...]:
        return (*self._handlers, "logout")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def dispatch(self, request: CommandRequest) -> CommandResult:
        """Run *request* to completion and return its typed outcome."""
        logger.debug("Dispatching %s", request.command)
        try:
            payload = self._run(request)
        except SurePetError as exc:
            logger.debug("%s failed: %s", request.command, exc)
            return CommandFailure(request.command, exc)
        return CommandSuccess(request.command, payload)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _run(self, request: CommandRequest) -> Any:
        if request.command == "logout":
            self._store.logout()
            return MutationReceipt(
                action="logout",
                detail="Successfully logged out. Authentication token has been cleared.",
            )

        handler = self._handlers.get(request.command)
        if handler is None:
            raise InvalidInputError(
                f"Unknown command '{request.command}'.",
                hint="Valid commands: " + ", ".join(sorted(self.commands)),
            )

        prepared = self._validate(request)
        credential = self._store.acquire()
        return self._execute_with_reauth(handler, request, prepared, credential)

    def _execute_with_reauth(
        self,
        handler: Handler,
        request: CommandRequest,
        prepared: Mapping[str, Any],
        credential: Credential,
    ) -> Any:
        retried = False
        while True:
            session = self._session_factory(credential)
            try:
                return handler(session, request, prepared)
            except AuthRejectedError:
                if retried:
                    raise
                retried = True
                logger.info("Session expired, re-authenticating once")
                credential = self._store.reauthenticate()

    def _validate(self, request: CommandRequest) -> dict[str, Any]:
        """Parse network-independent parameters before authenticating."""
        command = request.command
        options = request.options
        prepared: dict[str, Any] = {}

        if command not in UNTARGETED_COMMANDS and not (request.target or "").strip():
            raise InvalidInputError(
                f"'{command}' needs a pet or device name or ID.",
                hint=f"Example: surepet {command} \"Fluffy\"",
            )

        if command == "list":
            if options.get("location"):
                prepared["location"] = parse_location(str(options["location"]))
            if options.get("active_since") is not None:
                hours = parse_hours(options["active_since"])
                prepared["active_since"] = self._clock() - timedelta(hours=hours)
            prepared["sort"] = parse_sort_key(str(options.get("sort") or "name"))
            prepared["name"] = options.get("name") or None
        elif command == "search-devices":
            prepared["name"] = options.get("name") or None
            prepared["device_type"] = options.get("device_type") or None
            if options.get("online") is not None:
                prepared["online"] = parse_online(options["online"])
            if options.get("min_battery") is not None:
                prepared["min_battery"] = parse_percentage(options["min_battery"])
        elif command == "set-location":
            if not options.get("location"):
                raise InvalidInputError(
                    "A location is required.",
                    hint="Example: surepet set-location \"Fluffy\" inside",
                )
            prepared["location"] = parse_location(str(options["location"]))
        elif command == "set-curfew" and not options.get("disable"):
            lock_time = options.get("lock_time")
            unlock_time = options.get("unlock_time")
            if not lock_time or not unlock_time:
                raise InvalidInputError(
                    "Both lock-time and unlock-time are required when setting curfew.",
                    hint="Pass both times (e.g. 22:00 06:00) or use --disable.",
                )
            prepared["lock_time"] = parse_clock_time(str(lock_time))
            prepared["unlock_time"] = parse_clock_time(str(unlock_time))
        elif command in HISTORY_COMMANDS:
            prepared["window"] = parse_range(request.range_expr or DEFAULT_HISTORY_RANGE, self._clock())
        elif command == "export":
            if self._exporter is None:
                raise ExportError("Export is not available here.")
            prepared["exporter"] = self._exporter
            prepared["format"] = parse_export_format(str(options.get("format") or "csv"))
            prepared["kinds"] = parse_export_kinds(options.get("types"))
            prepared["window"] = parse_range(request.range_expr or DEFAULT_EXPORT_RANGE, self._clock())
            output = options.get("output")
            prepared["output"] = Path(str(output)) if output else None

        return prepared

    # ------------------------------------------------------------------
    # Candidate fetching + resolution
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_pet(session: ApiSession, query: str) -> Pet:
        return require_unique(query.strip(), tuple(session.list_pets()), entity="pet")

    @staticmethod
    def _resolve_device(session: ApiSession, query: str) -> Device:
        return require_unique(query.strip(), tuple(session.list_devices()), entity="device")

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _status(self, session: ApiSession, request: CommandRequest, prepared: Mapping[str, Any]) -> tuple[Device, ...]:
        return tuple(session.list_devices())

    def _list(self, session: ApiSession, request: CommandRequest, prepared: Mapping[str, Any]) -> tuple[Pet, ...]:
        pets = session.list_pets()
        return tuple(
            select_pets(
                pets,
                name=prepared.get("name"),
                location=prepared.get("location"),
                active_since=prepared.get("active_since"),
                sort=prepared["sort"],
            )
        )

    def _set_location(self, session: ApiSession, request: CommandRequest, prepared: Mapping[str, Any]) -> MutationReceipt:
        pet = self._resolve_pet(session, request.target or "")
        location = prepared["location"]
        session.set_pet_location(pet.id, location)
        return MutationReceipt(
            action=request.command,
            detail=f"Pet {pet.name} location set to {location.label}",
            target_id=pet.id,
            target_name=pet.name,
        )

    def _set_class(self, session: ApiSession, request: CommandRequest, prepared: Mapping[str, Any]) -> MutationReceipt:
        pet = self._resolve_pet(session, request.target or "")
        if not pet.tag_id:
            raise InvalidInputError(
                f"Pet {pet.name} has no microchip tag registered.",
                hint="Pair the pet with a flap in the SureHub app first.",
            )
        flap = next((device for device in session.list_devices() if device.is_flap), None)
        if flap is None:
            raise InvalidInputError(
                "No pet or cat flap found on this account.",
                hint="Indoor/outdoor profiles are stored on a flap.",
            )

        pet_class = CLASS_COMMANDS[request.command]
        session.set_pet_class(pet.id, pet_class, tag_id=pet.tag_id, flap_id=flap.id)
        return MutationReceipt(
            action=request.command,
            detail=f"Pet {pet.name} marked as {pet_class.label}",
            target_id=pet.id,
            target_name=pet.name,
        )

    def _set_lock_mode(self, session: ApiSession, request: CommandRequest, prepared: Mapping[str, Any]) -> MutationReceipt:
        device = self._resolve_device(session, request.target or "")
        mode = LOCK_COMMANDS[request.command]
        session.set_lock_mode(device.id, mode)
        return MutationReceipt(
            action=request.command,
            detail=f"Device {device.name} {_LOCK_DESCRIPTIONS[mode]}",
            target_id=device.id,
            target_name=device.name,
        )

    def _set_curfew(self, session: ApiSession, request: CommandRequest, prepared: Mapping[str, Any]) -> MutationReceipt:
        device = self._resolve_device(session, request.target or "")
        if request.options.get("disable"):
            session.disable_curfew(device.id)
            detail = f"Curfew disabled for device {device.name}"
        else:
            lock_time = prepared["lock_time"]
            unlock_time = prepared["unlock_time"]
            session.set_curfew(device.id, lock_time, unlock_time)
            detail = f"Curfew set for device {device.name} ({lock_time} - {unlock_time})"
        return MutationReceipt(
            action=request.command,
            detail=detail,
            target_id=device.id,
            target_name=device.name,
        )

    def _history(self, session: ApiSession, request: CommandRequest, prepared: Mapping[str, Any]) -> HistoryReport:
        pet = self._resolve_pet(session, request.target or "")
        window = prepared["window"]
        kind = HISTORY_COMMANDS[request.command]
        records = session.get_history(pet.id, kind, window)
        return HistoryReport(pet=pet, kind=kind, range=window, records=tuple(records))

    def _search_devices(self, session: ApiSession, request: CommandRequest, prepared: Mapping[str, Any]) -> tuple[Device, ...]:
        return tuple(
            select_devices(
                session.list_devices(),
                name=prepared.get("name"),
                device_type=prepared.get("device_type"),
                online=prepared.get("online"),
                min_battery=prepared.get("min_battery"),
            )
        )

    def _export(self, session: ApiSession, request: CommandRequest, prepared: Mapping[str, Any]) -> MutationReceipt:
        kinds: tuple[ExportKind, ...] = prepared["kinds"]
        window = prepared["window"]
        history_kinds = [kind.history_kind for kind in kinds if kind.history_kind is not None]

        pets = tuple(session.list_pets()) if ExportKind.PETS in kinds or history_kinds else ()
        devices = tuple(session.list_devices()) if ExportKind.DEVICES in kinds else ()
        records = tuple(
            record
            for history_kind in history_kinds
            for pet in pets
            for record in session.get_history(pet.id, history_kind, window)
        )
        bundle = ExportBundle(
            kinds=kinds,
            range=window,
            created_at=self._clock(),
            pets=pets if ExportKind.PETS in kinds else (),
            devices=devices,
            records=records,
        )

        exporter: ExportWriter = prepared["exporter"]
        path = exporter.write(bundle, prepared["format"], prepared["output"])
        return MutationReceipt(
            action=request.command,
            detail=f"Exported {bundle.total_records} records to {path}",
            target_name=str(path),
        )
