"""Raw-dict → domain-model parsers for SureHub responses.

Pure functions over already-decoded JSON.  Malformed individual entries
are skipped with a warning; a malformed envelope raises
:class:`~surepet_cli.exceptions.MalformedResponseError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timedelta
from typing import Any

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
from surepet_cli.exceptions import MalformedResponseError

logger = logging.getLogger(__name__)

# Dashboard sections per history kind, and the hour of day at which a
# daily aggregate is placed on the timeline.
_HISTORY_SECTIONS: dict[HistoryKind, tuple[str, int]] = {
    HistoryKind.FEEDING: ("feeding", 12),
    HistoryKind.DRINKING: ("drinking", 10),
    HistoryKind.ACTIVITY: ("movement", 8),
}


# ---------------------------------------------------------------------------
# Envelope helpers
# ---------------------------------------------------------------------------

def _data(body: object) -> Any:
    if not isinstance(body, dict) or "data" not in body:
        raise MalformedResponseError("Response has no 'data' member.")
    return body["data"]


def _entries(body: object, member: str) -> list[dict[str, Any]]:
    data = _data(body)
    if not isinstance(data, dict):
        raise MalformedResponseError("Response 'data' is not an object.")
    raw = data.get(member) or []
    if not isinstance(raw, list):
        raise MalformedResponseError(f"Response member '{member}' is not a list.")
    return [entry for entry in raw if isinstance(entry, dict)]


def _enum_or(enum_cls: Any, value: object, default: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

def parse_login(body: object) -> str:
    data = _data(body)
    token = data.get("token") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token.strip():
        raise MalformedResponseError("Login response carries no token.")
    return token


# ---------------------------------------------------------------------------
# Pets
# ---------------------------------------------------------------------------

def parse_pet(raw: dict[str, Any]) -> Pet:
    position = raw.get("position") or {}
    activity = (raw.get("status") or {}).get("activity") or {}
    where = position.get("where", activity.get("where"))
    since = position.get("since") or activity.get("since")
    tag = raw.get("tag") or {}

    return Pet(
        id=str(raw["id"]),
        name=str(raw.get("name") or ""),
        location=_enum_or(Location, where, Location.UNKNOWN),
        pet_class=_enum_or(PetClass, tag.get("profile"), PetClass.UNKNOWN),
        tag_id=_optional_str(raw.get("tag_id", tag.get("id"))),
        location_since=_optional_str(since),
    )


def parse_pets(body: object) -> list[Pet]:
    pets: list[Pet] = []
    for raw in _entries(body, "pets"):
        if "id" not in raw:
            logger.warning("Skipping pet entry without id: %r", raw.get("name"))
            continue
        pets.append(parse_pet(raw))
    return pets


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------

def _parse_curfew(raw: object) -> Curfew | None:
    entries = raw if isinstance(raw, list) else [raw] if isinstance(raw, dict) else []
    for entry in entries:
        if isinstance(entry, dict) and entry.get("lock_time") and entry.get("unlock_time"):
            return Curfew(
                lock_time=str(entry["lock_time"]),
                unlock_time=str(entry["unlock_time"]),
                enabled=bool(entry.get("enabled", True)),
            )
    return None


def parse_device(raw: dict[str, Any]) -> Device:
    status = raw.get("status") or {}
    control = raw.get("control") or {}
    locking = status.get("locking") or {}

    mode_code = locking.get("mode", control.get("locking"))
    curfew_raw = control.get("curfew") or locking.get("curfew")
    battery = status.get("battery")

    return Device(
        id=str(raw["id"]),
        name=str(raw.get("name") or ""),
        lock_mode=_enum_or(LockMode, mode_code, None),
        curfew=_parse_curfew(curfew_raw),
        product_id=raw.get("product_id") if isinstance(raw.get("product_id"), int) else None,
        battery=float(battery) if isinstance(battery, (int, float)) else None,
        online=status.get("online") if isinstance(status.get("online"), bool) else None,
    )


def parse_devices(body: object) -> list[Device]:
    devices: list[Device] = []
    for raw in _entries(body, "devices"):
        if "id" not in raw:
            logger.warning("Skipping device entry without id: %r", raw.get("name"))
            continue
        devices.append(parse_device(raw))
    return devices


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

def _parse_when(text: object, tzinfo: Any) -> datetime | None:
    if not isinstance(text, str):
        return None
    try:
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tzinfo)
    return moment


def _seconds(clock: object) -> int:
    """``"HH:MM:SS"`` → seconds; anything unparseable counts as zero."""
    if not isinstance(clock, str):
        return 0
    parts = clock.split(":")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return 0
    hours, minutes, seconds = (int(part) for part in parts)
    return hours * 3600 + minutes * 60 + seconds


def _sections(body: object, pet_id: str, section: str) -> Iterator[dict[str, Any]]:
    data = _data(body)
    if not isinstance(data, list):
        raise MalformedResponseError("History 'data' is not a list.")
    for entry in data:
        if not isinstance(entry, dict):
            continue
        if "pet_id" in entry and str(entry["pet_id"]) != pet_id:
            continue
        block = entry.get(section)
        if isinstance(block, dict):
            yield block


def parse_history(
    body: object,
    pet_id: str,
    kind: HistoryKind,
    window: RangeSpec,
) -> list[HistoryRecord]:
    """Turn daily dashboard aggregates into records inside *window*.

    Feeding and drinking produce one record per day with positive
    ``total_consumption``; activity produces one record per day with a
    non-zero ``time_outside``.  Result is newest first.
    """
    section, hour = _HISTORY_SECTIONS[kind]
    records: list[HistoryRecord] = []

    for block in _sections(body, pet_id, section):
        device_ids = [str(ident) for ident in block.get("device_ids") or []]
        device_id = device_ids[0] if device_ids else None

        for day in block.get("activity") or []:
            if not isinstance(day, dict):
                continue
            date = _parse_when(day.get("date"), window.start.tzinfo)
            if date is None:
                logger.warning("Skipping %s entry with bad date: %r", kind.value, day.get("date"))
                continue
            day_start = date.replace(hour=0, minute=0, second=0, microsecond=0)
            if not (day_start < window.end and day_start + timedelta(days=1) > window.start):
                continue
            at = day_start.replace(hour=hour)

            if kind is HistoryKind.ACTIVITY:
                outside = _seconds(day.get("time_outside"))
                if outside <= 0:
                    continue
                record = HistoryRecord(
                    pet_id=pet_id,
                    kind=kind,
                    at=at,
                    duration_seconds=outside,
                    device_id=device_id,
                )
            else:
                amount = day.get("total_consumption")
                if not isinstance(amount, (int, float)) or amount <= 0:
                    continue
                record = HistoryRecord(
                    pet_id=pet_id,
                    kind=kind,
                    at=at,
                    amount=float(amount),
                    device_id=device_id,
                )

            records.append(record)

    records.sort(key=lambda record: record.at, reverse=True)
    return records
