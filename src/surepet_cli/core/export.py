"""Flattening of an :class:`ExportBundle` into rows and documents.

Pure functions only; writing files is the job of
:class:`~surepet_cli.infra.export_file.ExportFile`.

CSV holds a single table, chosen in this order:

1. history records (feeding, drinking and activity share one layout,
   told apart by ``data_type``);
2. pets;
3. devices.

Datasets that lose out are logged and left to a JSON export, which
carries every requested dataset under its own key.
"""

from __future__ import annotations

import logging
from typing import Any

from surepet_cli.core.models import (
    Device,
    ExportBundle,
    ExportFormat,
    ExportKind,
    HistoryKind,
    HistoryRecord,
    Pet,
)
from surepet_cli.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

Row = dict[str, Any]

HISTORY_FIELDS: tuple[str, ...] = (
    "data_type",
    "pet_id",
    "timestamp",
    "device_id",
    "amount",
    "unit",
    "duration_seconds",
)

PET_FIELDS: tuple[str, ...] = (
    "pet_id",
    "name",
    "location",
    "location_since",
    "pet_class",
    "tag_id",
)

DEVICE_FIELDS: tuple[str, ...] = (
    "device_id",
    "name",
    "device_type",
    "online",
    "battery",
    "lock_mode",
    "curfew",
)

_UNITS: dict[HistoryKind, str] = {
    HistoryKind.FEEDING: "g",
    HistoryKind.DRINKING: "ml",
}


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------

def pet_row(pet: Pet) -> Row:
    return {
        "pet_id": pet.id,
        "name": pet.name,
        "location": pet.location.label,
        "location_since": pet.location_since,
        "pet_class": pet.pet_class.label,
        "tag_id": pet.tag_id,
    }


def device_row(device: Device) -> Row:
    curfew = device.curfew
    return {
        "device_id": device.id,
        "name": device.name,
        "device_type": device.device_type,
        "online": device.online,
        "battery": device.battery,
        "lock_mode": device.lock_mode.label if device.lock_mode is not None else None,
        "curfew": (
            f"{curfew.lock_time}-{curfew.unlock_time}"
            if curfew is not None and curfew.enabled
            else None
        ),
    }


def history_row(record: HistoryRecord) -> Row:
    return {
        "data_type": record.kind.value,
        "pet_id": record.pet_id,
        "timestamp": record.at.isoformat(),
        "device_id": record.device_id,
        "amount": record.amount,
        "unit": _UNITS.get(record.kind) if record.amount is not None else None,
        "duration_seconds": record.duration_seconds,
    }


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

def export_document(bundle: ExportBundle) -> dict[str, Any]:
    """JSON document with metadata plus one list per requested dataset."""
    document: dict[str, Any] = {
        "metadata": {
            "exported_at": bundle.created_at.isoformat(),
            "range": {
                "start": bundle.range.start.isoformat(),
                "end": bundle.range.end.isoformat(),
            },
            "data_types": [kind.value for kind in bundle.kinds],
            "total_records": bundle.total_records,
        }
    }
    for kind in bundle.kinds:
        if kind is ExportKind.PETS:
            document["pets"] = [pet_row(pet) for pet in bundle.pets]
        elif kind is ExportKind.DEVICES:
            document["devices"] = [device_row(device) for device in bundle.devices]
        else:
            document[kind.value] = [
                history_row(record)
                for record in bundle.records
                if record.kind is kind.history_kind
            ]
    return document


def csv_table(bundle: ExportBundle) -> tuple[tuple[str, ...], list[Row]]:
    """Pick the single table a CSV export holds.

    Raises
    ------
    InvalidInputError
        When the bundle holds no rows at all.
    """
    if bundle.records:
        table = (HISTORY_FIELDS, [history_row(record) for record in bundle.records])
        dropped = [name for name, rows in (("pets", bundle.pets), ("devices", bundle.devices)) if rows]
    elif bundle.pets:
        table = (PET_FIELDS, [pet_row(pet) for pet in bundle.pets])
        dropped = ["devices"] if bundle.devices else []
    elif bundle.devices:
        table = (DEVICE_FIELDS, [device_row(device) for device in bundle.devices])
        dropped = []
    else:
        raise InvalidInputError(
            "No data available for export.",
            hint="Try a wider --range or other --types.",
        )

    if dropped:
        logger.warning(
            "CSV holds one table; %s left out (use --format json to keep them)",
            " and ".join(dropped),
        )
    return table


def default_filename(bundle: ExportBundle, fmt: ExportFormat) -> str:
    """``surepet_export_<from>_to_<to>_<timestamp>.<ext>``."""
    return (
        f"surepet_export_{bundle.range.start:%Y%m%d}_to_{bundle.range.end:%Y%m%d}"
        f"_{bundle.created_at:%Y%m%d_%H%M%S}.{fmt.value}"
    )
