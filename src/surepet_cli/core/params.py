"""Parsing of command-specific parameters typed by the user.

Pure functions — each returns a typed value or raises
:class:`~surepet_cli.exceptions.InvalidInputError` with an example of a
valid value.
"""

from __future__ import annotations

import re

from surepet_cli.core.models import ExportFormat, ExportKind, Location
from surepet_cli.exceptions import InvalidInputError

_LOCATION_ALIASES: dict[str, Location] = {
    "inside": Location.INSIDE,
    "in": Location.INSIDE,
    "1": Location.INSIDE,
    "outside": Location.OUTSIDE,
    "out": Location.OUTSIDE,
    "2": Location.OUTSIDE,
}

_CLOCK = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")

SORT_KEYS: tuple[str, ...] = ("name", "activity", "location")


def parse_location(value: str) -> Location:
    """Map ``inside``/``in``/``1`` and ``outside``/``out``/``2`` to a location."""
    location = _LOCATION_ALIASES.get(value.strip().lower())
    if location is None:
        raise InvalidInputError(
            f"Invalid location '{value}'.",
            hint="Use 'inside' or 'outside'.",
        )
    return location


def parse_clock_time(value: str) -> str:
    """Validate an ``H:MM``/``HH:MM`` time and normalise it to ``HH:MM``."""
    match = _CLOCK.match(value.strip())
    if match is None:
        raise InvalidInputError(
            f"Invalid time format '{value}'.",
            hint="Use HH:MM format (e.g. 22:00).",
        )
    hours, minutes = match.groups()
    return f"{int(hours):02d}:{minutes}"


def parse_sort_key(value: str) -> str:
    key = value.strip().lower()
    if key not in SORT_KEYS:
        raise InvalidInputError(
            f"Invalid sort criteria '{value}'.",
            hint="Use 'name', 'activity', or 'location'.",
        )
    return key


def parse_hours(value: str | int) -> int:
    """Validate a whole, non-negative number of hours."""
    try:
        hours = int(str(value).strip())
    except ValueError:
        hours = -1
    if hours < 0:
        raise InvalidInputError(
            f"Invalid number of hours '{value}'.",
            hint="Use a whole number, e.g. --active-since 24.",
        )
    return hours


_ONLINE_ALIASES: dict[str, bool] = {
    "yes": True,
    "true": True,
    "online": True,
    "1": True,
    "no": False,
    "false": False,
    "offline": False,
    "0": False,
}


def parse_online(value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    online = _ONLINE_ALIASES.get(value.strip().lower())
    if online is None:
        raise InvalidInputError(
            f"Invalid online status '{value}'.",
            hint="Use 'yes' or 'no'.",
        )
    return online


def parse_percentage(value: str | float) -> float:
    try:
        percent = float(str(value).strip().rstrip("%"))
    except ValueError:
        percent = -1.0
    if not 0 <= percent <= 100:
        raise InvalidInputError(
            f"Invalid battery percentage '{value}'.",
            hint="Use a number from 0 to 100.",
        )
    return percent


def parse_export_format(value: str) -> ExportFormat:
    try:
        return ExportFormat(value.strip().lower())
    except ValueError:
        raise InvalidInputError(
            f"Invalid export format '{value}'.",
            hint="Use 'csv' or 'json'.",
        ) from None


def parse_export_kinds(value: str | None) -> tuple[ExportKind, ...]:
    """Parse a comma-separated dataset list; empty means every dataset."""
    names = [part.strip().lower() for part in (value or "").split(",") if part.strip()]
    if not names:
        return tuple(ExportKind)

    kinds: list[ExportKind] = []
    for name in names:
        try:
            kind = ExportKind(name)
        except ValueError:
            raise InvalidInputError(
                f"Unknown data type '{name}'.",
                hint="Use any of: " + ", ".join(kind.value for kind in ExportKind),
            ) from None
        if kind not in kinds:
            kinds.append(kind)
    return tuple(kinds)
