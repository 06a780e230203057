"""Pure filtering and sorting for the ``list`` command.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic.

Pipeline order (enforced by :func:`select_pets`):

1. **Filter by name** — case-insensitive substring.
2. **Filter by location** — exact location match.
3. **Filter by activity** — position changed at or after a cut-off.
4. **Sort** — by name, most recent activity, or location code.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, tzinfo

from surepet_cli.core.models import Location, Pet


# ---------------------------------------------------------------------------
# 1. / 2. / 3. Filters
# ---------------------------------------------------------------------------

def filter_by_name(pets: Sequence[Pet], fragment: str) -> list[Pet]:
    needle = fragment.casefold()
    return [pet for pet in pets if needle in pet.name.casefold()]


def filter_by_location(pets: Sequence[Pet], location: Location) -> list[Pet]:
    return [pet for pet in pets if pet.location is location]


def last_movement(pet: Pet, tz: tzinfo | None = None) -> datetime | None:
    """Parse ``location_since``; naive timestamps take *tz*."""
    if not pet.location_since:
        return None
    try:
        moment = datetime.fromisoformat(pet.location_since.replace("Z", "+00:00"))
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz)
    return moment


def filter_active_since(pets: Sequence[Pet], cutoff: datetime) -> list[Pet]:
    """Keep pets whose position changed at or after *cutoff*.

    Pets that never moved, or whose timestamp cannot be read, are dropped.
    """
    selected = []
    for pet in pets:
        moment = last_movement(pet, cutoff.tzinfo)
        if moment is not None and moment >= cutoff:
            selected.append(pet)
    return selected


# ---------------------------------------------------------------------------
# 4. Sort
# ---------------------------------------------------------------------------

def sort_pets(pets: Sequence[Pet], key: str) -> list[Pet]:
    """Sort *pets* by ``name``, ``activity`` (newest first) or ``location``.

    Pets with unknown location sort after known ones; pets that never
    moved sort last under ``activity``.
    """
    if key == "activity":
        return sorted(pets, key=lambda pet: pet.location_since or "", reverse=True)
    if key == "location":
        return sorted(
            pets,
            key=lambda pet: pet.location.value if pet.location is not Location.UNKNOWN else 99,
        )
    return sorted(pets, key=lambda pet: pet.name)


# ---------------------------------------------------------------------------
# Composite pipeline
# ---------------------------------------------------------------------------

def select_pets(
    pets: Sequence[Pet],
    *,
    name: str | None = None,
    location: Location | None = None,
    active_since: datetime | None = None,
    sort: str = "name",
) -> list[Pet]:
    """Run the full filter → filter → filter → sort pipeline."""
    selected = list(pets)
    if name:
        selected = filter_by_name(selected, name)
    if location is not None:
        selected = filter_by_location(selected, location)
    if active_since is not None:
        selected = filter_active_since(selected, active_since)
    return sort_pets(selected, sort)
