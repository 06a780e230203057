"""Pure filtering for the ``search-devices`` command.

Same shape as :mod:`surepet_cli.core.pet_listing`: each filter takes a
sequence and returns a new list, and :func:`select_devices` runs them
in a fixed order (name, type, online, battery).
"""

from __future__ import annotations

from collections.abc import Sequence

from surepet_cli.core.models import PRODUCT_TYPES, Device

DEVICE_TYPES: tuple[str, ...] = tuple(sorted(set(PRODUCT_TYPES.values())))

_TYPE_ALIASES: dict[str, str] = {
    "door": "flap",
    "bowl": "feeder",
    "water": "fountain",
}


def battery_percent(device: Device) -> float | None:
    """Battery as a percentage; the API reports it on a 0-10 scale."""
    if device.battery is None:
        return None
    return device.battery * 10


def filter_by_name(devices: Sequence[Device], fragment: str) -> list[Device]:
    needle = fragment.casefold()
    return [device for device in devices if needle in device.name.casefold()]


def filter_by_type(devices: Sequence[Device], device_type: str) -> list[Device]:
    """Match the product type, falling back to a name substring.

    ``door``, ``bowl`` and ``water`` are accepted for flap, feeder and
    fountain.
    """
    needle = device_type.strip().casefold()
    wanted = _TYPE_ALIASES.get(needle, needle)
    return [
        device
        for device in devices
        if device.device_type == wanted or needle in device.name.casefold()
    ]


def filter_by_online(devices: Sequence[Device], online: bool) -> list[Device]:
    # unknown status counts as offline
    return [device for device in devices if bool(device.online) is online]


def filter_by_min_battery(devices: Sequence[Device], percent: float) -> list[Device]:
    selected = []
    for device in devices:
        level = battery_percent(device)
        if level is not None and level >= percent:
            selected.append(device)
    return selected


def select_devices(
    devices: Sequence[Device],
    *,
    name: str | None = None,
    device_type: str | None = None,
    online: bool | None = None,
    min_battery: float | None = None,
) -> list[Device]:
    """Apply every given filter; the API order of devices is kept."""
    selected = list(devices)
    if name:
        selected = filter_by_name(selected, name)
    if device_type:
        selected = filter_by_type(selected, device_type)
    if online is not None:
        selected = filter_by_online(selected, online)
    if min_battery is not None:
        selected = filter_by_min_battery(selected, min_battery)
    return selected
