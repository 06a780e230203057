"""Tests for SureHub response parsing (core/payloads.py).

Bodies are hand-written dicts shaped like real ``/me/start`` and
dashboard responses.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from surepet_cli.core.models import HistoryKind, Location, LockMode, PetClass, RangeSpec
from surepet_cli.core.payloads import (
    parse_device,
    parse_devices,
    parse_history,
    parse_login,
    parse_pet,
    parse_pets,
)
from surepet_cli.exceptions import MalformedResponseError

UTC = timezone.utc


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

class TestParseLogin:
    def test_token(self) -> None:
        assert parse_login({"data": {"token": "abc", "user": {}}}) == "abc"

    @pytest.mark.parametrize("body", [{}, {"data": {}}, {"data": {"token": "  "}}, [], None])
    def test_missing_token(self, body: object) -> None:
        with pytest.raises(MalformedResponseError):
            parse_login(body)


# ---------------------------------------------------------------------------
# Pets
# ---------------------------------------------------------------------------

class TestParsePets:
    def test_full_pet(self) -> None:
        pet = parse_pet(
            {
                "id": 123,
                "name": "Fluffy",
                "tag_id": 9001,
                "tag": {"id": 9001, "profile": 3},
                "position": {"where": 2, "since": "2024-03-15T08:00:00+00:00"},
            }
        )
        assert pet.id == "123"
        assert pet.location is Location.OUTSIDE
        assert pet.pet_class is PetClass.INDOOR
        assert pet.tag_id == "9001"
        assert pet.location_since == "2024-03-15T08:00:00+00:00"

    def test_status_activity_fallback(self) -> None:
        pet = parse_pet({"id": 1, "name": "Tom", "status": {"activity": {"where": 1, "since": "x"}}})
        assert pet.location is Location.INSIDE
        assert pet.location_since == "x"

    def test_unknown_codes(self) -> None:
        pet = parse_pet({"id": 1, "name": "Tom", "position": {"where": 9}})
        assert pet.location is Location.UNKNOWN
        assert pet.pet_class is PetClass.UNKNOWN
        assert pet.tag_id is None

    def test_entries_without_id_are_skipped(self) -> None:
        pets = parse_pets({"data": {"pets": [{"name": "Ghost"}, {"id": 2, "name": "Tom"}]}})
        assert [pet.id for pet in pets] == ["2"]

    def test_missing_member_is_empty(self) -> None:
        assert parse_pets({"data": {"devices": []}}) == []

    @pytest.mark.parametrize("body", [{"data": []}, {"data": {"pets": "x"}}, {"nope": 1}])
    def test_malformed_envelope(self, body: object) -> None:
        with pytest.raises(MalformedResponseError):
            parse_pets(body)


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------

class TestParseDevices:
    def test_flap(self) -> None:
        device = parse_device(
            {
                "id": 20,
                "name": "Back Door Flap",
                "product_id": 6,
                "status": {"locking": {"mode": 2}, "battery": 5.61, "online": True},
                "control": {
                    "curfew": [{"enabled": True, "lock_time": "22:00", "unlock_time": "06:00"}]
                },
            }
        )
        assert device.id == "20"
        assert device.lock_mode is LockMode.LOCK_OUT
        assert device.curfew is not None
        assert (device.curfew.lock_time, device.curfew.unlock_time) == ("22:00", "06:00")
        assert device.battery == pytest.approx(5.61)
        assert device.online is True
        assert device.is_flap

    def test_control_locking_fallback_and_dict_curfew(self) -> None:
        device = parse_device(
            {
                "id": 21,
                "name": "Cat Flap",
                "product_id": 3,
                "control": {
                    "locking": 3,
                    "curfew": {"enabled": False, "lock_time": "20:00", "unlock_time": "07:00"},
                },
            }
        )
        assert device.lock_mode is LockMode.LOCKED
        assert device.curfew is not None and device.curfew.enabled is False

    def test_hub_has_no_lock_state(self) -> None:
        device = parse_device({"id": 10, "name": "Hub", "product_id": 1, "status": {"online": True}})
        assert device.lock_mode is None
        assert device.curfew is None
        assert not device.is_flap

    def test_list(self) -> None:
        devices = parse_devices({"data": {"devices": [{"id": 1, "name": "a"}, {"name": "no id"}]}})
        assert [device.name for device in devices] == ["a"]


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

WINDOW = RangeSpec(datetime(2024, 3, 10, tzinfo=UTC), datetime(2024, 3, 13, tzinfo=UTC))


def _dashboard() -> dict:
    return {
        "data": [
            {
                "pet_id": 123,
                "feeding": {
                    "device_ids": [30],
                    "activity": [
                        {"date": "2024-03-09T00:00:00", "total_consumption": 40},
                        {"date": "2024-03-10T00:00:00", "total_consumption": 35.5},
                        {"date": "2024-03-11T00:00:00", "total_consumption": 0},
                        {"date": "2024-03-12T00:00:00+00:00", "total_consumption": 20},
                        {"date": "garbage", "total_consumption": 20},
                    ],
                },
                "movement": {
                    "device_ids": [20],
                    "activity": [
                        {"date": "2024-03-10T00:00:00Z", "time_outside": "01:30:00"},
                        {"date": "2024-03-11T00:00:00Z", "time_outside": "00:00:00"},
                    ],
                },
            },
            {
                "pet_id": 456,
                "feeding": {"activity": [{"date": "2024-03-10T00:00:00", "total_consumption": 99}]},
            },
        ]
    }


class TestParseHistory:
    def test_feeding_records_in_window_newest_first(self) -> None:
        records = parse_history(_dashboard(), "123", HistoryKind.FEEDING, WINDOW)
        assert [record.at for record in records] == [
            datetime(2024, 3, 12, 12, tzinfo=UTC),
            datetime(2024, 3, 10, 12, tzinfo=UTC),
        ]
        assert [record.amount for record in records] == [20.0, 35.5]
        assert all(record.device_id == "30" for record in records)
        assert all(record.pet_id == "123" for record in records)

    def test_activity_durations(self) -> None:
        records = parse_history(_dashboard(), "123", HistoryKind.ACTIVITY, WINDOW)
        assert len(records) == 1
        assert records[0].duration_seconds == 5400
        assert records[0].amount is None

    def test_other_pets_are_ignored(self) -> None:
        records = parse_history(_dashboard(), "456", HistoryKind.FEEDING, WINDOW)
        assert [record.amount for record in records] == [99.0]

    def test_missing_section_is_empty(self) -> None:
        assert parse_history(_dashboard(), "123", HistoryKind.DRINKING, WINDOW) == []

    def test_data_must_be_a_list(self) -> None:
        with pytest.raises(MalformedResponseError):
            parse_history({"data": {}}, "123", HistoryKind.FEEDING, WINDOW)
