"""Tests for domain models (core/models.py).

All models are frozen dataclasses — these tests verify immutability,
derived properties, and the RangeSpec ordering invariant.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from surepet_cli.core.models import (
    Credential,
    CredentialSource,
    Device,
    HistoryKind,
    HistoryReport,
    Location,
    LockMode,
    Pet,
    PetClass,
    RangeSpec,
)
from surepet_cli.exceptions import RangeParseError

UTC = timezone.utc


# ---------------------------------------------------------------------------
# Credential
# ---------------------------------------------------------------------------

class TestCredential:
    def test_token_hidden_from_repr(self) -> None:
        credential = Credential("s3cret", CredentialSource.ENVIRONMENT)
        assert "s3cret" not in repr(credential)
        assert "environment" in repr(credential)

    def test_frozen(self) -> None:
        credential = Credential("t", CredentialSource.PERSISTED)
        with pytest.raises(dataclasses.FrozenInstanceError):
            credential.token = "other"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TestEnums:
    def test_wire_codes(self) -> None:
        assert Location.INSIDE.value == 1
        assert Location.OUTSIDE.value == 2
        assert [mode.value for mode in LockMode] == [0, 1, 2, 3]
        assert PetClass.OUTDOOR.value == 2
        assert PetClass.INDOOR.value == 3

    def test_labels(self) -> None:
        assert LockMode.LOCK_IN.label == "lock-in"
        assert Location.OUTSIDE.label == "outside"
        assert PetClass.INDOOR.label == "indoor"


# ---------------------------------------------------------------------------
# Pet / Device
# ---------------------------------------------------------------------------

class TestPetAndDevice:
    def test_pet_defaults(self) -> None:
        pet = Pet(id="1", name="Tom")
        assert pet.location is Location.UNKNOWN
        assert pet.pet_class is PetClass.UNKNOWN
        assert pet.tag_id is None

    @pytest.mark.parametrize(("product_id", "is_flap"), [(3, True), (6, True), (4, False), (None, False)])
    def test_is_flap(self, product_id: int | None, is_flap: bool) -> None:
        assert Device(id="1", name="d", product_id=product_id).is_flap is is_flap


# ---------------------------------------------------------------------------
# RangeSpec
# ---------------------------------------------------------------------------

class TestRangeSpec:
    def test_inverted_range_rejected(self) -> None:
        start = datetime(2024, 1, 2, tzinfo=UTC)
        with pytest.raises(RangeParseError):
            RangeSpec(start=start, end=start - timedelta(seconds=1))

    def test_empty_range_allowed(self) -> None:
        moment = datetime(2024, 1, 2, tzinfo=UTC)
        assert RangeSpec(moment, moment).days == 1

    def test_days_rounds_up(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=UTC)
        assert RangeSpec(start, start + timedelta(days=7)).days == 7
        assert RangeSpec(start, start + timedelta(days=7, hours=1)).days == 8

    def test_contains_is_half_open(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=UTC)
        window = RangeSpec(start, start + timedelta(days=1))
        assert start in window
        assert start + timedelta(days=1) not in window
        assert "2024-01-01" not in window


# ---------------------------------------------------------------------------
# HistoryReport
# ---------------------------------------------------------------------------

class TestHistoryReport:
    def test_empty_report_is_truthy(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=UTC)
        report = HistoryReport(
            pet=Pet(id="1", name="Tom"),
            kind=HistoryKind.FEEDING,
            range=RangeSpec(start, start),
            records=(),
        )
        assert len(report) == 0
        assert report
