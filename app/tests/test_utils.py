"""
Tests for key derivation, number parsing and date helpers
"""

from datetime import datetime, timezone

import pytest

from app.core.roles import Role, can_assign, can_manage, is_privileged, is_staff
from app.core.security import generate_pin, hash_pin, is_pin_hash, verify_pin
from app.utils.date_utils import get_year_bounds, parse_timestamp
from app.utils.numbers import format_percent, parse_number
from app.utils.text_keys import derive_key, point_document_id


class TestKeys:

    @pytest.mark.parametrize("species,class_label,expected", [
        ("srna", "mladiči moškega spola", "SRNA__MLADICI_MOSKEGA_SPOLA"),
        ("Jelen  navadni", "Teleta (M/Ž)", "JELEN_NAVADNI__TELETA_M_Z"),
        ("srna", "", "SRNA__SKUPAJ"),
        ("srna", None, "SRNA__SKUPAJ"),
        ("divji prašič", "skupaj", "DIVJI_PRASIC__SKUPAJ"),
    ])
    def test_derive_key(self, species, class_label, expected):
        assert derive_key(species, class_label) == expected

    def test_point_document_id(self):
        assert point_document_id("LD Brezovica", "Krmišče 12") == "ld_brezovica__krmisce_12"


class TestNumbers:

    @pytest.mark.parametrize("value,expected", [
        (3, 3),
        (2.5, 2.5),
        ("4", 4),
        ("4,5", 4.5),
        (" 7.0 ", 7),
        ("", None),
        ("abc", None),
        (None, None),
        (True, None),
        (float("nan"), None),
    ])
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("numerator,denominator,expected", [
        (3, 10, "30%"),
        (1, 8, "13%"),
        (1, 3, "33%"),
        (2, 3, "67%"),
        (12, 10, "120%"),
        (0, 10, "0%"),
        (5, 0, "—"),
        (5, None, "—"),
    ])
    def test_format_percent(self, numerator, denominator, expected):
        assert format_percent(numerator, denominator) == expected


class TestDates:

    def test_year_bounds(self):
        start, end = get_year_bounds(2025)

        assert start == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_parse_timestamp(self):
        assert parse_timestamp("2025-01-10T08:00:00Z") == datetime(2025, 1, 10, 8, tzinfo=timezone.utc)
        assert parse_timestamp("2025-01-10T09:00:00+01:00") == datetime(2025, 1, 10, 8, tzinfo=timezone.utc)
        assert parse_timestamp("2025-01-10") == datetime(2025, 1, 10, tzinfo=timezone.utc)
        assert parse_timestamp("") is None

        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestRoles:

    def test_staff(self):
        assert not is_staff(Role.MEMBER)
        assert all(is_staff(role) for role in (Role.MODERATOR, Role.ADMIN, Role.SUPER))

    def test_privileged(self):
        assert is_privileged(Role.SUPER)
        assert not is_privileged(Role.ADMIN)

    def test_assign(self):
        assert can_assign(Role.MODERATOR, Role.MODERATOR)
        assert not can_assign(Role.MODERATOR, Role.ADMIN)
        assert can_assign(Role.ADMIN, Role.SUPER)
        assert not can_assign(Role.MEMBER, Role.MEMBER)
        assert not can_manage(Role.MODERATOR, Role.SUPER)


class TestPins:

    def test_generated_pins(self):
        pins = {generate_pin() for _ in range(50)}

        assert all(len(pin) == 4 and pin.isdigit() for pin in pins)

    def test_hash_round_trip(self):
        pin_hash = hash_pin("0042")

        assert is_pin_hash(pin_hash)
        assert verify_pin("0042", pin_hash)
        assert not verify_pin("42", pin_hash)
        assert not is_pin_hash("1234")
        assert not is_pin_hash(None)
