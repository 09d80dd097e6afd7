"""Tests for placeholder template resolution."""

from datetime import date

import pytest

from src.cartsync.assigner.domain.entities import RosterRecord
from src.cartsync.assigner.domain.templates import (
    build_context,
    normalize_whitespace,
    resolve,
    resolve_normalized,
    year_range,
)


class TestResolve:
    """Tests for resolve()."""

    def test_substitutes_known_placeholders(self):
        result = resolve("{CartNumber}-{DeviceNumber}", {"CartNumber": "3", "DeviceNumber": "07"})
        assert result == "3-07"

    def test_unknown_placeholder_preserved_by_default(self):
        result = resolve("{CartNumber}-{Typo}", {"CartNumber": "3"})
        assert result == "3-{Typo}"

    def test_unknown_placeholder_blanked_when_not_preserving(self):
        result = resolve("/Carts/{Typo}/{CartNumber}", {"CartNumber": "3"}, preserve_unknown=False)
        assert result == "/Carts//3"

    def test_known_placeholder_with_none_value_is_empty(self):
        result = resolve("{DeviceId} {PurchaseId}", {"DeviceId": "3-07", "PurchaseId": None})
        assert result == "3-07 "

    def test_repeated_placeholder(self):
        assert resolve("{A}{A}", {"A": "x"}) == "xx"

    @pytest.mark.parametrize("template", ["", None])
    def test_empty_template(self, template):
        assert resolve(template, {"A": "x"}) == ""

    @pytest.mark.parametrize("preserve_unknown", [True, False])
    def test_repeatable(self, preserve_unknown):
        context = {"CartNumber": "3", "StudentName": None}
        template = "Cart {CartNumber} {StudentName} {Other}"

        first = resolve(template, context, preserve_unknown)
        second = resolve(template, context, preserve_unknown)

        assert first == second

    def test_template_without_placeholders(self):
        assert resolve("Static text", {"A": "x"}) == "Static text"


class TestNormalizeWhitespace:
    def test_collapses_and_trims(self):
        assert normalize_whitespace("  3-07   PO-1  ") == "3-07 PO-1"

    def test_tabs_and_newlines(self):
        assert normalize_whitespace("a\t\tb\nc") == "a b c"

    def test_resolve_normalized_drops_gaps_from_missing_fields(self):
        context = {"DeviceId": "3-07", "PurchaseId": None, "StudentName": "Ada"}
        result = resolve_normalized("{DeviceId} {PurchaseId} {StudentName}", context)
        assert result == "3-07 Ada"


class TestYearRange:
    def test_regular_year(self):
        assert year_range(date(2026, 3, 1)) == "2026-27"

    def test_century_rollover(self):
        assert year_range(date(2099, 9, 1)) == "2099-00"


class TestBuildContext:
    """Tests for build_context()."""

    def test_all_names_present(self):
        record = RosterRecord(
            serial_number="SN1",
            cart_number="3",
            device_number="07",
            student_name="Ada",
            purchase_id="PO-1",
        )

        context = build_context(record, today=date(2026, 10, 18))

        assert context == {
            "CartNumber": "3",
            "DeviceNumber": "07",
            "SerialNumber": "SN1",
            "PurchaseId": "PO-1",
            "DeviceId": None,
            "StudentName": "Ada",
            "Year": "2026",
            "YearRange": "2026-27",
        }

    def test_record_cart_number_wins(self):
        record = RosterRecord(serial_number="SN1", cart_number="5")
        context = build_context(record, cart_number="3", today=date(2026, 1, 1))
        assert context["CartNumber"] == "5"

    def test_config_cart_number_used_when_record_has_none(self):
        record = RosterRecord(serial_number="SN1")
        context = build_context(record, cart_number="3", today=date(2026, 1, 1))
        assert context["CartNumber"] == "3"

    def test_device_id_passed_through(self):
        record = RosterRecord(serial_number="SN1")
        context = build_context(record, device_id="3-07", today=date(2026, 1, 1))
        assert context["DeviceId"] == "3-07"
