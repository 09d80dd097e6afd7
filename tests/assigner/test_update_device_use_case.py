"""Tests for the UpdateDeviceUseCase.

These tests use an in-memory directory port to test the use case in
isolation.
"""

from datetime import date
from typing import Optional

import pytest

from src.cartsync.api.exceptions import ServerError
from src.cartsync.assigner.domain.entities import (
    DevicePatch,
    DirectoryDevice,
    RosterRecord,
    RunConfiguration,
)
from src.cartsync.assigner.domain.ports import IDirectoryService
from src.cartsync.assigner.use_cases.update_device import UpdateDeviceUseCase, compose_notes


class MockDirectoryService(IDirectoryService):
    """In-memory directory that records every mutating call."""

    def __init__(
        self,
        devices: Optional[dict[str, DirectoryDevice]] = None,
        org_units: Optional[list[str]] = None,
        update_error: Optional[Exception] = None,
    ):
        self.devices = devices or {}
        self.org_units = list(org_units or [])
        self.update_error = update_error
        self.created: list[tuple[str, str]] = []
        self.updates: list[tuple[str, DevicePatch]] = []
        self.lookups: list[str] = []

    async def list_org_units(self, customer_id: str) -> list[str]:
        return list(self.org_units)

    async def create_org_unit(self, customer_id: str, name: str, parent_path: str) -> None:
        self.created.append((name, parent_path))
        prefix = "" if parent_path == "/" else parent_path
        self.org_units.append(f"{prefix}/{name}")

    async def find_device_by_serial(self, customer_id: str, serial_number: str) -> Optional[DirectoryDevice]:
        self.lookups.append(serial_number)
        return self.devices.get(serial_number)

    async def update_device(self, customer_id: str, device_id: str, patch: DevicePatch) -> None:
        if self.update_error:
            raise self.update_error
        self.updates.append((device_id, patch))


def fixed_today() -> date:
    return date(2026, 10, 18)


@pytest.fixture
def device():
    return DirectoryDevice(
        device_id="dev-001",
        serial_number="SN1",
        org_unit_path="/Unassigned",
        notes=None,
        annotated_asset_id="OLD",
        model="Chromebook 11",
        mac_address="aa:bb:cc:dd:ee:ff",
    )


@pytest.fixture
def record():
    return RosterRecord(
        serial_number="SN1",
        cart_number="3",
        device_number="07",
        student_name="Ada",
        purchase_id="PO-1",
    )


@pytest.fixture
def config():
    return RunConfiguration(customer_id="my_customer", admin_user="admin@example.com")


class TestComposeNotes:
    def test_empty_notes_become_asset_id(self):
        assert compose_notes("A", None) == "A"
        assert compose_notes("A", "") == "A"

    def test_existing_notes_are_wrapped(self):
        assert compose_notes("A", "N") == "A (N)"

    def test_notes_equal_to_asset_id_are_wrapped(self):
        assert compose_notes("A", "A") == "A (A)"

    def test_notes_from_previous_run_are_wrapped(self):
        assert compose_notes("B", "A (N)") == "B (A (N))"


class TestUpdateDeviceUseCase:
    """Tests for UpdateDeviceUseCase.execute."""

    async def test_successful_update(self, record, device, config):
        directory = MockDirectoryService(devices={"SN1": device})
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        outcome = await use_case.execute(record)

        assert outcome.success is True
        assert outcome.device_id == "3-07"
        assert outcome.asset_id == "3-07 PO-1 Ada"
        assert outcome.org_unit_path == "/Chromebooks/Cart 3 2026-27"
        assert outcome.tab_name == "Cart 3 2026-27"
        assert outcome.message == (
            "Updated device: 'SN1', Asset: 3-07 PO-1 Ada, OU: /Chromebooks/Cart 3 2026-27"
        )

        assert directory.updates == [
            (
                "dev-001",
                DevicePatch(
                    annotated_asset_id="3-07 PO-1 Ada",
                    org_unit_path="/Chromebooks/Cart 3 2026-27",
                    notes="3-07 PO-1 Ada",
                ),
            )
        ]
        assert directory.created == [("Chromebooks", "/"), ("Cart 3 2026-27", "/Chromebooks")]

    async def test_notes_prefixed_with_asset_id(self, record, device, config):
        device.notes = "N"
        directory = MockDirectoryService(devices={"SN1": device})
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        await use_case.execute(record)

        _, patch = directory.updates[0]
        assert patch.notes == "3-07 PO-1 Ada (N)"

    async def test_device_not_found(self, record, config):
        directory = MockDirectoryService()
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        outcome = await use_case.execute(record)

        assert outcome.success is False
        assert outcome.message == "Device not found for serial 'SN1'"
        assert directory.updates == []
        assert directory.created == []

    async def test_serial_is_trimmed_for_lookup(self, device, config):
        directory = MockDirectoryService(devices={"SN1": device})
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        await use_case.execute(RosterRecord(serial_number=" SN1 ", cart_number="3"))

        assert directory.lookups == ["SN1"]

    async def test_dry_run_makes_no_changes(self, record, device):
        config = RunConfiguration(admin_user="admin@example.com", dry_run=True)
        directory = MockDirectoryService(devices={"SN1": device})
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        outcome = await use_case.execute(record)

        assert outcome.success is True
        assert outcome.message.startswith("[Dry Run]")
        assert "Asset: 3-07 PO-1 Ada" in outcome.message
        assert directory.updates == []
        assert directory.created == []

    async def test_update_error_becomes_failed_outcome(self, record, device, config):
        directory = MockDirectoryService(
            devices={"SN1": device},
            update_error=ServerError("Backend Error", status_code=503),
        )
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        outcome = await use_case.execute(record)

        assert outcome.success is False
        assert outcome.message == (
            "Error updating device 'SN1': [SERVER_ERROR] Backend Error (HTTP 503)"
        )

    async def test_cart_number_from_config(self, device):
        config = RunConfiguration(admin_user="admin@example.com", cart_number="9")
        directory = MockDirectoryService(devices={"SN1": device})
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        outcome = await use_case.execute(RosterRecord(serial_number="SN1", device_number="01"))

        assert outcome.device_id == "9-01"
        assert outcome.asset_id == "9-01"

    async def test_unknown_placeholders_in_asset_id_are_kept(self, record, device):
        config = RunConfiguration(
            admin_user="admin@example.com",
            asset_id_template="{DeviceId}-{Room}",
        )
        directory = MockDirectoryService(devices={"SN1": device})
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        outcome = await use_case.execute(record)

        assert outcome.asset_id == "3-07-{Room}"

    async def test_unknown_placeholders_in_ou_are_blanked(self, record, device):
        config = RunConfiguration(
            admin_user="admin@example.com",
            ou_template="/Chromebooks/{Room}/Cart {CartNumber}",
        )
        directory = MockDirectoryService(devices={"SN1": device})
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        outcome = await use_case.execute(record)

        assert outcome.org_unit_path == "/Chromebooks/Cart 3"

    async def test_empty_ou_keeps_current_org_unit(self, record, device):
        config = RunConfiguration(admin_user="admin@example.com", ou_template="")
        directory = MockDirectoryService(devices={"SN1": device})
        use_case = UpdateDeviceUseCase(directory, config, today=fixed_today)

        outcome = await use_case.execute(record)

        assert outcome.success is True
        assert directory.created == []
        _, patch = directory.updates[0]
        assert patch.org_unit_path == "/Unassigned"
