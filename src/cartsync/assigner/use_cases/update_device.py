"""Update Device use case - applies one roster record to its directory device.

Workflow:
1. Look up the device by serial number (not found = failure)
2. Build the template context from the record, run config and date
3. Resolve device id, asset id, org-unit path and tab name
4. Compose the new notes value
5. Dry run: report the would-be state and stop
6. Otherwise materialize the org unit, then update the device

Any exception is turned into a failed UpdateOutcome; nothing is retried here.
"""

import logging
from datetime import date
from typing import Callable, Optional

from ..domain.entities import (
    DevicePatch,
    DirectoryDevice,
    RosterRecord,
    RunConfiguration,
    UpdateOutcome,
)
from ..domain.ports import IDirectoryService
from ..domain.templates import DEVICE_ID, build_context, resolve_normalized
from .materialize_org_unit import OrgUnitMaterializer, normalize_org_unit_path

logger = logging.getLogger(__name__)

DRY_RUN_PREFIX = "[Dry Run]"


def compose_notes(asset_id: str, existing_notes: Optional[str]) -> Optional[str]:
    """Prefix the existing device notes with the asset id.

    Empty notes become the asset id; otherwise ``"{asset_id} ({existing})"``.
    Notes that already equal the composed value are returned unchanged.
    """
    if not existing_notes:
        return asset_id

    composed = f"{asset_id} ({existing_notes})"
    return existing_notes if composed == existing_notes else composed


class UpdateDeviceUseCase:
    """Resolves templates for a record and updates the matching device.

    Example:
        use_case = UpdateDeviceUseCase(directory, config)
        outcome = await use_case.execute(record)
    """

    def __init__(
        self,
        directory: IDirectoryService,
        config: RunConfiguration,
        materializer: Optional[OrgUnitMaterializer] = None,
        today: Callable[[], date] = date.today,
    ):
        """Initialize the use case with its dependencies.

        Args:
            directory: Port for device lookup and update
            config: Run configuration (templates, customer id, dry-run flag)
            materializer: Org-unit materializer; built from ``directory`` if omitted
            today: Clock used for {Year} and {YearRange}
        """
        self.directory = directory
        self.config = config
        self.materializer = materializer or OrgUnitMaterializer(directory, config.customer_id)
        self._today = today

    async def execute(self, record: RosterRecord) -> UpdateOutcome:
        serial = record.serial_number
        try:
            device = await self.directory.find_device_by_serial(
                self.config.customer_id, serial.strip()
            )
            if device is None or not device.device_id:
                return UpdateOutcome.failure(f"Device not found for serial '{serial}'")

            outcome = self._plan(record, device)

            if self.config.dry_run:
                outcome.message = (
                    f"{DRY_RUN_PREFIX} '{device.serial_number or serial}', "
                    f"Asset: {outcome.asset_id}, OU: {outcome.patch.org_unit_path}"
                )
                return outcome

            if outcome.org_unit_path:
                results = await self.materializer.ensure_exists(outcome.org_unit_path)
                for failed in (r for r in results if not r.ok):
                    logger.warning(f"OU segment {failed.path} unavailable for '{serial}': {failed.error}")

            await self.directory.update_device(
                self.config.customer_id, device.device_id, outcome.patch
            )
            outcome.message = (
                f"Updated device: '{serial}', Asset: {outcome.asset_id}, "
                f"OU: {outcome.patch.org_unit_path}"
            )
            return outcome

        except Exception as e:
            logger.debug(f"Update failed for '{serial}'", exc_info=True)
            return UpdateOutcome.failure(f"Error updating device '{serial}': {e}")

    def _plan(self, record: RosterRecord, device: DirectoryDevice) -> UpdateOutcome:
        """Resolve templates and build the patch for a found device."""
        context = build_context(record, self.config.cart_number, today=self._today())

        device_id = resolve_normalized(self.config.device_id_template, context)
        context[DEVICE_ID] = device_id

        asset_id = resolve_normalized(self.config.asset_id_template, context)
        # Unknown placeholders are blanked so they never become org-unit names
        org_unit_path = normalize_org_unit_path(
            resolve_normalized(self.config.ou_template, context, preserve_unknown=False)
        )
        tab_name = resolve_normalized(self.config.tab_name_template, context)

        patch = DevicePatch(
            annotated_asset_id=asset_id,
            org_unit_path=org_unit_path or device.org_unit_path,
            notes=compose_notes(asset_id, device.notes),
        )

        return UpdateOutcome(
            success=True,
            message="",
            device=device,
            device_id=device_id,
            asset_id=asset_id,
            org_unit_path=org_unit_path,
            tab_name=tab_name,
            patch=patch,
        )
