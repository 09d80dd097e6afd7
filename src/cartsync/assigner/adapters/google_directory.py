"""Google Admin SDK Directory adapter.

This adapter implements IDirectoryService on top of GoogleAPIClient for the
org-unit and Chrome OS device endpoints.
"""

import logging
from typing import TYPE_CHECKING, Optional
from urllib.parse import quote

from ..domain.entities import DevicePatch, DirectoryDevice
from ..domain.ports import IDirectoryService
from .field_mapper import ChromeDeviceFieldMapper

if TYPE_CHECKING:
    from ...api.client import GoogleAPIClient

logger = logging.getLogger(__name__)

ORG_UNIT_DESCRIPTION = "Created by cartsync"


class GoogleDirectoryService(IDirectoryService):
    """Directory API adapter for org units and Chrome OS devices.

    The client must be configured with DIRECTORY_BASE_URL.
    """

    def __init__(
        self,
        client: "GoogleAPIClient",
        field_mapper: Optional[ChromeDeviceFieldMapper] = None,
    ):
        self.client = client
        self.mapper = field_mapper or ChromeDeviceFieldMapper()

    @staticmethod
    def _customer(customer_id: str) -> str:
        return f"/customer/{quote(customer_id, safe='')}"

    async def list_org_units(self, customer_id: str) -> list[str]:
        """List every org unit below the root (type=all)."""
        data = await self.client.get(
            f"{self._customer(customer_id)}/orgunits",
            params={"type": "all", "orgUnitPath": "/"},
        )
        units = data.get("organizationUnits") or []
        paths = [unit["orgUnitPath"] for unit in units if unit.get("orgUnitPath")]
        logger.debug(f"Listed {len(paths)} org units for {customer_id}")
        return paths

    async def create_org_unit(self, customer_id: str, name: str, parent_path: str) -> None:
        await self.client.post(
            f"{self._customer(customer_id)}/orgunits",
            json_body={
                "name": name,
                "parentOrgUnitPath": parent_path,
                "description": ORG_UNIT_DESCRIPTION,
            },
        )

    async def find_device_by_serial(
        self, customer_id: str, serial_number: str
    ) -> Optional[DirectoryDevice]:
        """Query devices with ``id:<serial>`` and return the first result."""
        data = await self.client.get(
            f"{self._customer(customer_id)}/devices/chromeos",
            params={
                "query": f"id:{serial_number.strip()}",
                "maxResults": 1,
                "projection": "FULL",
            },
        )
        devices = data.get("chromeosdevices") or []
        if not devices:
            return None
        return self.mapper.map_to_entity(devices[0])

    async def update_device(
        self, customer_id: str, device_id: str, patch: DevicePatch
    ) -> None:
        await self.client.put(
            f"{self._customer(customer_id)}/devices/chromeos/{quote(device_id, safe='')}",
            json_body=self.mapper.map_patch(patch),
        )
