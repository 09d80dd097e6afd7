"""Field mapper between Directory API JSON and domain entities.

Encapsulates the camelCase field names of the Admin SDK Chrome OS device
resource so the rest of the code only deals with DirectoryDevice and
DevicePatch.
"""

from typing import Any

from ..domain.entities import DevicePatch, DirectoryDevice


class ChromeDeviceFieldMapper:
    """Maps Chrome OS device resources to DirectoryDevice and back.

    Only the fields this tool reads or writes are mapped; the full resource
    is kept in ``raw_data``.
    """

    def map_to_entity(self, raw: dict[str, Any]) -> DirectoryDevice:
        """Transform a chromeosdevices resource into a DirectoryDevice."""
        return DirectoryDevice(
            device_id=raw["deviceId"],
            serial_number=raw.get("serialNumber"),
            org_unit_path=raw.get("orgUnitPath"),
            notes=raw.get("notes"),
            annotated_asset_id=raw.get("annotatedAssetId"),
            model=raw.get("model"),
            mac_address=raw.get("macAddress"),
            raw_data=raw,
        )

    def map_patch(self, patch: DevicePatch) -> dict[str, Any]:
        """Transform a DevicePatch into the request body for an update call.

        Fields that are None are left out so the API keeps their values.
        """
        body = {
            "annotatedAssetId": patch.annotated_asset_id,
            "orgUnitPath": patch.org_unit_path,
            "notes": patch.notes,
        }
        return {key: value for key, value in body.items() if value is not None}
