"""Use cases layer - Business logic orchestration for roster runs.

- OrgUnitMaterializer: creates missing org-unit segments root-to-leaf
- UpdateDeviceUseCase: applies one roster record to its device
- ProcessRosterUseCase: runs the whole roster and reports the result

Use cases depend only on ports, not concrete implementations.
"""

from .materialize_org_unit import OrgUnitMaterializer, normalize_org_unit_path, split_org_unit_path
from .process_roster import ProcessRosterUseCase, build_sheet_row
from .update_device import DRY_RUN_PREFIX, UpdateDeviceUseCase, compose_notes

__all__ = [
    "DRY_RUN_PREFIX",
    "OrgUnitMaterializer",
    "ProcessRosterUseCase",
    "UpdateDeviceUseCase",
    "build_sheet_row",
    "compose_notes",
    "normalize_org_unit_path",
    "split_org_unit_path",
]
