"""Domain entities for the roster assignment workflow.

These are pure data structures with no infrastructure dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

DEFAULT_DEVICE_ID_TEMPLATE = "{CartNumber}-{DeviceNumber}"
DEFAULT_ASSET_ID_TEMPLATE = "{DeviceId} {PurchaseId} {StudentName}"
DEFAULT_OU_TEMPLATE = "/Chromebooks/Cart {CartNumber} {YearRange}"
DEFAULT_TAB_NAME_TEMPLATE = "Cart {CartNumber} {YearRange}"
DEFAULT_FAILED_CSV_PATH = "failed-devices.csv"


@dataclass(frozen=True)
class RosterRecord:
    """One row of the input roster.

    The serial number is the key within a run; every other field is optional
    and is None when the column is missing or the cell is blank.
    """

    serial_number: str
    cart_number: Optional[str] = None
    device_number: Optional[str] = None
    student_name: Optional[str] = None
    damage: Optional[str] = None
    purchase_id: Optional[str] = None


@dataclass
class DirectoryDevice:
    """A Chrome OS device as returned by the directory service.

    The raw_data field preserves the full API response for auditability.
    """

    device_id: str
    serial_number: Optional[str] = None
    org_unit_path: Optional[str] = None
    notes: Optional[str] = None
    annotated_asset_id: Optional[str] = None
    model: Optional[str] = None
    mac_address: Optional[str] = None
    raw_data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DevicePatch:
    """The fields written back to a device by an update call."""

    annotated_asset_id: str
    org_unit_path: Optional[str]
    notes: Optional[str]


@dataclass
class UpdateOutcome:
    """Result of processing one roster record.

    Besides the success flag and message, the outcome carries the values
    resolved from the templates so callers do not need to resolve twice.
    """

    success: bool
    message: str
    device: Optional[DirectoryDevice] = None
    device_id: Optional[str] = None
    asset_id: Optional[str] = None
    org_unit_path: Optional[str] = None
    tab_name: Optional[str] = None
    patch: Optional[DevicePatch] = None

    @classmethod
    def failure(cls, message: str, device: Optional[DirectoryDevice] = None) -> "UpdateOutcome":
        return cls(success=False, message=message, device=device)


@dataclass(frozen=True)
class SegmentResult:
    """Outcome of materializing one org-unit segment.

    ``created`` is False both when the segment already existed and when
    creation failed; ``error`` distinguishes the two.
    """

    path: str
    created: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RunConfiguration:
    """Immutable settings for one roster run."""

    customer_id: str = "my_customer"
    admin_user: Optional[str] = None
    service_account_path: str = "service-account.json"
    roster_path: str = "devices.csv"
    dry_run: bool = False
    prompt_on_error: bool = False
    cart_number: Optional[str] = None
    device_id_template: str = DEFAULT_DEVICE_ID_TEMPLATE
    asset_id_template: str = DEFAULT_ASSET_ID_TEMPLATE
    ou_template: str = DEFAULT_OU_TEMPLATE
    tab_name_template: str = DEFAULT_TAB_NAME_TEMPLATE
    sheet_id: Optional[str] = None
    failed_csv_path: str = DEFAULT_FAILED_CSV_PATH

    @property
    def logs_to_sheet(self) -> bool:
        return bool(self.sheet_id)


class RunStatus(str, Enum):
    """Terminal state of a roster run."""

    COMPLETED = "completed"
    NO_RECORDS = "no_records"
    SOURCE_ERROR = "source_error"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


EXIT_CODES = {
    RunStatus.COMPLETED: 0,
    RunStatus.ABORTED: 1,
    RunStatus.NO_RECORDS: 2,
    RunStatus.SOURCE_ERROR: 2,
    RunStatus.CANCELLED: 130,
}


@dataclass
class RunResult:
    """Result of a roster run, returned instead of completion/error events."""

    status: RunStatus
    total: int = 0
    outcomes: list[UpdateOutcome] = field(default_factory=list)
    failed: list[RosterRecord] = field(default_factory=list)
    failure_report_path: Optional[str] = None
    errors: list[str] = field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.status]

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and JSON summaries."""
        return {
            "status": self.status.value,
            "total": self.total,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": len(self.failed),
            "failure_report_path": self.failure_report_path,
            "errors": list(self.errors),
        }
