"""Port interfaces for the roster assignment workflow.

Ports define the contracts between the use cases and the infrastructure.
These are abstract base classes that adapters must implement.

Following the Hexagonal Architecture (Ports and Adapters) pattern:
- Ports are interfaces defined in the domain layer
- Adapters implement these ports in the adapters layer
- Use cases depend only on ports, not concrete implementations
"""

from abc import ABC, abstractmethod
from typing import Optional

from .entities import DevicePatch, DirectoryDevice, RosterRecord


class IDirectoryService(ABC):
    """Port for the directory service holding devices and org units."""

    @abstractmethod
    async def list_org_units(self, customer_id: str) -> list[str]:
        """List the paths of every org unit under the root.

        Args:
            customer_id: Tenant customer id (e.g. "my_customer")

        Returns:
            Org-unit paths such as "/Chromebooks/Cart 3"
        """
        ...

    @abstractmethod
    async def create_org_unit(self, customer_id: str, name: str, parent_path: str) -> None:
        """Create a single org unit below ``parent_path``.

        Args:
            customer_id: Tenant customer id
            name: Name of the new org unit (one path segment)
            parent_path: Path of the existing parent ("/" for the root)
        """
        ...

    @abstractmethod
    async def find_device_by_serial(
        self, customer_id: str, serial_number: str
    ) -> Optional[DirectoryDevice]:
        """Find a Chrome OS device by serial number.

        Returns:
            The first matching device, or None if there is no match
        """
        ...

    @abstractmethod
    async def update_device(
        self, customer_id: str, device_id: str, patch: DevicePatch
    ) -> None:
        """Write asset id, org unit and notes to a device.

        Args:
            customer_id: Tenant customer id
            device_id: Directory-assigned device id (not the serial)
            patch: Values to write
        """
        ...


class ISpreadsheetLogger(ABC):
    """Port for appending result rows to a spreadsheet."""

    @abstractmethod
    async def append_row(self, sheet_id: str, tab_name: str, row: list[str]) -> None:
        """Append one row to the named tab. Never de-duplicates."""
        ...


class IRosterSource(ABC):
    """Port for reading the input roster."""

    @abstractmethod
    def read(self, path: str) -> list[RosterRecord]:
        """Read every record from ``path``.

        Raises:
            RosterReadError: If the file is missing or malformed
        """
        ...


class IRosterSink(ABC):
    """Port for writing failed records back out."""

    @abstractmethod
    def write(self, path: str, records: list[RosterRecord]) -> None:
        """Write ``records`` to ``path``, replacing any existing file.

        Raises:
            RosterWriteError: If the file cannot be written
        """
        ...


class IContinuePrompt(ABC):
    """Port for asking the operator whether to continue after a failure."""

    @abstractmethod
    async def confirm_continue(self) -> bool:
        """Return True to keep going, False to abort the run."""
        ...


class IProgressReporter(ABC):
    """Port for user-facing progress output during a run."""

    @abstractmethod
    def start(self, total: int) -> None:
        ...

    @abstractmethod
    def info(self, message: str) -> None:
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        ...

    @abstractmethod
    def advance(self, label: str) -> None:
        """Mark one record as done."""
        ...

    @abstractmethod
    def close(self) -> None:
        ...


class NullProgressReporter(IProgressReporter):
    """Reporter that discards everything (used when output is not wanted)."""

    def start(self, total: int) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass

    def advance(self, label: str) -> None:
        pass

    def close(self) -> None:
        pass
