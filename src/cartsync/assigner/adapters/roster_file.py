"""Roster file adapters.

RosterFileReader implements IRosterSource for CSV and Excel rosters.
FailedRecordWriter implements IRosterSink and writes failed records as CSV
with the canonical roster columns.

Expected roster format (header names are matched case-insensitively,
ignoring spaces, underscores and hyphens):

| SerialNumber | CartNumber | DeviceNumber | StudentName | Damage | PurchaseId |
|--------------|------------|--------------|-------------|--------|------------|
| 5CD1234XYZ   | 3          | 07           | Ada L.      |        | PO-2291    |

Only the serial number column is required.
"""

import csv
import io
import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Optional

from openpyxl import load_workbook

from ...api.exceptions import RosterReadError, RosterWriteError
from ..domain.entities import RosterRecord
from ..domain.ports import IRosterSink, IRosterSource

logger = logging.getLogger(__name__)

# Canonical column names, in RosterRecord field order
CANONICAL_COLUMNS = {
    "serial_number": "SerialNumber",
    "cart_number": "CartNumber",
    "device_number": "DeviceNumber",
    "student_name": "StudentName",
    "damage": "Damage",
    "purchase_id": "PurchaseId",
}

# Accepted header spellings after normalization
COLUMN_ALIASES = {
    "serial_number": ["serialnumber", "serial", "sn"],
    "cart_number": ["cartnumber", "cart", "cartno"],
    "device_number": ["devicenumber", "deviceno", "device", "number"],
    "student_name": ["studentname", "student", "name"],
    "damage": ["damage", "damagenote", "damagenotes"],
    "purchase_id": ["purchaseid", "purchase", "po", "ponumber"],
}

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def normalize_header(header: Any) -> str:
    """Lowercase a header and drop spaces, underscores and hyphens."""
    text = str(header or "").strip().lower()
    for char in (" ", "_", "-"):
        text = text.replace(char, "")
    return text


def cell_text(value: Any) -> Optional[str]:
    """Turn a CSV/Excel cell into stripped text, or None when blank.

    Whole-number floats from Excel (``3.0``) become ``"3"``.
    """
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


class RosterFileReader(IRosterSource):
    """Reads a roster from a CSV or Excel file into RosterRecords.

    Rows with a blank serial number are skipped. Repeated serial numbers
    are kept; the roster run decides what to do with them.
    """

    def read(self, path: str) -> list[RosterRecord]:
        roster_path = Path(path)
        if not roster_path.is_file():
            raise RosterReadError(f"Roster file not found: {path}", path=path)

        try:
            if roster_path.suffix.lower() in EXCEL_SUFFIXES:
                header, rows = self._read_excel(roster_path)
            else:
                header, rows = self._read_csv(roster_path)
        except RosterReadError:
            raise
        except Exception as e:
            logger.error(f"Failed to parse roster {path}: {e}")
            raise RosterReadError(f"Failed to parse roster: {e}", path=path, cause=e)

        if not header and not rows:
            logger.warning(f"Roster {path} is empty")
            return []

        columns = self._find_columns(header)
        if "serial_number" not in columns:
            raise RosterReadError(
                f"Could not find SerialNumber column. "
                f"Expected one of: {', '.join(COLUMN_ALIASES['serial_number'])}",
                path=path,
            )

        records = self._build_records(rows, columns)
        logger.info(f"Parsed {len(records)} records from {path}")
        return records

    def _read_csv(self, path: Path) -> tuple[list[Any], list[list[Any]]]:
        text = path.read_text(encoding="utf-8-sig")
        if not text.strip():
            return [], []

        try:
            dialect = csv.Sniffer().sniff(text[:1024], delimiters=",;\t")
        except csv.Error:
            dialect = csv.excel

        reader = csv.reader(io.StringIO(text), dialect)
        header = next(reader, [])
        return header, list(reader)

    def _read_excel(self, path: Path) -> tuple[list[Any], list[list[Any]]]:
        wb = load_workbook(filename=path, read_only=True, data_only=True)
        try:
            ws = wb.active
            if ws is None:
                raise RosterReadError("Excel roster has no active worksheet", path=str(path))

            rows = [list(row) for row in ws.iter_rows(values_only=True)]
        finally:
            wb.close()

        if not rows:
            return [], []
        return rows[0], rows[1:]

    def _find_columns(self, header: list[Any]) -> dict[str, int]:
        """Map RosterRecord field names to column indices."""
        columns: dict[str, int] = {}
        for idx, cell in enumerate(header):
            name = normalize_header(cell)
            if not name:
                continue
            for field_name, aliases in COLUMN_ALIASES.items():
                if name in aliases and field_name not in columns:
                    columns[field_name] = idx
                    break
        return columns

    def _build_records(
        self, rows: list[list[Any]], columns: dict[str, int]
    ) -> list[RosterRecord]:
        records: list[RosterRecord] = []

        for row in rows:
            values = {
                field_name: cell_text(row[idx]) if idx < len(row) else None
                for field_name, idx in columns.items()
            }

            serial = values.get("serial_number")
            if not serial:
                continue

            records.append(RosterRecord(**values))

        return records


class FailedRecordWriter(IRosterSink):
    """Writes roster records to CSV using the canonical column names."""

    def write(self, path: str, records: list[RosterRecord]) -> None:
        field_names = [f.name for f in fields(RosterRecord)]
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow([CANONICAL_COLUMNS[name] for name in field_names])
                for record in records:
                    writer.writerow(
                        [getattr(record, name) or "" for name in field_names]
                    )
        except OSError as e:
            raise RosterWriteError(f"Could not write {path}: {e}", path=path, cause=e)

        logger.info(f"Wrote {len(records)} failed records to {path}")
