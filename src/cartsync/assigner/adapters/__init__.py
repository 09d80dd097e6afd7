"""Adapters layer - Infrastructure implementations for roster runs.

Concrete implementations of the ports defined in the domain layer:
- GoogleDirectoryService: Admin SDK implementation of IDirectoryService
- GoogleSheetsLogger: Sheets API implementation of ISpreadsheetLogger
- RosterFileReader / FailedRecordWriter: CSV/Excel roster source and sink
- ConsoleKeyPrompt / TqdmProgressReporter: terminal interaction
- ChromeDeviceFieldMapper: Directory JSON <-> domain entities
"""

from .console import ConsoleKeyPrompt, TqdmProgressReporter
from .field_mapper import ChromeDeviceFieldMapper
from .google_directory import GoogleDirectoryService
from .google_sheets import GoogleSheetsLogger
from .roster_file import FailedRecordWriter, RosterFileReader

__all__ = [
    "ChromeDeviceFieldMapper",
    "ConsoleKeyPrompt",
    "FailedRecordWriter",
    "GoogleDirectoryService",
    "GoogleSheetsLogger",
    "RosterFileReader",
    "TqdmProgressReporter",
]
