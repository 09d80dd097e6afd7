"""Assigner module - Clean Architecture implementation of roster runs.

Reads a Chromebook roster, resolves per-record identifiers from templates,
makes sure the target org units exist and updates each device in the
directory, optionally logging results to a spreadsheet.

Architecture:
    domain/     - Pure entities, templates and port interfaces
    use_cases/  - Org-unit materializer, device updater, roster orchestrator
    adapters/   - Infrastructure implementations (Google APIs, files, console)
"""

from .domain.entities import (
    DevicePatch,
    DirectoryDevice,
    RosterRecord,
    RunConfiguration,
    RunResult,
    RunStatus,
    SegmentResult,
    UpdateOutcome,
)
from .domain.ports import (
    IContinuePrompt,
    IDirectoryService,
    IProgressReporter,
    IRosterSink,
    IRosterSource,
    ISpreadsheetLogger,
)

__all__ = [
    # Entities
    "DevicePatch",
    "DirectoryDevice",
    "RosterRecord",
    "RunConfiguration",
    "RunResult",
    "RunStatus",
    "SegmentResult",
    "UpdateOutcome",
    # Ports
    "IContinuePrompt",
    "IDirectoryService",
    "IProgressReporter",
    "IRosterSink",
    "IRosterSource",
    "ISpreadsheetLogger",
]
