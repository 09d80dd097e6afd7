"""Domain layer - Pure domain entities, templates and port interfaces.

This layer contains:
- Entities: Pure data structures representing business objects
- Templates: Placeholder resolution for identifiers and paths
- Ports: Abstract interfaces defining contracts for adapters

No infrastructure dependencies allowed in this layer.
"""

from .entities import (
    DevicePatch,
    DirectoryDevice,
    RosterRecord,
    RunConfiguration,
    RunResult,
    RunStatus,
    SegmentResult,
    UpdateOutcome,
)
from .ports import (
    IContinuePrompt,
    IDirectoryService,
    IProgressReporter,
    IRosterSink,
    IRosterSource,
    ISpreadsheetLogger,
    NullProgressReporter,
)
from .templates import build_context, resolve, resolve_normalized

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
    # Templates
    "build_context",
    "resolve",
    "resolve_normalized",
    # Ports
    "IContinuePrompt",
    "IDirectoryService",
    "IProgressReporter",
    "IRosterSink",
    "IRosterSource",
    "ISpreadsheetLogger",
    "NullProgressReporter",
]
