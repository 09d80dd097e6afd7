"""Process Roster use case - runs a whole roster through the device updater.

Workflow:
1. Read the roster (read failure or zero records ends the run early)
2. For each record, strictly in order:
   ├── A serial seen earlier in the roster fails without a lookup
   ├── Update the device (UpdateDeviceUseCase)
   ├── Success: report it, append a row to the spreadsheet if configured
   └── Failure: remember the record, report it, optionally ask to continue
3. Write the failed records to the failure report (only if there are any)
4. Return a RunResult describing how the run ended

Key Design Decisions:
- One record finishes completely before the next one starts
- A failed record never stops the batch; only the operator can
- Cancellation is checked between records, never in the middle of one
- An operator abort is returned as RunStatus.ABORTED; the caller decides
  how to exit
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from ...api.exceptions import RosterReadError
from ..domain.entities import (
    RosterRecord,
    RunConfiguration,
    RunResult,
    RunStatus,
    UpdateOutcome,
)
from ..domain.ports import (
    IContinuePrompt,
    IProgressReporter,
    IRosterSink,
    IRosterSource,
    ISpreadsheetLogger,
    NullProgressReporter,
)
from .update_device import UpdateDeviceUseCase

logger = logging.getLogger(__name__)


def build_sheet_row(record: RosterRecord, outcome: UpdateOutcome) -> list[str]:
    """Build the fixed-column spreadsheet row for a successful update.

    Columns: device id, serial, cart, MAC, out of service (blank), model,
    student name, existing asset id, purchase id, damage.
    """
    device = outcome.device
    return [
        outcome.device_id or "",
        record.serial_number,
        record.cart_number or "",
        (device.mac_address if device else None) or "",
        "",
        (device.model if device else None) or "",
        record.student_name or "",
        (device.annotated_asset_id if device else None) or "",
        record.purchase_id or "",
        record.damage or "",
    ]


class ProcessRosterUseCase:
    """Orchestrates one roster run.

    Example:
        use_case = ProcessRosterUseCase(
            config=config,
            updater=UpdateDeviceUseCase(directory, config),
            source=RosterFileReader(),
            sink=FailedRecordWriter(),
            sheets=GoogleSheetsLogger(sheets_client),
            prompt=ConsoleKeyPrompt(),
            reporter=TqdmProgressReporter(),
        )
        result = await use_case.execute()
    """

    def __init__(
        self,
        config: RunConfiguration,
        updater: UpdateDeviceUseCase,
        source: IRosterSource,
        sink: IRosterSink,
        sheets: Optional[ISpreadsheetLogger] = None,
        prompt: Optional[IContinuePrompt] = None,
        reporter: Optional[IProgressReporter] = None,
    ):
        self.config = config
        self.updater = updater
        self.source = source
        self.sink = sink
        self.sheets = sheets
        self.prompt = prompt
        self.reporter = reporter or NullProgressReporter()

    async def execute(self, cancel_event: Optional[asyncio.Event] = None) -> RunResult:
        """Run the roster.

        Args:
            cancel_event: When set, the run stops after the record in flight

        Returns:
            RunResult with the terminal status, outcomes and failed records
        """
        result = RunResult(status=RunStatus.COMPLETED, started_at=datetime.now(timezone.utc))

        try:
            records = self.source.read(self.config.roster_path)
        except RosterReadError as e:
            logger.error(f"Failed to read roster: {e}")
            self.reporter.error(f"[ERROR] Failed to parse roster: {e.message}")
            return self._finish(result, RunStatus.SOURCE_ERROR, error=e.message)

        if not records:
            self.reporter.error("[ERROR] No device records found in roster.")
            return self._finish(result, RunStatus.NO_RECORDS, error="No device records found in roster")

        result.total = len(records)
        mode = " (dry run)" if self.config.dry_run else ""
        logger.info(f"Processing {len(records)} roster records{mode}")

        self.reporter.start(len(records))
        try:
            self.reporter.info(f"Parsed {len(records):,} records from roster...")

            seen: set[str] = set()
            for record in records:
                key = record.serial_number.strip().upper()
                if key in seen:
                    outcome = UpdateOutcome.failure(
                        f"Duplicate serial '{record.serial_number}' in roster, already processed"
                    )
                else:
                    seen.add(key)
                    outcome = await self.updater.execute(record)
                result.outcomes.append(outcome)

                if outcome.success:
                    self.reporter.info(f"[SUCCESS] {outcome.message}")
                    await self._log_to_sheet(record, outcome, result)
                else:
                    result.failed.append(record)
                    self.reporter.error(f"[ERROR] {outcome.message}")

                    if self.config.prompt_on_error and not await self._confirm_continue():
                        logger.warning(
                            f"Run aborted by operator after '{record.serial_number}', "
                            f"{len(records) - result.processed} records not processed"
                        )
                        return self._finish(result, RunStatus.ABORTED)

                self.reporter.advance(record.serial_number)

                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(
                        f"Run cancelled after {result.processed}/{len(records)} records"
                    )
                    result.status = RunStatus.CANCELLED
                    break

            self._export_failures(result)
        finally:
            self.reporter.close()

        return self._finish(result, result.status)

    async def _confirm_continue(self) -> bool:
        if self.prompt is None:
            return True
        self.reporter.info("Press 'y' to continue or any other key to abort:")
        return await self.prompt.confirm_continue()

    async def _log_to_sheet(
        self, record: RosterRecord, outcome: UpdateOutcome, result: RunResult
    ) -> None:
        """Append the success row; a failure here is reported, not fatal."""
        if not self.config.logs_to_sheet or self.sheets is None or self.config.dry_run:
            return

        try:
            await self.sheets.append_row(
                self.config.sheet_id,
                outcome.tab_name,
                build_sheet_row(record, outcome),
            )
        except Exception as e:
            error_msg = f"Failed to log '{record.serial_number}' to sheet tab '{outcome.tab_name}': {e}"
            logger.error(error_msg)
            self.reporter.error(f"[ERROR] {error_msg}")
            result.errors.append(error_msg)

    def _export_failures(self, result: RunResult) -> None:
        if not result.failed:
            return

        path = self.config.failed_csv_path
        try:
            self.sink.write(path, result.failed)
        except Exception as e:
            error_msg = f"Failed to write failed devices report: {e}"
            logger.error(error_msg)
            self.reporter.error(f"[ERROR] {error_msg}")
            result.errors.append(error_msg)
            return

        result.failure_report_path = path
        self.reporter.error(
            f"Failed to update {len(result.failed):,} devices. See '{path}'."
        )

    def _finish(
        self, result: RunResult, status: RunStatus, error: Optional[str] = None
    ) -> RunResult:
        result.status = status
        if error:
            result.errors.append(error)
        result.completed_at = datetime.now(timezone.utc)

        logger.info(
            f"Roster run {status.value}: {result.succeeded} succeeded, "
            f"{len(result.failed)} failed, {result.processed}/{result.total} processed"
        )
        return result
