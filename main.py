#!/usr/bin/env python3
"""Chromebook Cart Sync CLI.

Reads a roster of Chromebooks (CSV or Excel), and for every row updates the
matching Chrome OS device in Google Workspace: annotated asset id, notes and
org unit, all built from templates. Missing org units are created on the
way. Successful updates can be logged to a Google Sheet, and rows that fail
are written to ``failed-devices.csv`` for a later re-run.

Architecture:
    - GoogleAPIClient is the shared HTTP layer for Directory and Sheets calls
    - ServiceAccountTokenManager handles the delegated service-account grant
    - ProcessRosterUseCase orchestrates the run and returns a RunResult

Configuration (later wins):
    - CARTSYNC_* environment variables (a .env file is loaded)
    - config.json in the current directory (or --config FILE)
    - command-line flags

Example Usage:
    $ python main.py                                    # Uses config.json
    $ python main.py --csv devices.csv --cart-number 3 --dry-run
    $ python main.py --adminUser=admin@example.com --customerId=my_customer \\
          --serviceAccount=service-account.json --promptOnError
    $ python main.py --cart-number 4 --save-config      # Persist flags to config.json

Exit codes:
    0  run completed (failed rows, if any, are in the failure report)
    1  operator chose not to continue after a failure
    2  configuration error, unreadable roster or empty roster
    130 interrupted
"""
import argparse
import asyncio
import logging
import signal
import sys
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Local imports
from src.cartsync.api import (
    DEFAULT_SCOPES,
    DIRECTORY_BASE_URL,
    SHEETS_BASE_URL,
    SHEETS_SCOPE,
    ConfigurationError,
    GoogleAPIClient,
    ServiceAccountTokenManager,
)
from src.cartsync.assigner.adapters import (
    ConsoleKeyPrompt,
    FailedRecordWriter,
    GoogleDirectoryService,
    GoogleSheetsLogger,
    RosterFileReader,
    TqdmProgressReporter,
)
from src.cartsync.assigner.domain.entities import RunConfiguration, RunResult, RunStatus
from src.cartsync.assigner.use_cases import ProcessRosterUseCase, UpdateDeviceUseCase
from src.cartsync.config import (
    DEFAULT_CONFIG_FILE,
    apply_overrides,
    config_from_env,
    load_config,
    save_config,
    validate_config,
)

logger = logging.getLogger(__name__)


async def run_roster(config: RunConfiguration, show_progress: bool = True) -> RunResult:
    """Run one roster with the Google adapters wired in.

    Args:
        config: Validated run configuration
        show_progress: Draw a progress bar

    Returns:
        RunResult describing how the run ended
    """
    scopes = list(DEFAULT_SCOPES)
    if config.logs_to_sheet:
        scopes.append(SHEETS_SCOPE)

    token_manager = ServiceAccountTokenManager(
        service_account_file=config.service_account_path,
        subject=config.admin_user,
        scopes=scopes,
    )

    cancel_event = asyncio.Event()

    def handle_interrupt():
        print("\n[Main] Interrupt received, stopping after the current device...")
        cancel_event.set()

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, handle_interrupt)
    except NotImplementedError:
        # Windows event loops have no signal handler support
        pass

    try:
        async with GoogleAPIClient(token_manager, DIRECTORY_BASE_URL) as directory_client, \
                GoogleAPIClient(token_manager, SHEETS_BASE_URL) as sheets_client:
            directory = GoogleDirectoryService(directory_client)

            use_case = ProcessRosterUseCase(
                config=config,
                updater=UpdateDeviceUseCase(directory, config),
                source=RosterFileReader(),
                sink=FailedRecordWriter(),
                sheets=GoogleSheetsLogger(sheets_client) if config.logs_to_sheet else None,
                prompt=ConsoleKeyPrompt(),
                reporter=TqdmProgressReporter(disable=not show_progress),
            )
            return await use_case.execute(cancel_event=cancel_event)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except NotImplementedError:
            pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Assign Chromebooks from a roster: asset ids, notes and org units",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                  # Use config.json
  python main.py --csv devices.csv --dry-run      # Preview without changes
  python main.py --cart-number 3 --prompt-on-error
  python main.py --cart-number 3 --save-config    # Write flags to config.json

Template placeholders:
  {CartNumber} {DeviceNumber} {SerialNumber} {PurchaseId}
  {DeviceId} {StudentName} {Year} {YearRange}
        """,
    )

    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_FILE,
        metavar="FILE",
        help=f"JSON config file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Write the merged configuration to --config before running",
    )

    # camelCase spellings match the config.json keys
    google_group = parser.add_argument_group("Google Workspace")
    google_group.add_argument("--customer-id", "--customerId", dest="customerId", metavar="ID")
    google_group.add_argument("--admin-user", "--adminUser", dest="adminUser", metavar="EMAIL")
    google_group.add_argument(
        "--service-account", "--serviceAccount", dest="serviceAccount", metavar="FILE"
    )
    google_group.add_argument(
        "--sheet-id", "--googleSheetId", dest="googleSheetId", metavar="ID",
        help="Log successful updates to this spreadsheet",
    )

    roster_group = parser.add_argument_group("Roster")
    roster_group.add_argument("--csv", dest="csv", metavar="FILE", help="Roster CSV or XLSX")
    roster_group.add_argument(
        "--failed-csv", "--failedCsv", dest="failedCsv", metavar="FILE",
        help="Where failed rows are written (default: failed-devices.csv)",
    )
    roster_group.add_argument("--cart-number", "--cartNumber", dest="cartNumber", metavar="N")

    template_group = parser.add_argument_group("Templates")
    template_group.add_argument(
        "--device-id-template", "--deviceIdTemplate", dest="deviceIdTemplate", metavar="TPL"
    )
    template_group.add_argument(
        "--asset-id-template", "--assetIdTemplate", dest="assetIdTemplate", metavar="TPL"
    )
    template_group.add_argument("--ou-template", "--ouTemplate", dest="ouTemplate", metavar="TPL")
    template_group.add_argument(
        "--tab-name-template", "--tabNameTemplate", dest="tabNameTemplate", metavar="TPL"
    )

    run_group = parser.add_argument_group("Run Options")
    run_group.add_argument(
        "--dry-run", "--dryRun", dest="dryRun", action="store_true", default=None,
        help="Look everything up but change nothing",
    )
    run_group.add_argument(
        "--prompt-on-error", "--promptOnError", dest="promptOnError",
        action="store_true", default=None,
        help="Wait for 'y' after each failure; any other key aborts",
    )
    run_group.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    run_group.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    return parser


def resolve_config(args: argparse.Namespace) -> RunConfiguration:
    """Merge environment, config file and flags into a validated configuration."""
    config = config_from_env()
    config = load_config(args.config, base=config) or config
    config = apply_overrides(config, vars(args))

    if args.save_config:
        save_config(config, args.config)

    return validate_config(config)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = resolve_config(args)
    except ConfigurationError as e:
        print(f"[Main] Configuration error: {e.message}")
        parser.print_usage()
        return 2

    start_time = datetime.now(timezone.utc)
    if config.dry_run:
        print("[Main] Dry run: no devices or org units will be changed")

    try:
        result = asyncio.run(run_roster(config, show_progress=not args.no_progress))
    except ConfigurationError as e:
        print(f"[Main] Configuration error: {e.message}")
        return 2

    for error in result.errors:
        logger.debug(f"Run error: {error}")

    if result.status is RunStatus.COMPLETED:
        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        print(
            f"Done: {result.succeeded}/{result.total} updated, "
            f"{len(result.failed)} failed ({duration:.1f}s)"
        )
    elif result.status is RunStatus.ABORTED:
        print("[Main] Aborted by operator")
    elif result.status is RunStatus.CANCELLED:
        print(f"[Main] Cancelled after {result.processed}/{result.total} devices")

    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
