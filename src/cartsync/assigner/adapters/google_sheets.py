"""Google Sheets adapter for the optional results log.

Implements ISpreadsheetLogger with the Sheets API ``values:append`` call.
Rows are always appended; existing rows for the same serial are left alone.
"""

from typing import TYPE_CHECKING
from urllib.parse import quote

from ..domain.ports import ISpreadsheetLogger

if TYPE_CHECKING:
    from ...api.client import GoogleAPIClient


def a1_range(tab_name: str) -> str:
    """A1 range for the first cell of a tab, quoting the tab name.

    >>> a1_range("Cart 3 2026-27")
    "'Cart 3 2026-27'!A1"
    """
    escaped = tab_name.replace("'", "''")
    return f"'{escaped}'!A1"


class GoogleSheetsLogger(ISpreadsheetLogger):
    """Appends result rows to a spreadsheet tab.

    The client must be configured with SHEETS_BASE_URL.
    """

    VALUE_INPUT_OPTION = "USER_ENTERED"
    INSERT_DATA_OPTION = "INSERT_ROWS"

    def __init__(self, client: "GoogleAPIClient"):
        self.client = client

    async def append_row(self, sheet_id: str, tab_name: str, row: list[str]) -> None:
        endpoint = (
            f"/spreadsheets/{quote(sheet_id, safe='')}"
            f"/values/{quote(a1_range(tab_name), safe='')}:append"
        )
        await self.client.post(
            endpoint,
            json_body={"majorDimension": "ROWS", "values": [row]},
            params={
                "valueInputOption": self.VALUE_INPUT_OPTION,
                "insertDataOption": self.INSERT_DATA_OPTION,
            },
        )
