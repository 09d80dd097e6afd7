"""Placeholder templates for device ids, asset ids, org units and tab names.

Templates use ``{Name}`` placeholders, for example::

    "{CartNumber}-{DeviceNumber}"
    "/Chromebooks/Cart {CartNumber} {YearRange}"

Two resolution modes exist. With ``preserve_unknown=True`` a placeholder
whose name is not in the context is left in the output verbatim, so a typo
in a template shows up in the result. With ``preserve_unknown=False`` it is
replaced with an empty string. A known name whose value is None or empty
always resolves to an empty string.
"""

import re
from datetime import date
from typing import Mapping, Optional

from .entities import RosterRecord

PLACEHOLDER_PATTERN = re.compile(r"{(?P<key>[^{}]+)}")
WHITESPACE_PATTERN = re.compile(r"\s+")

# Placeholder names understood by the templates
CART_NUMBER = "CartNumber"
DEVICE_NUMBER = "DeviceNumber"
SERIAL_NUMBER = "SerialNumber"
PURCHASE_ID = "PurchaseId"
DEVICE_ID = "DeviceId"
STUDENT_NAME = "StudentName"
YEAR = "Year"
YEAR_RANGE = "YearRange"


def resolve(
    template: Optional[str],
    context: Mapping[str, Optional[str]],
    preserve_unknown: bool = True,
) -> str:
    """Substitute every ``{Name}`` placeholder in ``template``.

    Args:
        template: Template text; None or empty resolves to ""
        context: Placeholder values keyed by name
        preserve_unknown: Keep unknown placeholders verbatim instead of blanking them

    Returns:
        The resolved string
    """
    if not template:
        return ""

    def _substitute(match: re.Match) -> str:
        key = match.group("key")
        if key in context:
            return context[key] or ""
        return match.group(0) if preserve_unknown else ""

    return PLACEHOLDER_PATTERN.sub(_substitute, template)


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs to a single space and trim the ends."""
    return WHITESPACE_PATTERN.sub(" ", value).strip()


def resolve_normalized(
    template: Optional[str],
    context: Mapping[str, Optional[str]],
    preserve_unknown: bool = True,
) -> str:
    """Resolve a template and normalize its whitespace.

    Used for human-facing identifiers so that missing optional fields do
    not leave double or trailing spaces behind.
    """
    return normalize_whitespace(resolve(template, context, preserve_unknown))


def year_range(today: date) -> str:
    """School-year label such as ``2026-27``."""
    return f"{today.year}-{(today.year + 1) % 100:02d}"


def build_context(
    record: RosterRecord,
    cart_number: Optional[str] = None,
    device_id: Optional[str] = None,
    today: Optional[date] = None,
) -> dict[str, Optional[str]]:
    """Build the placeholder context for one roster record.

    Args:
        record: The roster record being processed
        cart_number: Run-wide cart number, used when the record has none
        device_id: Already-resolved device id, if available
        today: Date used for {Year} and {YearRange} (defaults to today)
    """
    today = today or date.today()
    return {
        CART_NUMBER: record.cart_number or cart_number,
        DEVICE_NUMBER: record.device_number,
        SERIAL_NUMBER: record.serial_number,
        PURCHASE_ID: record.purchase_id,
        DEVICE_ID: device_id,
        STUDENT_NAME: record.student_name,
        YEAR: str(today.year),
        YEAR_RANGE: year_range(today),
    }
