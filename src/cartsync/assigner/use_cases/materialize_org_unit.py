"""Org-unit materializer - makes sure a whole org-unit path exists.

Workflow:
1. List every existing org-unit path (one call, compared case-insensitively)
2. Split the target path into "/" segments
3. Walk root-to-leaf, creating each missing accumulated path below its parent
4. Record one SegmentResult per segment; a failed creation does not stop the walk

The listing is fetched again on every call, so changes made outside this
process between two calls are picked up.
"""

import logging

from ..domain.entities import SegmentResult
from ..domain.ports import IDirectoryService

logger = logging.getLogger(__name__)

ROOT_PATH = "/"


def split_org_unit_path(path: str) -> list[str]:
    """Split an org-unit path into trimmed, non-empty segments."""
    return [part.strip() for part in (path or "").split("/") if part.strip()]


def normalize_org_unit_path(path: str) -> str:
    """Rebuild ``path`` from its segments ("" when there are none).

    >>> normalize_org_unit_path("Chromebooks// Cart 3 /")
    '/Chromebooks/Cart 3'
    """
    segments = split_org_unit_path(path)
    return "/" + "/".join(segments) if segments else ""


class OrgUnitMaterializer:
    """Creates missing org-unit segments, root first.

    Example:
        materializer = OrgUnitMaterializer(directory, customer_id="my_customer")
        results = await materializer.ensure_exists("/Chromebooks/Cart 3 2026-27")
    """

    def __init__(self, directory: IDirectoryService, customer_id: str):
        self.directory = directory
        self.customer_id = customer_id

    async def ensure_exists(self, path: str) -> list[SegmentResult]:
        """Ensure every segment of ``path`` exists.

        Args:
            path: Slash-delimited org-unit path

        Returns:
            One SegmentResult per segment, root-to-leaf

        Raises:
            Exception: Only if listing the existing org units fails
        """
        segments = split_org_unit_path(path)
        if not segments:
            return []

        existing = {p.lower() for p in await self.directory.list_org_units(self.customer_id)}
        existing.add(ROOT_PATH)

        results: list[SegmentResult] = []
        parent_path = ROOT_PATH
        current_path = ""

        for segment in segments:
            current_path = f"{current_path}/{segment}"

            if current_path.lower() in existing:
                results.append(SegmentResult(path=current_path))
            else:
                try:
                    await self.directory.create_org_unit(self.customer_id, segment, parent_path)
                    existing.add(current_path.lower())
                    logger.info(f"Created OU: {current_path}")
                    results.append(SegmentResult(path=current_path, created=True))
                except Exception as e:
                    logger.error(f"Failed to create OU {current_path}: {e}")
                    results.append(SegmentResult(path=current_path, error=str(e)))

            parent_path = current_path

        return results
