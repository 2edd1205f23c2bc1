"""Dry-run wrapper around a tracker client.

Reads go to the wrapped client so the real tree is walked; writes are only
logged. Created items get negative placeholder ids, which cannot collide
with real work item ids.
"""

from collections.abc import Mapping

from wiclone import config
from wiclone.clients.base import IssueTrackerClient
from wiclone.type_definitions import WorkItem, WorkItemId

logger = config.logger


class DryRunClient:
    """Client that fetches for real and pretends to write."""

    def __init__(self, client: IssueTrackerClient) -> None:
        self.client = client
        self._next_id = -1

    def get_work_item(self, work_item_id: WorkItemId) -> WorkItem:
        return self.client.get_work_item(work_item_id)

    def create_work_item(self, fields: Mapping[str, str]) -> WorkItemId:
        new_id = self._next_id
        self._next_id -= 1
        logger.notice(
            "Dry run: would create %s %r as %s",
            fields.get("System.WorkItemType", "work item"),
            fields.get("System.Title", ""),
            new_id,
        )
        return new_id

    def update_field(self, work_item_id: WorkItemId, field_name: str, value: str) -> None:
        logger.notice("Dry run: would set %s on %s", field_name, work_item_id)

    def add_relation(
        self,
        work_item_id: WorkItemId,
        relation_type: str,
        target_id: WorkItemId,
    ) -> None:
        logger.notice(
            "Dry run: would add %s relation %s -> %s", relation_type, work_item_id, target_id,
        )
