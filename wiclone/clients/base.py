"""Issue tracker client interface consumed by the clone engine."""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from wiclone.type_definitions import Relation, WorkItem, WorkItemId

# Relation names as reported by Azure Boards in relation attributes
PARENT = "Parent"
CHILD = "Child"
RELATED = "Related"

# Reference names of the hierarchy link types
RELATION_REFERENCE_NAMES: dict[str, str] = {
    PARENT: "System.LinkTypes.Hierarchy-Reverse",
    CHILD: "System.LinkTypes.Hierarchy-Forward",
    RELATED: "System.LinkTypes.Related",
}


@runtime_checkable
class IssueTrackerClient(Protocol):
    """Operations the clone engine needs from an issue tracker.

    Every method raises a subclass of ``ClientError`` on failure.
    """

    def get_work_item(self, work_item_id: WorkItemId) -> WorkItem: ...

    def create_work_item(self, fields: Mapping[str, str]) -> WorkItemId: ...

    def update_field(self, work_item_id: WorkItemId, field_name: str, value: str) -> None: ...

    def add_relation(
        self,
        work_item_id: WorkItemId,
        relation_type: str,
        target_id: WorkItemId,
    ) -> None: ...


def _stringify(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def parse_work_item(payload: dict[str, Any]) -> WorkItem:
    """Build a WorkItem from the JSON document returned by Azure Boards.

    Both ``az boards work-item show`` and the REST API return the same shape:
    ``{"id": 1, "fields": {...}, "relations": [{"rel": ..., "url": ...,
    "attributes": {"name": "Child"}}]}``. ``relations`` is null when the item
    has none.
    """
    fields = {name: _stringify(value) for name, value in (payload.get("fields") or {}).items()}
    relations = []
    for raw in payload.get("relations") or []:
        attributes = raw.get("attributes") or {}
        relation_type = attributes.get("name") or raw.get("rel", "")
        relations.append(Relation(type=relation_type, target=raw.get("url", "")))
    return WorkItem(id=int(payload["id"]), fields=fields, relations=relations)
