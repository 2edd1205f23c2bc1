"""Breadth-first cloning of a work item and its descendants.

Each clone gets a fresh id, so children can only be linked once their
parent's clone exists. The engine therefore works strictly in order: a
queued item is fetched, created, given its extra fields and parent link, and
only then are its children queued with the id of the new parent.
"""

from collections import deque
from collections.abc import Mapping
from types import MappingProxyType

from wiclone import config
from wiclone.clients.base import CHILD, PARENT, IssueTrackerClient
from wiclone.clients.exceptions import ClientError
from wiclone.display import ProgressTracker
from wiclone.field_transformer import TITLE, FieldTransformer
from wiclone.models.clone_result import CloneResult
from wiclone.type_definitions import CloneTask, WorkItem, WorkItemId

logger = config.logger


class CloneEngine:
    """Clones a work item tree through an issue tracker client.

    The queue and the visited set live only for the duration of one ``run``
    call. Any ``ClientError`` aborts the run and is re-raised; clones created
    before the failure are kept and listed in ``self.result``.
    """

    def __init__(
        self,
        client: IssueTrackerClient,
        transformer: FieldTransformer | None = None,
        progress: ProgressTracker | None = None,
        dry_run: bool = False,
    ) -> None:
        self.client = client
        self.transformer = transformer or FieldTransformer()
        self.progress = progress
        self.dry_run = dry_run
        self.result: CloneResult | None = None

    def run(
        self,
        root_id: WorkItemId,
        clone_children: bool = False,
        variables: Mapping[str, str] | None = None,
    ) -> CloneResult:
        """Clone ``root_id`` and, if requested, all of its descendants.

        Args:
            root_id: Id of the work item to clone
            clone_children: Whether child items are cloned too
            variables: Expansion map for ``{{Name}}`` tokens

        Returns:
            CloneResult describing the created items

        Raises:
            ClientError: If any tracker call fails

        """
        expansion_map = MappingProxyType(dict(variables or {}))
        result = CloneResult(root_id=root_id, clone_children=clone_children, dry_run=self.dry_run)
        self.result = result
        self.transformer.unresolved_tokens = result.unresolved_tokens

        queue: deque[CloneTask] = deque([CloneTask(original_id=root_id)])
        visited: set[WorkItemId] = set()

        logger.info(
            "Cloning work item %s%s",
            root_id,
            " and its descendants" if clone_children else "",
        )

        try:
            while queue:
                task = queue.popleft()
                if task.original_id in visited:
                    # Listed under more than one parent before it was reached
                    logger.debug("Work item %s was already cloned, skipping", task.original_id)
                    self._advance_progress(f"{task.original_id} skipped")
                    continue
                visited.add(task.original_id)
                result.visited.append(task.original_id)

                original = self.client.get_work_item(task.original_id)
                new_id = self._clone_item(original, task, expansion_map, result)

                if clone_children:
                    queue.extend(self._child_tasks(original, new_id, visited, result))
        except ClientError as e:
            result.error = str(e)
            logger.error(
                "Clone aborted: %s. %d clone(s) already created were left in place: %s",
                e,
                result.created_count,
                ", ".join(f"{old} -> {new}" for old, new in result.created.items()) or "none",
            )
            raise

        result.success = True
        logger.success(
            "Cloned %d work item(s) starting at %s (new root: %s)",
            result.created_count,
            root_id,
            result.created.get(root_id),
        )
        return result

    def _clone_item(
        self,
        original: WorkItem,
        task: CloneTask,
        variables: Mapping[str, str],
        result: CloneResult,
    ) -> WorkItemId:
        fields = self.transformer.build_create_fields(original, variables)
        new_id = self.client.create_work_item(fields)
        result.created[original.id] = new_id
        logger.info(
            "Created %s %s from %s: %s",
            original.work_item_type or "work item",
            new_id,
            original.id,
            original.value(TITLE) or "",
        )

        # The tracker accepts a single field per update call
        for name, value in self.transformer.build_extra_updates(original, variables):
            self.client.update_field(new_id, name, value)
            result.field_updates += 1
            logger.debug("Copied %s to %s", name, new_id)

        if task.new_parent_id is not None:
            self.client.add_relation(new_id, PARENT, task.new_parent_id)
            result.relations_added += 1
            logger.debug("Linked %s under parent %s", new_id, task.new_parent_id)

        self._advance_progress(f"{original.id} -> {new_id}")
        return new_id

    def _child_tasks(
        self,
        original: WorkItem,
        new_id: WorkItemId,
        visited: set[WorkItemId],
        result: CloneResult,
    ) -> list[CloneTask]:
        tasks = []
        for relation in original.related(CHILD):
            child_id = relation.target_id
            if child_id is None:
                message = f"Cannot read child id from relation target {relation.target!r} of {original.id}"
                logger.warning(message)
                result.add_warning(message)
                continue
            if child_id in visited:
                logger.debug("Child %s of %s was already visited", child_id, original.id)
                continue
            tasks.append(CloneTask(original_id=child_id, new_parent_id=new_id))

        if tasks:
            logger.debug("Queued %d child(ren) of %s", len(tasks), original.id)
            if self.progress is not None:
                self.progress.add_total(len(tasks))
        return tasks

    def _advance_progress(self, item: str) -> None:
        if self.progress is None:
            return
        self.progress.increment()
        self.progress.add_log_item(item)
