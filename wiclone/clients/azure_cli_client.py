"""AzureCliClient.

Drives Azure Boards through the ``az boards`` command line (azure-devops
extension). Authentication is left to the CLI itself: ``az login`` or the
``AZURE_DEVOPS_EXT_PAT`` environment variable.

Commands are executed as argument lists, never through a shell.
"""

import json
import subprocess
from collections.abc import Mapping
from typing import Any

from wiclone import config
from wiclone.clients.base import parse_work_item
from wiclone.clients.exceptions import (
    ClientConnectionError,
    ClientTimeoutError,
    CommandExecutionError,
    InvalidWorkItemError,
    JsonParseError,
)
from wiclone.type_definitions import WorkItem, WorkItemId

logger = config.logger

# Core fields that `az boards work-item create` takes as named options
CREATE_OPTIONS: dict[str, str] = {
    "System.Title": "--title",
    "System.Description": "--description",
    "System.AreaPath": "--area",
    "System.IterationPath": "--iteration",
    "System.TeamProject": "--project",
}
WORK_ITEM_TYPE = "System.WorkItemType"


class AzureCliClient:
    """Client for Azure Boards using the ``az`` executable.

    This client implements exception-based error handling:
    - Raises ClientConnectionError when the executable cannot be started
    - Raises ClientTimeoutError when a command exceeds the timeout
    - Raises CommandExecutionError for non-zero exit codes
    - Raises JsonParseError when the output is not the expected JSON
    """

    def __init__(
        self,
        organization: str | None = None,
        project: str | None = None,
        cli_path: str = "az",
        timeout: int = 120,
    ) -> None:
        """Initialize the CLI client.

        Args:
            organization: Organization URL passed as ``--org``; the CLI default is used when unset
            project: Project used for creation when the source item carries none
            cli_path: Path or name of the ``az`` executable
            timeout: Timeout per command in seconds

        """
        self.organization = organization
        self.project = project
        self.cli_path = cli_path
        self.timeout = timeout

        logger.debug(
            "AzureCliClient initialized (org=%s, project=%s)",
            organization or "<az default>",
            project or "<from source>",
        )

    def _base_command(self, *args: str) -> list[str]:
        cmd = [self.cli_path, "boards", *args, "--output", "json"]
        if self.organization:
            cmd.extend(["--org", self.organization])
        return cmd

    def execute(self, *args: str) -> Any:
        """Run an ``az boards`` command and return its parsed JSON output.

        Args:
            *args: Arguments following ``az boards``

        Returns:
            Decoded JSON output, or None when the command printed nothing

        """
        cmd = self._base_command(*args)
        logger.debug("Executing: %s", " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            msg = f"Azure CLI executable not found: {self.cli_path}"
            raise ClientConnectionError(msg) from e
        except subprocess.TimeoutExpired as e:
            msg = f"az command timed out after {self.timeout} seconds: {' '.join(args[:3])}"
            raise ClientTimeoutError(msg) from e

        if result.returncode != 0:
            raise CommandExecutionError(
                command=cmd,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )

        output = result.stdout.strip()
        if not output:
            return None
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON from az: {e}"
            raise JsonParseError(msg) from e

    def get_work_item(self, work_item_id: WorkItemId) -> WorkItem:
        payload = self.execute(
            "work-item", "show", "--id", str(work_item_id), "--expand", "relations",
        )
        if not isinstance(payload, dict) or "id" not in payload:
            msg = f"Unexpected output for work item {work_item_id}"
            raise JsonParseError(msg)
        return parse_work_item(payload)

    def create_work_item(self, fields: Mapping[str, str]) -> WorkItemId:
        """Create a work item from core field values.

        Fields without a named ``az`` option are passed through ``--fields``.
        """
        work_item_type = fields.get(WORK_ITEM_TYPE)
        if not work_item_type:
            msg = f"Cannot create a work item without {WORK_ITEM_TYPE}"
            raise InvalidWorkItemError(msg)

        args = ["work-item", "create", "--type", work_item_type]
        extra: list[str] = []
        for name, value in fields.items():
            if name == WORK_ITEM_TYPE:
                continue
            option = CREATE_OPTIONS.get(name)
            if option:
                args.extend([option, value])
            else:
                extra.append(f"{name}={value}")

        if "System.TeamProject" not in fields and self.project:
            args.extend(["--project", self.project])
        if extra:
            args.append("--fields")
            args.extend(extra)

        payload = self.execute(*args)
        if not isinstance(payload, dict) or "id" not in payload:
            msg = "Unexpected output from work item creation"
            raise JsonParseError(msg)
        return int(payload["id"])

    def update_field(self, work_item_id: WorkItemId, field_name: str, value: str) -> None:
        self.execute(
            "work-item", "update", "--id", str(work_item_id), "--fields", f"{field_name}={value}",
        )

    def add_relation(
        self,
        work_item_id: WorkItemId,
        relation_type: str,
        target_id: WorkItemId,
    ) -> None:
        self.execute(
            "work-item",
            "relation",
            "add",
            "--id",
            str(work_item_id),
            "--relation-type",
            relation_type,
            "--target-id",
            str(target_id),
        )
