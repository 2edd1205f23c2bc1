"""Type definitions for the work item cloner.

This module contains data classes and type definitions used throughout
the clone process.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Literal, NotRequired, TypedDict

type WorkItemId = int
type FieldMap = dict[str, str | None]

# Relation URLs end with the target id, e.g. .../_apis/wit/workItems/1234
_TRAILING_ID = re.compile(r"(\d+)/?$")


@dataclass(frozen=True, slots=True)
class Relation:
    """A typed link from a work item to another work item."""

    type: str
    target: str | int

    @property
    def target_id(self) -> WorkItemId | None:
        """Numeric id of the related work item, or None if it cannot be parsed."""
        if isinstance(self.target, int):
            return self.target
        match = _TRAILING_ID.search(self.target.strip())
        if match is None:
            return None
        return int(match.group(1))


@dataclass(frozen=True, slots=True)
class WorkItem:
    """Read-only view of a work item fetched from the tracker."""

    id: WorkItemId
    fields: FieldMap = field(default_factory=dict)
    relations: list[Relation] = field(default_factory=list)

    @property
    def work_item_type(self) -> str | None:
        return self.fields.get("System.WorkItemType")

    def value(self, name: str) -> str | None:
        """Return the value of a field, or None when absent."""
        return self.fields.get(name)

    def related(self, relation_type: str) -> Iterator[Relation]:
        """Yield relations of the given type in their original order."""
        for relation in self.relations:
            if relation.type == relation_type:
                yield relation


@dataclass(frozen=True, slots=True)
class CloneTask:
    """One unit of traversal work.

    ``new_parent_id`` is the id of the already created clone of the original
    item's parent, or None for the root of the run.
    """

    original_id: WorkItemId
    new_parent_id: WorkItemId | None = None


type ConfigValue = str | int | bool | dict[str, Any] | list[Any]

type Backend = Literal["cli", "rest"]


class AzureConfig(TypedDict, total=False):
    """Configuration for the Azure Boards connection."""

    organization: str
    project: str
    pat: NotRequired[str]
    backend: Backend
    cli_path: str
    api_version: str
    timeout: int


type LogLevel = Literal[
    "DEBUG",
    "INFO",
    "NOTICE",
    "WARNING",
    "ERROR",
    "CRITICAL",
    "SUCCESS",
]


class CloneConfig(TypedDict, total=False):
    """Configuration for the clone run."""

    log_level: LogLevel
    extra_fields: list[str]
    variables: dict[str, str]
    escape_quotes: bool
    dry_run: bool


class Config(TypedDict):
    """Configuration for the config loader."""

    azure: AzureConfig
    clone: CloneConfig


type SectionName = Literal["azure", "clone"]

type DirType = Literal[
    "logs",
    "root",
]
