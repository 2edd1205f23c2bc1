"""Result model for a clone run."""

from pydantic import BaseModel, Field


class CloneResult(BaseModel):
    """Outcome of cloning a work item tree.

    ``created`` maps original ids to clone ids in creation order. On a fatal
    error it holds the clones made before the failure, which are left in
    place.
    """

    root_id: int
    clone_children: bool = False
    dry_run: bool = False
    success: bool = False
    created: dict[int, int] = Field(default_factory=dict)
    visited: list[int] = Field(default_factory=list)
    field_updates: int = 0
    relations_added: int = 0
    unresolved_tokens: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    error: str | None = None

    def add_warning(self, warning: str) -> None:
        """Add a warning message to the warnings list."""
        self.warnings.append(warning)

    @property
    def created_count(self) -> int:
        return len(self.created)
