"""Field transformation for cloned work items.

Two text operations are applied to cloned values, always in this order:

1. ``expand_variables`` replaces ``{{Name}}`` tokens from the expansion map.
2. ``escape_quotes`` backslash-escapes double quotes. The Azure Boards
   command line mangles embedded quotes, so values handed to it are escaped
   first. HTML-encoded quotes (``&quot;``), as found in rich text fields,
   are escaped the same way.
"""

import re
from collections.abc import Callable, Iterable, Iterator, Mapping

from wiclone import config
from wiclone.type_definitions import WorkItem

logger = config.logger

TOKEN_PATTERN = re.compile(r"\{\{\w+\}\}")

TITLE = "System.Title"
DESCRIPTION = "System.Description"

# Always read and sent with the create call when present on the source
CORE_FIELDS: tuple[str, ...] = (
    "System.WorkItemType",
    TITLE,
    DESCRIPTION,
    "System.AreaPath",
    "System.IterationPath",
    "System.TeamProject",
    "Microsoft.VSTS.Common.Priority",
)

# Core fields whose values go through expansion and escaping
TEXT_FIELDS = frozenset({TITLE, DESCRIPTION})

DEFAULT_EXTRA_FIELDS: tuple[str, ...] = (
    "Microsoft.VSTS.Common.AcceptanceCriteria",
    "Microsoft.VSTS.TCM.ReproSteps",
    "Microsoft.VSTS.TCM.SystemInfo",
    "Microsoft.VSTS.Scheduling.StoryPoints",
    "Microsoft.VSTS.Scheduling.Effort",
    "Microsoft.VSTS.Scheduling.OriginalEstimate",
    "Microsoft.VSTS.Scheduling.RemainingWork",
    "Microsoft.VSTS.Common.Severity",
    "Microsoft.VSTS.Common.ValueArea",
    "System.Tags",
)


def expand_variables(
    text: str | None,
    variables: Mapping[str, str] | None,
    on_unresolved: Callable[[str], None] | None = None,
) -> str | None:
    """Replace every ``{{Name}}`` token whose name is in ``variables``.

    Replacement happens in a single pass, so substituted values are never
    scanned for further tokens. Unknown tokens are left in the text and a
    warning is logged once per distinct token.

    Args:
        text: Text to expand; None and empty strings are returned unchanged
        variables: Token name -> replacement; None behaves like an empty map
        on_unresolved: Called once with each distinct unresolved token

    Returns:
        The expanded text

    """
    if not text:
        return text

    variables = variables or {}
    unresolved: set[str] = set()

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        name = token[2:-2]
        if name in variables:
            return variables[name]
        if token not in unresolved:
            unresolved.add(token)
            logger.warning("No value for expansion token %s; leaving it as is", token)
            if on_unresolved is not None:
                on_unresolved(token)
        return token

    return TOKEN_PATTERN.sub(_replace, text)


def escape_quotes(text: str | None) -> str | None:
    """Backslash-escape double quotes and ``&quot;`` entities.

    Not idempotent: escaping twice doubles the backslashes.
    """
    if text is None:
        return None
    return text.replace('"', '\\"').replace("&quot;", '\\"')


class FieldTransformer:
    """Derives the field values of a clone from its source work item."""

    def __init__(
        self,
        extra_fields: Iterable[str] = DEFAULT_EXTRA_FIELDS,
        escape: bool = True,
    ) -> None:
        """Initialize the transformer.

        Args:
            extra_fields: Ordered names of fields copied with one update call
                each, only when non-empty on the source
            escape: Whether values are quote-escaped after expansion

        """
        self.extra_fields: tuple[str, ...] = tuple(dict.fromkeys(extra_fields))
        self.escape = escape
        self.unresolved_tokens: list[str] = []

    def _record_unresolved(self, token: str) -> None:
        if token not in self.unresolved_tokens:
            self.unresolved_tokens.append(token)

    def transform_text(self, value: str | None, variables: Mapping[str, str] | None) -> str | None:
        expanded = expand_variables(value, variables, self._record_unresolved)
        return escape_quotes(expanded) if self.escape else expanded

    def build_create_fields(
        self,
        item: WorkItem,
        variables: Mapping[str, str] | None,
    ) -> dict[str, str]:
        """Core field values for the create call, keyed by reference name."""
        fields: dict[str, str] = {}
        for name in CORE_FIELDS:
            value = item.value(name)
            if not value:
                continue
            if name in TEXT_FIELDS:
                value = self.transform_text(value, variables)
            fields[name] = value
        return fields

    def build_extra_updates(
        self,
        item: WorkItem,
        variables: Mapping[str, str] | None,
    ) -> Iterator[tuple[str, str]]:
        """Yield ``(field name, value)`` for each extra field set on the source."""
        for name in self.extra_fields:
            value = item.value(name)
            if not value:
                continue
            yield name, self.transform_text(value, variables)
