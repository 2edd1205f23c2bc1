"""Building the expansion map from configuration, files and the command line."""

import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

VARIABLE_NAME = re.compile(r"^\w+$")


def validate_variables(variables: Mapping[Any, Any], source: str) -> dict[str, str]:
    """Check names are word tokens and convert values to strings.

    Raises:
        ValueError: If a name could never match a ``{{Name}}`` token

    """
    validated: dict[str, str] = {}
    for name, value in variables.items():
        name = str(name)
        if not VARIABLE_NAME.match(name):
            msg = f"Invalid variable name {name!r} in {source}: use letters, digits and underscores"
            raise ValueError(msg)
        validated[name] = "" if value is None else str(value)
    return validated


def parse_assignment(assignment: str) -> tuple[str, str]:
    """Split a ``NAME=VALUE`` command line assignment.

    Only the first ``=`` separates; the value may contain more of them.
    """
    name, sep, value = assignment.partition("=")
    name = name.strip()
    if not sep or not name:
        msg = f"Expected NAME=VALUE, got {assignment!r}"
        raise ValueError(msg)
    return name, value


def load_variables_file(path: Path) -> dict[str, str]:
    """Load a YAML mapping of variable names to values."""
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        msg = f"Variables file {path} must contain a mapping"
        raise ValueError(msg)
    return validate_variables(data, str(path))


def build_expansion_map(
    configured: Mapping[str, Any] | None = None,
    variables_file: Path | None = None,
    assignments: Iterable[str] = (),
) -> dict[str, str]:
    """Merge variables; later sources win.

    Order: configuration file ``clone.variables``, then the variables file,
    then ``NAME=VALUE`` assignments from the command line.
    """
    merged = validate_variables(configured or {}, "configuration")
    if variables_file is not None:
        merged.update(load_variables_file(variables_file))
    cli_values = dict(parse_assignment(a) for a in assignments)
    merged.update(validate_variables(cli_values, "--var"))
    return merged
