"""Main entry point for the work item cloner.

Clones an Azure Boards work item, optionally with its whole child tree,
substituting ``{{Name}}`` tokens in the cloned text fields.
"""

import argparse
import sys
from collections.abc import Sequence
from contextlib import nullcontext
from pathlib import Path

from wiclone import config
from wiclone.clients.exceptions import ClientError
from wiclone.clients.factory import create_client
from wiclone.clone_engine import CloneEngine
from wiclone.display import ProgressTracker, print_clone_summary
from wiclone.field_transformer import DEFAULT_EXTRA_FIELDS, FieldTransformer
from wiclone.utils.variables import build_expansion_map

logger = config.logger

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def positive_int(value: str) -> int:
    """Argparse type for work item ids."""
    try:
        number = int(value)
    except ValueError:
        msg = f"not a work item id: {value!r}"
        raise argparse.ArgumentTypeError(msg) from None
    if number <= 0:
        msg = f"work item id must be positive: {value}"
        raise argparse.ArgumentTypeError(msg)
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wiclone",
        description="Clone an Azure Boards work item and, optionally, its descendants",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Text fields may contain {{Name}} tokens, replaced with values given\n"
            "via --var Name=Value, a --vars-file or clone.variables in the config."
        ),
    )
    parser.add_argument("id", type=positive_int, help="ID of the work item to clone")
    parser.add_argument(
        "-c",
        "--children",
        action="store_true",
        help="Also clone all descendants, re-parented under the new clones",
    )
    parser.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Value for a {{NAME}} token (repeatable)",
    )
    parser.add_argument(
        "--vars-file",
        type=Path,
        metavar="FILE",
        help="YAML file mapping token names to values",
    )
    parser.add_argument(
        "--backend",
        choices=["cli", "rest"],
        help="Use the az command line (default) or the REST API",
    )
    parser.add_argument("--organization", help="Azure DevOps organization URL")
    parser.add_argument("--project", help="Project for clones whose source has none")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Read the source items but only log what would be created",
    )
    parser.add_argument(
        "--no-escape",
        action="store_true",
        help="Send quotes unescaped (only for backends that handle them correctly)",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress display",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "NOTICE", "WARNING", "ERROR"],
        type=str.upper,
        help="Console and file log level",
    )
    return parser


def run_clone(args: argparse.Namespace) -> int:
    """Run one clone with parsed arguments and return the exit status."""
    config.update_from_cli_args(args)
    if not config.validate_config():
        return EXIT_USAGE

    try:
        variables = build_expansion_map(
            config.clone_config.get("variables"),
            args.vars_file,
            args.var,
        )
    except (OSError, ValueError) as e:
        logger.error("Invalid variables: %s", e)
        return EXIT_USAGE

    dry_run = bool(config.clone_config.get("dry_run", False))
    # Only the az command line needs quotes escaped; JSON bodies carry them as is
    escape = config.clone_config.get(
        "escape_quotes", config.azure_config.get("backend", "cli") == "cli"
    )
    transformer = FieldTransformer(
        extra_fields=config.clone_config.get("extra_fields") or DEFAULT_EXTRA_FIELDS,
        escape=bool(escape),
    )

    try:
        client = create_client(config.azure_config, dry_run=dry_run)
    except ValueError as e:
        logger.error("Cannot set up the tracker client: %s", e)
        return EXIT_USAGE

    show_progress = args.children and not args.no_progress
    tracker = ProgressTracker(f"Cloning {args.id}") if show_progress else None
    engine = CloneEngine(client, transformer, progress=tracker, dry_run=dry_run)

    try:
        with tracker if tracker is not None else nullcontext():
            result = engine.run(args.id, clone_children=args.children, variables=variables)
    except ClientError as e:
        logger.error("Work item tracker call failed: %s", e)
        if engine.result is not None and engine.result.created:
            print_clone_summary(engine.result.created, title="Clones created before the failure")
        return EXIT_FAILURE
    except ValueError as e:
        logger.error("Cannot clone work item: %s", e)
        return EXIT_FAILURE

    print_clone_summary(result.created, title="Dry run: planned clones" if dry_run else "Cloned work items")
    if result.unresolved_tokens:
        logger.warning(
            "Unresolved tokens left in cloned text: %s", ", ".join(result.unresolved_tokens),
        )
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> None:
    """Parse arguments and run the clone."""
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(run_clone(args))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Clone interrupted by user")
        sys.exit(1)
