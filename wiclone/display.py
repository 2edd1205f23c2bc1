"""
Centralized display utilities for console output and progress tracking.
Provides standardized progress bars and logging displays using rich.
"""

import logging
import os
from collections import deque
from collections.abc import Mapping
from typing import Any, Protocol, cast

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

SUCCESS = 25
NOTICE = 21


# Define Protocol for extended Logger with success and notice methods
class ExtendedLogger(Protocol):
    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def success(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def notice(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


# Create a custom theme for logging
LOGGING_THEME = Theme(
    {
        "logging.level.debug": "dim",
        "logging.level.info": "blue",
        "logging.level.notice": "cyan",
        "logging.level.warning": "bold yellow",
        "logging.level.error": "bold red",
        "logging.level.critical": "bold red on white",
        "logging.level.success": "bold green",
    }
)

# Global console instance with theme
console = Console(theme=LOGGING_THEME)

# Set up a rich handler for logging
rich_handler = RichHandler(
    console=console,
    rich_tracebacks=True,
    tracebacks_show_locals=False,
    markup=False,
    show_time=True,
    show_level=True,
    enable_link_path=True,
    log_time_format="[%X]",
)


def _numeric_level(level: str) -> int:
    match level.upper():
        case "NOTICE":
            return NOTICE
        case "SUCCESS":
            return SUCCESS
        case other:
            return getattr(logging, other, logging.INFO)


def configure_logging(
    level: str = "INFO", log_file: str | os.PathLike[str] | None = None
) -> ExtendedLogger:
    """
    Configure logging with rich formatting.

    Args:
        level: Logging level (DEBUG, INFO, NOTICE, SUCCESS, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file

    Returns:
        Configured logger instance
    """
    logging.addLevelName(SUCCESS, "SUCCESS")
    logging.addLevelName(NOTICE, "NOTICE")

    numeric_level = _numeric_level(level)

    handlers: list[logging.Handler] = [rich_handler]

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_format = logging.Formatter(
            "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(file_format)
        file_handler.setLevel(numeric_level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger("wiclone")

    def success(self: logging.Logger, message: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(SUCCESS):
            kwargs["extra"] = kwargs.get("extra", {})
            kwargs["extra"]["markup"] = True
            self._log(SUCCESS, f"[bold green]{message}[/]", args, stacklevel=2, **kwargs)

    # Less prominent than INFO
    def notice(self: logging.Logger, message: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(NOTICE):
            self._log(NOTICE, message, args, stacklevel=2, **kwargs)

    setattr(logging.Logger, "success", success)
    setattr(logging.Logger, "notice", notice)

    logger.debug("Rich logging configured at level %s", level.upper())
    if log_file:
        logger.debug("Log file: %s", log_file)

    return cast(ExtendedLogger, logger)


class ProgressTracker:
    """
    Progress bar with a rolling log of recent items below it.

    The total is not known up front when cloning a tree: it starts at the
    number of queued items and grows with ``add_total`` as children are found.
    """

    def __init__(
        self,
        description: str,
        total: int = 1,
        log_title: str = "Recent Clones",
        max_log_items: int = 5,
    ):
        self.description = description
        self.total = total
        self.log_title = log_title
        self.progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("({task.completed}/{task.total})"),
            console=console,
        )
        self.task_id = self.progress.add_task(description, total=total)
        self.recent_items: deque[str] = deque(maxlen=max_log_items)
        self.processed_count = 0
        self.live: Live | None = None

    def __enter__(self):
        """Start the live display when entering context."""
        self.live = Live(
            console=console,
            refresh_per_second=2,
            auto_refresh=True,
            vertical_overflow="ellipsis",
        )
        self.live.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Close the live display when exiting context."""
        if self.live:
            self.live.__exit__(exc_type, exc_val, exc_tb)

    def add_total(self, count: int = 1) -> None:
        """Grow the expected total by ``count`` newly queued items."""
        self.total += count
        self.progress.update(self.task_id, total=self.total)

    def add_log_item(self, item: str) -> None:
        self.recent_items.append(item)
        self._update_display()

    def increment(self, advance: int = 1, description: str | None = None) -> None:
        self.processed_count += advance
        if description:
            self.progress.update(
                self.task_id, completed=self.processed_count, description=description
            )
        else:
            self.progress.update(self.task_id, completed=self.processed_count)
        self._update_display()

    def _update_display(self) -> None:
        if not self.live:
            return

        log_table = Table.grid(padding=(0, 1))
        log_table.add_column()
        log_table.add_row(Text(f"{self.log_title}:", style="bold yellow"))
        for item in self.recent_items:
            log_table.add_row(f"  - {item}")

        if self.recent_items:
            combined = Table.grid(padding=1)
            combined.add_column()
            combined.add_row(self.progress)
            combined.add_row(log_table)
            self.live.update(Panel.fit(combined, title=self.description, border_style="blue"))
        else:
            self.live.update(self.progress)


def print_clone_summary(created: Mapping[int, int], title: str = "Cloned work items") -> None:
    """Print the original -> clone id mapping as a table."""
    table = Table(title=title)
    table.add_column("Original", justify="right", style="cyan")
    table.add_column("Clone", justify="right", style="green")
    for original_id, new_id in created.items():
        table.add_row(str(original_id), str(new_id))
    console.print(table)
