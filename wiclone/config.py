"""Configuration module for the work item cloner.
Provides a centralized configuration interface using ConfigLoader.
"""

from pathlib import Path
from typing import Any

from wiclone.config_loader import ConfigLoader
from wiclone.display import configure_logging
from wiclone.type_definitions import Config, DirType, LogLevel, SectionName

# Create a singleton instance of ConfigLoader
_config_loader = ConfigLoader()

# Extract configuration sections for easy access
azure_config = _config_loader.get_azure_config()
clone_config = _config_loader.get_clone_config()

root_dir = Path(__file__).parent.parent
var_dir = root_dir / "var"

var_dirs: dict[DirType, Path] = {
    "root": var_dir,
    "logs": var_dir / "logs",
}

for dir_path in var_dirs.values():
    dir_path.mkdir(parents=True, exist_ok=True)

LOG_LEVEL: LogLevel = clone_config.get("log_level", "INFO")
log_file = var_dirs["logs"] / "wiclone.log"
logger = configure_logging(LOG_LEVEL, log_file)


def get_config() -> Config:
    """Get the complete configuration object."""
    return _config_loader.get_config()


def get_value(section: SectionName, key: str, default: Any = None) -> Any:
    """Get a specific configuration value."""
    return _config_loader.get_value(section, key, default)


def get_path(path_type: DirType) -> Path:
    """Get a specific path from var_dirs."""
    if path_type not in var_dirs:
        msg = f"Invalid path type: {path_type}"
        raise ValueError(msg)

    return var_dirs[path_type]


def validate_config() -> bool:
    """Validate that the settings required by the selected backend are set."""
    missing_vars = []

    match azure_config.get("backend", "cli"):
        case "rest":
            for key in ("organization", "pat"):
                if not azure_config.get(key):
                    missing_vars.append(f"WICLONE_AZURE_{key.upper()}")
        case "cli":
            pass
        case other:
            logger.error("Unknown backend: %s (expected 'cli' or 'rest')", other)
            return False

    if missing_vars:
        logger.error(
            "Missing required environment variables: %s", ", ".join(missing_vars),
        )
        return False

    return True


def update_from_cli_args(args: Any) -> None:
    """Update configuration from CLI arguments.

    Args:
        args: An object containing CLI arguments (typically from argparse)

    """
    if getattr(args, "dry_run", False):
        clone_config["dry_run"] = True
        logger.debug("Setting dry_run=True from CLI arguments")

    if getattr(args, "no_escape", False):
        clone_config["escape_quotes"] = False
        logger.debug("Setting escape_quotes=False from CLI arguments")

    for key in ("backend", "organization", "project"):
        value = getattr(args, key, None)
        if value:
            azure_config[key] = value
            logger.debug("Setting azure.%s=%s from CLI arguments", key, value)

    log_level = getattr(args, "log_level", None)
    if log_level:
        clone_config["log_level"] = log_level.upper()
        configure_logging(log_level, log_file)
