"""Configuration loading for the work item cloner.

Handles loading and accessing configuration settings.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from wiclone.type_definitions import (
    AzureConfig,
    CloneConfig,
    Config,
    ConfigValue,
    SectionName,
)

# Set up basic logging for configuration loading phase
config_logger = logging.getLogger("config_loader")

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "NOTICE", "WARNING", "ERROR", "CRITICAL", "SUCCESS")


def is_test_environment() -> bool:
    """Detect if code is running in a test environment.

    Returns:
        bool: True if pytest is running or WICLONE_TEST_MODE is set

    """
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True

    return os.environ.get("WICLONE_TEST_MODE", "").lower() in ("true", "1", "yes")


class ConfigLoader:
    """Loads and provides access to configuration settings from YAML files and environment variables."""

    def __init__(self, config_file_path: Path | None = None) -> None:
        """Initialize the configuration loader.

        Args:
            config_file_path (Path): Path to the YAML configuration file. Defaults to
                ``WICLONE_CONFIG`` or ``config/config.yaml`` in the project root.

        """
        self._load_environment_configuration()

        if config_file_path is None:
            env_path = os.environ.get("WICLONE_CONFIG")
            config_file_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

        self.config: Config = self._load_yaml_config(config_file_path)

        # Initialize default structure if not present
        if not self.config.get("azure"):
            self.config["azure"] = {}
        if not self.config.get("clone"):
            self.config["clone"] = {}

        self._apply_environment_overrides()

    def _load_environment_configuration(self) -> None:
        """Load environment variables from .env files based on execution context.

        The loading order respects precedence:
        - .env (base config for all environments)
        - .env.local (local overrides, if present)
        - .env.test (test-specific config, if in test environment)
        - .env.test.local (local test overrides, if in test environment and present)

        Later files override values from earlier files.
        """
        load_dotenv(".env")
        config_logger.debug("Loaded base environment from .env")

        if Path(".env.local").exists():
            load_dotenv(".env.local", override=True)
            config_logger.debug("Loaded local overrides from .env.local")

        if not is_test_environment():
            return

        config_logger.debug("Running in test environment")
        for name in (".env.test", ".env.test.local"):
            if Path(name).exists():
                load_dotenv(name, override=True)
                config_logger.debug("Loaded test environment from %s", name)

    def _load_yaml_config(self, config_file_path: Path) -> Config:
        """Load configuration from YAML file.

        Args:
            config_file_path (Path): Path to the YAML configuration file

        Returns:
            dict: Configuration settings

        """
        try:
            with config_file_path.open("r") as config_file:
                config: Config = yaml.safe_load(config_file) or {}
                return config
        except FileNotFoundError:
            config_logger.exception("Config file not found: %s", config_file_path)
            raise

    def _apply_environment_overrides(self) -> None:
        """Override configuration settings with WICLONE_* environment variables."""
        for env_var, env_value in os.environ.items():
            if not env_var.startswith("WICLONE_"):
                continue

            match env_var.split("_"):
                case ["WICLONE", "LOG", "LEVEL"]:
                    log_level = env_value.upper()
                    if log_level in LOG_LEVELS:
                        self.config["clone"]["log_level"] = log_level
                    config_logger.debug("Applied log level: %s", log_level)

                case ["WICLONE", "DRY", "RUN"]:
                    self.config["clone"]["dry_run"] = self._convert_bool(env_value)
                    config_logger.debug("Applied dry run: %s", env_value)

                case ["WICLONE", "ESCAPE", "QUOTES"]:
                    self.config["clone"]["escape_quotes"] = self._convert_bool(env_value)
                    config_logger.debug("Applied escape quotes: %s", env_value)

                case ["WICLONE", "AZURE", *rest] if rest:
                    key = "_".join(rest).lower()
                    self.config["azure"][key] = self._convert_value(env_value)
                    # The token is a secret; log the key only
                    config_logger.debug("Applied Azure config: %s", key)

    def _convert_bool(self, value: str) -> bool:
        return value.lower() not in ("false", "0", "no", "n", "f", "")

    def _convert_value(self, value: str) -> ConfigValue:
        """Convert string value to appropriate type."""
        if value.isdigit():
            return int(value)

        match value.lower():
            case "true" | "yes" | "y":
                return True
            case "false" | "no" | "n":
                return False
            case _:
                return value

    def get_config(self) -> Config:
        """Get the complete configuration dictionary."""
        return self.config

    def get_azure_config(self) -> AzureConfig:
        """Get Azure Boards connection settings."""
        return self.config["azure"]

    def get_clone_config(self) -> CloneConfig:
        """Get clone run settings."""
        return self.config["clone"]

    def get_value(self, section: SectionName, key: str, default: Any = None) -> Any:
        """Get a specific configuration value.

        Args:
            section (str): Configuration section (azure, clone)
            key (str): Configuration key
            default: Default value if not found

        Returns:
            Configuration value or default if not found

        """
        return self.config[section].get(key, default)
