"""
Updater Configuration - TOML-based settings.

This module provides:
- The updater settings schema
- Runtime typed access with auto-flush
- Settings file generation with comments

Example usage:
    import upkeep.config

    settings = upkeep.config.load(Path("upkeep.toml"))
    print(settings.database)           # Read
    settings.version_comparison = "latest"  # Write (auto-flushes)
"""

from pathlib import Path

from upkeep.config.runtime import Settings, SettingsError
from upkeep.config.schema import (
    UPDATER_SCHEMA,
    ConfigField,
    SchemaError,
    ValidationError,
    generate_default_config,
)
from upkeep.config.toml_handler import TOMLError, generate_toml_from_schema

SECTION = "updater"

DEFAULT_CONFIG_FILE = Path("upkeep.toml")


class ConfigError(Exception):
    """Raised when the settings file cannot be used."""

    pass


def load(config_file: Path = DEFAULT_CONFIG_FILE) -> Settings:
    """
    Load the updater settings.

    A missing file yields the defaults; nothing is written until a setting
    is changed.

    Args:
        config_file: Path to the TOML settings file

    Returns:
        Settings proxy for the [updater] section

    Raises:
        ConfigError: If the file cannot be parsed or fails validation
    """
    try:
        return Settings(SECTION, UPDATER_SCHEMA, config_file)
    except (TOMLError, SchemaError, SettingsError) as e:
        raise ConfigError(f"Invalid settings in {config_file}: {e}") from e


def write_default(config_file: Path = DEFAULT_CONFIG_FILE) -> None:
    """
    Write a commented settings file with default values.

    Raises:
        ConfigError: If the file exists already or cannot be written
    """
    if config_file.exists():
        raise ConfigError(f"Settings file {config_file} exists already")
    content = generate_toml_from_schema(
        SECTION, UPDATER_SCHEMA, generate_default_config(UPDATER_SCHEMA)
    )
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to write {config_file}: {e}") from e


__all__ = [
    "ConfigError",
    "ConfigField",
    "Settings",
    "ValidationError",
    "UPDATER_SCHEMA",
    "load",
    "write_default",
]
