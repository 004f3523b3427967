"""
Runtime Configuration Access.

This module provides attribute access to the updater settings with
auto-flush on write.

Key features:
- Settings class with attribute-based access
- Auto-flush to the TOML file on attribute write
- Thread-safe file writes with locking
- Validation on load and on write
"""

import threading
from pathlib import Path
from typing import Any

from upkeep.config.schema import ConfigField, validate_config
from upkeep.config.toml_handler import read_toml, write_toml


class SettingsError(Exception):
    """Raised when settings cannot be loaded or flushed."""

    pass


class Settings:
    """
    Proxy object for the settings of one TOML section.

    Reads fall back to the schema defaults; writes are validated and
    immediately flushed to the file, leaving other sections untouched.

    Example:
        settings = Settings("updater", UPDATER_SCHEMA, Path("upkeep.toml"))
        settings.platform             # Read
        settings.platform = "linux64"  # Write (auto-flushes to file)
    """

    def __init__(
        self,
        section: str,
        schema: dict[str, ConfigField],
        config_file: Path,
    ):
        """
        Initialize Settings.

        Args:
            section: Name of the TOML table holding the settings
            schema: Schema dictionary (field_name -> ConfigField)
            config_file: Path to the TOML config file
        """
        # object.__setattr__ bypasses the validating __setattr__
        object.__setattr__(self, "_section", section)
        object.__setattr__(self, "_schema", schema)
        object.__setattr__(self, "_config_file", config_file)
        object.__setattr__(self, "_lock", threading.Lock())
        object.__setattr__(self, "_cache", {})

        self._load()

    def _load(self) -> None:
        values = {name: field.default for name, field in self._schema.items()}
        if self._config_file.exists():
            data = read_toml(self._config_file)
            section = data.get(self._section, {})
            if not isinstance(section, dict):
                raise SettingsError(
                    f"[{self._section}] in {self._config_file} is not a table"
                )
            validate_config(section, self._schema)
            values.update(section)
        object.__setattr__(self, "_cache", values)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return object.__getattribute__(self, name)

        if name not in self._schema:
            raise AttributeError(f"Unknown setting '{name}' in [{self._section}]")

        return self._cache[name]

    def __setattr__(self, name: str, value: Any) -> None:
        """
        Set a value and flush it to the file.

        Raises:
            AttributeError: If the setting does not exist
            ValidationError: If the value fails validation
        """
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return

        if name not in self._schema:
            raise AttributeError(f"Unknown setting '{name}' in [{self._section}]")

        self._schema[name].validate(value)

        with self._lock:
            self._cache[name] = value
            self._flush()

    def _flush(self) -> None:
        data = read_toml(self._config_file) if self._config_file.exists() else {}
        data[self._section] = self._cache.copy()
        write_toml(self._config_file, data)

    def as_dict(self) -> dict[str, Any]:
        return dict(self._cache)

    def __repr__(self) -> str:
        return f"Settings([{self._section}], {self._cache})"
