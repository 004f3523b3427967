"""
Configuration Schema.

This module declares the updater settings and validates values against
them.

Key features:
- Type-safe field definitions with choices and min/max constraints
- The updater schema (database path, platform, site URL, ...)
- Default configuration generation
"""

from dataclasses import dataclass
from typing import Any

from upkeep.core.sites import DEFAULT_SITE_URL


class SchemaError(Exception):
    """Raised when a field definition is invalid."""

    pass


class ValidationError(SchemaError):
    """Raised when a value does not satisfy its field."""

    pass


@dataclass
class ConfigField:
    """
    A configuration field with type and constraints.

    Attributes:
        type_: The expected type of the field value
        default: Default value for the field
        description: Human-readable description (written as a TOML comment)
        min: Minimum value (numbers) or minimum length (strings)
        max: Maximum value (numbers) or maximum length (strings)
        choices: List of allowed values (optional)
    """

    type_: type
    default: Any
    description: str = ""
    min: Any = None
    max: Any = None
    choices: list[Any] | None = None

    def __post_init__(self):
        if not isinstance(self.default, self.type_):
            raise SchemaError(
                f"Default value {self.default!r} does not match type {self.type_.__name__}"
            )
        if (self.min is not None or self.max is not None) and self.type_ not in (
            int,
            str,
        ):
            raise SchemaError(
                f"min/max constraints only supported for int and str. Got {self.type_.__name__}"
            )
        if self.choices is not None and self.default not in self.choices:
            raise SchemaError(
                f"Default value {self.default!r} not in choices {self.choices}"
            )

    def validate(self, value: Any) -> None:
        """
        Validate a value against this field.

        Raises:
            ValidationError: If validation fails
        """
        # bool is an int subclass; keep them apart
        if not isinstance(value, self.type_) or (
            self.type_ is int and isinstance(value, bool)
        ):
            raise ValidationError(
                f"Expected type {self.type_.__name__}, got {type(value).__name__}"
            )

        if self.choices is not None and value not in self.choices:
            raise ValidationError(
                f"Value {value!r} not in allowed choices {self.choices}"
            )

        size = len(value) if self.type_ is str else value
        if self.min is not None and size < self.min:
            raise ValidationError(f"Value {value!r} is less than minimum {self.min}")
        if self.max is not None and size > self.max:
            raise ValidationError(
                f"Value {value!r} is greater than maximum {self.max}"
            )


UPDATER_SCHEMA: dict[str, ConfigField] = {
    "database": ConfigField(
        str, "db.toml", "Path of the local file database", min=1
    ),
    "platform": ConfigField(
        str, "", "Active platform (e.g. linux64, win64, macosx); empty to auto-detect"
    ),
    "developer": ConfigField(
        bool, False, "Developer session: the primary site gets an upload target"
    ),
    "primary_site_url": ConfigField(
        str, DEFAULT_SITE_URL, "URL of the primary update site", min=1
    ),
    "upload_target": ConfigField(
        str, "", "Upload target of the primary site in developer sessions"
    ),
    "version_comparison": ConfigField(
        str,
        "history",
        "Compare local copies against all known versions (history) or the latest only",
        choices=["history", "latest"],
    ),
    "log_level": ConfigField(
        str,
        "INFO",
        "Logging level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    ),
}


def validate_config(config: dict[str, Any], schema: dict[str, ConfigField]) -> None:
    """
    Validate a configuration section against a schema.

    Missing fields fall back to their defaults and are not an error.

    Raises:
        ValidationError: On unknown fields or invalid values
    """
    for key in config:
        if key not in schema:
            raise ValidationError(f"Unknown configuration field: {key}")

    for field_name, field in schema.items():
        if field_name not in config:
            continue
        try:
            field.validate(config[field_name])
        except ValidationError as e:
            raise ValidationError(f"Field '{field_name}': {e}") from e


def generate_default_config(schema: dict[str, ConfigField]) -> dict[str, Any]:
    return {field_name: field.default for field_name, field in schema.items()}
