"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``.taco/.taco.toml`` only
contains overrides.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from taco.domain.errors import (
    AttributeTypeError,
    ConfigError,
    DeclarationError,
    InvalidFilterError,
    ReadOnlyAttributeError,
    UnknownAttributeError,
)
from taco.domain.filters import parse_filters
from taco.domain.schema import Schema

SHORT_ID_COLUMN = "short_id"

DEFAULT_CONFIG_TOML = """\
# taco repository configuration.
#
# [attributes.<name>] tables adjust the default and the allowed values of
# settable Issue attributes. [profile] controls how `taco list` sorts,
# which columns it shows, and the filters it applies when given none.

[attributes.kind]
default = "Defect"
validate = ["Defect", "Feature Request", "Task"]

[attributes.status]
default = "Open"
validate = ["Open", "In Progress", "Closed", "Rejected"]

[attributes.priority]
default = 3

[profile]
sort = ["created_at", "id"]
columns = ["short_id", "priority", "summary"]
filters = []
"""


class AttributeOverride(BaseModel):
    """[attributes.<name>] table."""

    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    default: Any = None
    allowed: list[Any] | None = Field(default=None, alias="validate")


class ProfileConfig(BaseModel):
    """[profile] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    sort: list[str] = Field(default_factory=lambda: ["created_at", "id"])
    columns: list[str] = Field(default_factory=lambda: [SHORT_ID_COLUMN, "priority", "summary"])
    filters: list[str] = Field(default_factory=list)

    @field_validator("sort", "columns", mode="before")
    @classmethod
    def _split_names(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("filters", mode="before")
    @classmethod
    def _split_filters(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.split()
        return value

    def check(self, schema: Schema) -> None:
        """Raise :class:`ConfigError` if the profile names unknown attributes."""
        for section, names in (("sort", self.sort), ("columns", self.columns)):
            for name in names:
                if name != SHORT_ID_COLUMN and name not in schema:
                    msg = f"Unknown Issue attribute in [profile] {section}: {name}"
                    raise ConfigError(msg)
        try:
            parse_filters(self.filters, schema)
        except (InvalidFilterError, UnknownAttributeError) as exc:
            msg = f"Invalid [profile] filters: {exc}"
            raise ConfigError(msg) from exc


def apply_overrides(schema: Schema, overrides: dict[str, AttributeOverride]) -> Schema:
    """Apply ``[attributes.<name>]`` tables to *schema* via :meth:`Schema.update`.

    Values are coerced with the attribute's own rules first, so ``"3"``
    is an acceptable priority default.

    Raises:
        ConfigError: An override names an unknown or read-only attribute,
            or carries a value of the wrong type.
    """
    for name, override in overrides.items():
        try:
            attribute = schema[name]
            options: dict[str, Any] = {}
            if override.default is not None:
                options["default"] = attribute.accept(override.default)
            if override.allowed is not None:
                options["validate"] = [attribute.accept(v) for v in override.allowed]
            if options:
                schema.update(name, **options)
        except (
            AttributeTypeError,
            DeclarationError,
            ReadOnlyAttributeError,
            UnknownAttributeError,
        ) as exc:
            msg = f"Invalid [attributes.{name}] configuration: {exc}"
            raise ConfigError(msg) from exc
    return schema
