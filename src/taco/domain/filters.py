"""Listing filters — a closed set of ``attribute:value`` equality tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from taco.domain.errors import InvalidFilterError
from taco.domain.schema import Schema
from taco.domain.template import format_value


def index_value(value: Any) -> str:
    """Normalized form under which a value is indexed and matched."""
    return format_value(value).lower()


@dataclass(frozen=True)
class Filter:
    """Match issues whose *attribute* has the (case-insensitive) *value*."""

    attribute: str
    value: str

    @classmethod
    def parse(cls, text: str, schema: Schema) -> Filter:
        """Parse ``attribute:value``; the attribute may be a unique prefix.

        Raises:
            InvalidFilterError: No ``:`` separator or an empty attribute.
            UnknownAttributeError: The attribute prefix matches zero or
                several attributes.
        """
        attribute, sep, value = text.partition(":")
        attribute = attribute.strip().lower()
        if not sep or not attribute:
            msg = f"Filter must look like attribute:value, got {text!r}"
            raise InvalidFilterError(msg)
        return cls(schema.expand(attribute), value.strip().lower())

    def __str__(self) -> str:
        return f"{self.attribute}:{self.value}"


def parse_filters(texts: list[str] | tuple[str, ...], schema: Schema) -> list[Filter]:
    return [Filter.parse(text, schema) for text in texts]
