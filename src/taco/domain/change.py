"""Change — one entry of an issue's append-only audit trail."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from taco.domain.schema import scrub_timestamp, utcnow

DISPLAY_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def display_date(value: datetime) -> str:
    """Format a timestamp for human-facing output."""
    return value.strftime(DISPLAY_DATE_FORMAT)


class Change(BaseModel):
    """An accepted mutation of a settable attribute.

    ``old_value`` is ``None`` when the attribute was first set during
    construction.
    """

    model_config = {"frozen": True, "validate_default": True}

    timestamp: datetime = Field(default_factory=utcnow)
    attribute: str
    old_value: Any = None
    new_value: Any = None

    @field_validator("timestamp")
    @classmethod
    def _scrub(cls, value: datetime) -> datetime:
        return scrub_timestamp(value)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def describe(self, *, simple: bool = False) -> str:
        """One-line rendition; multi-line values keep their newlines."""
        if simple:
            return f"{self.attribute} : {self.old_value} => {self.new_value}"
        old = "[nil]" if self.old_value is None else self.old_value
        return (
            f"{display_date(self.timestamp):>10} : {self.attribute:>12} : "
            f"{old} => {self.new_value}"
        )


def comment_changelog(changelog: list[Change]) -> str:
    """Render a changelog as ``#``-commented lines (template footers, show)."""
    lines = []
    for change in changelog:
        text = change.describe().strip().replace("\n", "\n# ")
        lines.append(f"# {text}")
    return "\n".join(lines)
