"""Typed failures raised by the core.

Every error derives from :class:`TacoError` and from the closest builtin,
so callers may catch either. The service layer maps each class to a
stable ``code`` for :class:`~taco.services.result.ServiceError`.
"""

from __future__ import annotations

from typing import Any


class TacoError(Exception):
    """Base class for all taco failures."""

    code = "TACO_ERROR"

    @property
    def detail(self) -> dict[str, Any]:
        """Structured payload for diagnostics (empty by default)."""
        return {}


# ---------------------------------------------------------------------------
# Schema errors
# ---------------------------------------------------------------------------


class DeclarationError(TacoError, TypeError):
    """Schema misconfiguration detected at declaration time."""

    code = "DECLARATION_ERROR"


class AttributeTypeError(TacoError, TypeError):
    """A value could not be coerced to, or does not match, an attribute type."""

    code = "TYPE_ERROR"


class ReadOnlyAttributeError(TacoError, AttributeError):
    """Attempt to set or update an attribute that is not settable."""

    code = "READ_ONLY"


class UnknownAttributeError(TacoError, KeyError):
    """An attribute name (or prefix) is not declared on the schema."""

    code = "UNKNOWN_ATTRIBUTE"

    def __init__(self, message: str, *, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0]) if self.args else ""

    @property
    def detail(self) -> dict[str, Any]:
        return {"attribute": self.name} if self.name else {}


class InvalidIssueError(TacoError, ValueError):
    """A record failed validation; carries the first failing attribute."""

    code = "VALIDATION_FAILED"

    def __init__(self, attribute: str, value: Any) -> None:
        self.attribute = attribute
        self.value = value
        super().__init__(f"{value!r} is not a valid value for {attribute}")

    @property
    def detail(self) -> dict[str, Any]:
        return {"attribute": self.attribute, "value": self.value}


class TemplateParseError(TacoError, ValueError):
    """Edited template text could not be parsed."""

    code = "TEMPLATE_PARSE_ERROR"

    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        super().__init__(f"{message} on line {line}" if line is not None else message)

    @property
    def detail(self) -> dict[str, Any]:
        return {"line": self.line} if self.line is not None else {}


# ---------------------------------------------------------------------------
# Repository errors
# ---------------------------------------------------------------------------


class NotFoundError(TacoError, LookupError):
    """No issue matches an identifier or prefix."""

    code = "NOT_FOUND"


class AmbiguousIdError(TacoError, LookupError):
    """An identifier prefix matches more than one issue."""

    code = "AMBIGUOUS_ID"

    def __init__(self, prefix: str, candidates: list[tuple[str, str]]) -> None:
        self.prefix = prefix
        self.candidates = candidates
        listing = "\n".join(f"{issue_id} : {summary}" for issue_id, summary in candidates)
        super().__init__(f"Found several matching issues:\n{listing}")

    @property
    def detail(self) -> dict[str, Any]:
        return {
            "prefix": self.prefix,
            "candidates": [{"id": i, "summary": s} for i, s in self.candidates],
        }


class IntegrityError(TacoError):
    """Stored content is corrupt: unparseable, or file name != issue id."""

    code = "INTEGRITY_ERROR"

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)

    @property
    def detail(self) -> dict[str, Any]:
        return {"path": self.path} if self.path else {}


class RepositoryError(TacoError):
    """The repository directory is missing or already initialized."""

    code = "REPOSITORY_ERROR"


class InvalidFilterError(TacoError, ValueError):
    """A listing filter is not of the form ``attribute:value``."""

    code = "INVALID_FILTER"


# ---------------------------------------------------------------------------
# Interactive workflow errors
# ---------------------------------------------------------------------------


class EditorError(TacoError):
    """No editor is configured, or the editor exited abnormally."""

    code = "EDITOR_ERROR"


class RecoveryNotFoundError(TacoError, LookupError):
    """``--retry`` was requested but no saved edit session exists."""

    code = "NO_RECOVERY"


class ConfigError(TacoError):
    """The configuration overlay or display profile is invalid."""

    code = "CONFIG_ERROR"
