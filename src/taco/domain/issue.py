"""Issue — the domain record, built on the schema engine.

Identity (``id``), timestamps (``created_at``, ``updated_at``) and an
append-only changelog are managed by the entity itself; every other
attribute is schema-governed and settable.

INVARIANTS:
- ``id`` and ``created_at`` never change after construction.
- Every accepted mutation of a settable attribute whose value differs
  from the prior one appends a :class:`Change` and advances
  ``updated_at`` (never below ``created_at``). The one exception is a
  changelog supplied wholesale when reconstituting from storage.
- Equality and ordering depend on attribute values only.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from taco.domain.change import Change
from taco.domain.errors import (
    AttributeTypeError,
    IntegrityError,
    ReadOnlyAttributeError,
    UnknownAttributeError,
)
from taco.domain.ids import generate_issue_id, is_storable_id
from taco.domain.schema import AttrType, Schema, SchemaRecord, scrub_timestamp, utcnow
from taco.domain.template import parse_template, render_display, render_template

ISSUE_OWNER = "Issue"
DEFAULT_PRIORITIES = (1, 2, 3, 4, 5)


def build_issue_schema() -> Schema:
    """Return a fresh, independent Issue schema with the built-in attributes."""
    schema = Schema(ISSUE_OWNER)
    schema.declare("id", AttrType.TEXT, validate=is_storable_id)
    schema.declare("created_at", AttrType.TIMESTAMP)
    schema.declare("updated_at", AttrType.TIMESTAMP)
    schema.declare("summary", AttrType.TEXT, settable=True)
    schema.declare("kind", AttrType.TEXT, settable=True)
    schema.declare("status", AttrType.TEXT, settable=True)
    schema.declare("priority", AttrType.INTEGER, settable=True, validate=DEFAULT_PRIORITIES)
    schema.declare("owner", AttrType.TEXT, settable=True)
    schema.declare("description", AttrType.TEXT, settable=True)
    return schema


_default_schema: Schema | None = None


def default_issue_schema() -> Schema:
    """Process default schema, used when no schema is passed explicitly."""
    global _default_schema
    if _default_schema is None:
        _default_schema = build_issue_schema()
    return _default_schema


class IssueDocument(BaseModel):
    """Stored JSON form: attribute map plus the full changelog."""

    issue: dict[str, Any]
    changelog: list[Change] = Field(default_factory=list)


class Issue(SchemaRecord):
    """A tracked issue.

    Args:
        attributes: Initial values; text is accepted wherever it coerces.
        changelog: Pre-existing changelog (load path). When given, it is
            trusted as-is and construction records no changes.
        schema: Attribute schema (defaults to :func:`default_issue_schema`).

    Raises:
        UnknownAttributeError: *attributes* names an undeclared attribute.
        AttributeTypeError: A value cannot be coerced to its type.
    """

    def __init__(
        self,
        attributes: Mapping[str, Any] | None = None,
        changelog: Iterable[Change | Mapping[str, Any]] | None = None,
        *,
        schema: Schema | None = None,
    ) -> None:
        super().__init__(schema if schema is not None else default_issue_schema())
        attrs = {str(key): value for key, value in (attributes or {}).items()}
        unknown = sorted(key for key in attrs if key not in self._schema)
        if unknown:
            msg = f"Unknown Issue attribute: {', '.join(unknown)}"
            raise UnknownAttributeError(msg, name=unknown[0])

        object.__setattr__(self, "_new", attrs.get("id") is None and attrs.get("created_at") is None)
        object.__setattr__(self, "_changelog", [])
        object.__setattr__(self, "_tracking", changelog is None)

        if attrs.get("id") is None:
            attrs["id"] = generate_issue_id()
        if attrs.get("created_at") is None:
            attrs["created_at"] = utcnow()
        updated_at = attrs.pop("updated_at", None)

        for attribute in self._schema:
            if attribute.name in attrs:
                self._schema.set(
                    self._values,
                    attribute.name,
                    attrs[attribute.name],
                    on_change=self._attribute_changed,
                    internal=True,
                )

        if updated_at is not None:
            self._write("updated_at", updated_at)
        elif "updated_at" not in self._values and changelog is None:
            self._touch()

        if changelog is not None:
            entries = [c if isinstance(c, Change) else Change.model_validate(c) for c in changelog]
            object.__setattr__(self, "_changelog", entries)
        object.__setattr__(self, "_tracking", True)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def changelog(self) -> list[Change]:
        """A copy of the changelog, oldest first."""
        return list(self._changelog)

    @property
    def is_new(self) -> bool:
        """True when constructed without an id and created_at."""
        return self._new

    def _write(self, name: str, value: Any) -> None:
        self._schema.set(self._values, name, value, internal=True)

    def _touch(self) -> None:
        now = scrub_timestamp(utcnow())
        self._write("updated_at", max(now, self.get("created_at")))

    def _attribute_changed(self, name: str, old: Any, new: Any) -> None:
        if not self._tracking or not self._schema[name].settable or old == new:
            return
        self._changelog.append(Change(attribute=name, old_value=old, new_value=new))
        self._touch()

    # ------------------------------------------------------------------
    # Equality and ordering
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Issue):
            return NotImplemented
        return self.to_mapping() == other.to_mapping()

    __hash__ = None  # type: ignore[assignment]

    def _compare(self, other: Issue) -> int:
        if self == other:
            return 0
        mine = (self.get("created_at"), self.get("id"))
        theirs = (other.get("created_at"), other.get("id"))
        # Differing issues never compare equal, even on identical keys.
        return -1 if mine <= theirs else 1

    def __lt__(self, other: Issue) -> bool:
        return self._compare(other) < 0

    def __le__(self, other: Issue) -> bool:
        return self._compare(other) <= 0

    def __gt__(self, other: Issue) -> bool:
        return self._compare(other) > 0

    def __ge__(self, other: Issue) -> bool:
        return self._compare(other) >= 0

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={value!r}" for name, value in self.to_mapping().items())
        return f"<Issue {fields}>"

    def __str__(self) -> str:
        return self.render_text()

    # ------------------------------------------------------------------
    # Structured serialization
    # ------------------------------------------------------------------

    def to_document(self) -> IssueDocument:
        """Lossless structured form. Raises if the issue is invalid."""
        self.validate()
        return IssueDocument(issue=self.to_mapping(), changelog=list(self._changelog))

    def to_dict(self) -> dict[str, Any]:
        return self.to_document().model_dump(mode="json")

    def to_json(self) -> str:
        return self.to_document().model_dump_json(indent=2)

    @classmethod
    def from_document(cls, document: IssueDocument, *, schema: Schema | None = None) -> Issue:
        try:
            return cls(document.issue, document.changelog, schema=schema)
        except (AttributeTypeError, UnknownAttributeError) as exc:
            msg = f"Stored issue is not loadable: {exc}"
            raise IntegrityError(msg) from exc

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, schema: Schema | None = None) -> Issue:
        try:
            document = IssueDocument.model_validate(data)
        except ValidationError as exc:
            msg = f"Unparseable issue document: {exc.error_count()} error(s)"
            raise IntegrityError(msg) from exc
        return cls.from_document(document, schema=schema)

    @classmethod
    def from_json(cls, text: str, *, schema: Schema | None = None) -> Issue:
        try:
            document = IssueDocument.model_validate_json(text)
        except ValidationError as exc:
            msg = f"Unparseable issue document: {exc.error_count()} error(s)"
            raise IntegrityError(msg) from exc
        return cls.from_document(document, schema=schema)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def to_template(self) -> str:
        return render_template(
            self._schema,
            self.to_mapping(),
            new=self._new,
            changelog=None if self._new else self._changelog,
        )

    def render_text(self, *, changelog: bool = False) -> str:
        return render_display(
            self._schema,
            self.to_mapping(),
            changelog=self._changelog if changelog else None,
        )

    @classmethod
    def new_template(
        cls,
        defaults: Mapping[str, Any] | None = None,
        *,
        schema: Schema | None = None,
    ) -> str:
        """Template for a brand-new issue, pre-filled with settable *defaults*."""
        schema = schema if schema is not None else default_issue_schema()
        for name in defaults or {}:
            if not schema[name].settable:
                msg = f"attribute {name}: is not settable"
                raise ReadOnlyAttributeError(msg)
        return cls(defaults, schema=schema).to_template()

    @classmethod
    def from_template(cls, text: str, *, schema: Schema | None = None) -> Issue:
        """Build a new issue from edited template text."""
        schema = schema if schema is not None else default_issue_schema()
        return cls(parse_template(schema, text), schema=schema)

    def update_from_template(self, text: str) -> Issue:
        """Re-apply the settable portion of *text*; read-only fields are kept.

        All values are checked before any is applied, so a type error
        leaves the issue untouched. ``updated_at`` always advances.
        """
        values = parse_template(self._schema, text)
        accepted = {name: self._schema[name].accept(value) for name, value in values.items()}
        for name, value in accepted.items():
            self.set(name, value)
        self._touch()
        return self
