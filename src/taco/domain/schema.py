"""Schema engine — declarative attributes with coercion, transform, validation.

A :class:`Schema` is an ordered table of :class:`Attribute` descriptors for
one owner type. Records keep their values in a plain ``name -> value`` map
and route every read and write through :meth:`Schema.get` /
:meth:`Schema.set`, which enforce the descriptor's rules:

- **get**: materializes the default on first access (lazy defaults are
  type-checked on every evaluation) and applies the transform rule.
- **set**: coerce -> strict type check -> transform -> change callback ->
  commit. Non-settable attributes reject writes from outside the owner.
- **validation** is separate and only runs when validity is queried.

The schema can evolve at runtime (:meth:`Schema.declare`,
:meth:`Schema.remove`, :meth:`Schema.replace`, :meth:`Schema.update`);
configuration overlays use ``update`` exclusively.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from taco.domain.errors import (
    AttributeTypeError,
    DeclarationError,
    InvalidIssueError,
    ReadOnlyAttributeError,
    UnknownAttributeError,
)

ChangeCallback = Callable[[str, Any, Any], None]

_OPTION_NAMES = frozenset({"attr_type", "settable", "default", "validate", "coerce", "transform"})


class AttrType(StrEnum):
    """Semantic attribute types."""

    TEXT = "text"
    INTEGER = "integer"
    TIMESTAMP = "timestamp"


_PYTHON_TYPES: dict[AttrType, type] = {
    AttrType.TEXT: str,
    AttrType.INTEGER: int,
    AttrType.TIMESTAMP: datetime,
}


# ---------------------------------------------------------------------------
# Type helpers
# ---------------------------------------------------------------------------


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def is_type(attr_type: AttrType, value: Any) -> bool:
    """Strict type check. Booleans are never integers."""
    if attr_type is AttrType.INTEGER and isinstance(value, bool):
        return False
    return isinstance(value, _PYTHON_TYPES[attr_type])


def scrub_timestamp(value: datetime) -> datetime:
    """Normalize to UTC and drop sub-second precision.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).replace(microsecond=0)


def parse_timestamp(text: str) -> datetime:
    """Parse ISO-8601 text into an aware datetime (naive text means UTC)."""
    parsed = datetime.fromisoformat(text.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _coerce_integer(name: str, value: Any) -> Any:
    if is_type(AttrType.INTEGER, value):
        return value
    if not isinstance(value, str):
        msg = f"attribute {name}: cannot coerce from {type(value).__name__}"
        raise AttributeTypeError(msg)
    try:
        number = int(value)
    except ValueError:
        number = None
    # "03", " 3" and "3.0" are rejected: the text must be the integer's own form.
    if number is None or str(number) != value:
        msg = f"attribute {name}: failed to coerce from {value!r}"
        raise AttributeTypeError(msg)
    return number


def _coerce_timestamp(name: str, value: Any) -> Any:
    if is_type(AttrType.TIMESTAMP, value):
        return value
    if not isinstance(value, str):
        msg = f"attribute {name}: cannot coerce from {type(value).__name__}"
        raise AttributeTypeError(msg)
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        msg = f"attribute {name}: cannot coerce from {value!r}"
        raise AttributeTypeError(msg) from exc


_DEFAULT_COERCIONS: dict[AttrType, Callable[[str, Any], Any]] = {
    AttrType.INTEGER: _coerce_integer,
    AttrType.TIMESTAMP: _coerce_timestamp,
}

_DEFAULT_TRANSFORMS: dict[AttrType, Callable[[Any], Any]] = {
    AttrType.TEXT: str.strip,
    AttrType.TIMESTAMP: scrub_timestamp,
}

_TYPE_DEFAULTS: dict[AttrType, Any] = {
    AttrType.TEXT: "",
    AttrType.INTEGER: 0,
    AttrType.TIMESTAMP: utcnow,
}


def _ignore_change(name: str, old: Any, new: Any) -> None:
    """Default change callback."""


# ---------------------------------------------------------------------------
# Attribute descriptor
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Attribute:
    """Declared metadata for one schema field.

    Attributes:
        name: Attribute name (a Python identifier).
        attr_type: Semantic type.
        settable: Whether writes from outside the owner are accepted.
        default: Literal default, or a zero-argument callable evaluated lazily.
        validate: Allowed values (tuple) or a predicate; ``None`` means the
            type's implicit rule (text must be non-blank).
        coerce: ``None`` for the type's default coercion, ``False`` to
            disable, or a callable ``value -> value``.
        transform: ``None`` for the type's default transform, ``False`` to
            disable, or a callable ``value -> value``.
    """

    name: str
    attr_type: AttrType
    settable: bool = False
    default: Any = None
    validate: Any = None
    coerce: Any = None
    transform: Any = None

    @property
    def allowed_values(self) -> tuple[Any, ...] | None:
        """The finite allowed-value set, if one is declared."""
        return self.validate if isinstance(self.validate, tuple) else None

    def evaluate_default(self) -> Any:
        """Evaluate the default and apply the transform rule."""
        if callable(self.default):
            value = self.default()
            self.check_type(value)
        else:
            value = self.default
        return self.normalize(value)

    def coerce_value(self, value: Any) -> Any:
        if self.coerce is False:
            return value
        if callable(self.coerce):
            return self.coerce(value)
        coercion = _DEFAULT_COERCIONS.get(self.attr_type)
        return coercion(self.name, value) if coercion is not None else value

    def check_type(self, value: Any) -> None:
        if not is_type(self.attr_type, value):
            msg = (
                f"attribute {self.name}: expected type {self.attr_type}, "
                f"received {type(value).__name__}"
            )
            raise AttributeTypeError(msg)

    def normalize(self, value: Any) -> Any:
        if self.transform is False:
            return value
        if callable(self.transform):
            return self.transform(value)
        transform = _DEFAULT_TRANSFORMS.get(self.attr_type)
        return transform(value) if transform is not None else value

    def accept(self, value: Any) -> Any:
        """Run the full write pipeline: coerce, type check, transform."""
        value = self.coerce_value(value)
        self.check_type(value)
        return self.normalize(value)

    def is_valid(self, value: Any) -> bool:
        rule = self.validate
        if rule is None:
            if self.attr_type is AttrType.TEXT:
                return isinstance(value, str) and bool(value.strip())
            return True
        if callable(rule):
            return bool(rule(value))
        return value in rule


def _build_attribute(
    name: str,
    attr_type: AttrType | str | None,
    *,
    settable: bool,
    default: Any,
    validate: Any,
    coerce: Any,
    transform: Any,
) -> Attribute:
    """Construct an :class:`Attribute`, running every declaration-time check."""
    if not isinstance(name, str) or not name.isidentifier():
        msg = f"attribute {name!r}: name must be an identifier"
        raise DeclarationError(msg)

    try:
        resolved_type = AttrType(attr_type) if attr_type is not None else None
    except ValueError:
        resolved_type = None
    if resolved_type is None:
        msg = f"attribute {name}: missing or invalid type {attr_type!r}"
        raise DeclarationError(msg)

    if default is None:
        default = _TYPE_DEFAULTS[resolved_type]
    if not callable(default) and not is_type(resolved_type, default):
        msg = f"attribute {name}: invalid default {default!r} for type {resolved_type}"
        raise DeclarationError(msg)

    if validate is not None and not callable(validate):
        if isinstance(validate, (str, bytes)) or not isinstance(
            validate, (list, tuple, set, frozenset)
        ):
            msg = f"attribute {name}: expecting a collection or callable for validate"
            raise DeclarationError(msg)
        validate = tuple(validate)
        if not all(is_type(resolved_type, v) for v in validate):
            msg = f"attribute {name}: wrong type in validate values {list(validate)!r}"
            raise DeclarationError(msg)

    for option, rule in (("coerce", coerce), ("transform", transform)):
        if rule not in (None, False) and not callable(rule):
            msg = f"attribute {name}: {option} must be False, None, or callable"
            raise DeclarationError(msg)

    return Attribute(
        name=name,
        attr_type=resolved_type,
        settable=bool(settable),
        default=default,
        validate=validate,
        coerce=coerce,
        transform=transform,
    )


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class Schema:
    """Ordered attribute table for one owner type, plus the get/set dispatcher."""

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self._attributes: dict[str, Attribute] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._attributes

    def __iter__(self) -> Iterator[Attribute]:
        return iter(list(self._attributes.values()))

    def __len__(self) -> int:
        return len(self._attributes)

    def __getitem__(self, name: str) -> Attribute:
        try:
            return self._attributes[name]
        except KeyError:
            msg = f"attribute {name}: does not exist in {self.owner}"
            raise UnknownAttributeError(msg, name=name) from None

    def __repr__(self) -> str:
        return f"Schema({self.owner!r}, {list(self._attributes)!r})"

    @property
    def names(self) -> list[str]:
        return list(self._attributes)

    @property
    def settable_names(self) -> list[str]:
        return [a.name for a in self._attributes.values() if a.settable]

    def copy(self) -> Schema:
        """Independent schema with the same declarations."""
        clone = Schema(self.owner)
        clone._attributes = dict(self._attributes)
        return clone

    # ------------------------------------------------------------------
    # Declaration and evolution
    # ------------------------------------------------------------------

    def declare(
        self,
        name: str,
        attr_type: AttrType | str | None = None,
        *,
        settable: bool = False,
        default: Any = None,
        validate: Any = None,
        coerce: Any = None,
        transform: Any = None,
    ) -> Attribute:
        """Add a new attribute. Redeclaring an existing name fails."""
        attribute = _build_attribute(
            name,
            attr_type,
            settable=settable,
            default=default,
            validate=validate,
            coerce=coerce,
            transform=transform,
        )
        if name in self._attributes:
            msg = f"attribute {name}: already exists in {self.owner}"
            raise DeclarationError(msg)
        self._attributes[name] = attribute
        return attribute

    def remove(self, name: str) -> Attribute:
        """Remove an attribute (and with it, its accessors)."""
        attribute = self[name]
        del self._attributes[name]
        return attribute

    def replace(
        self,
        name: str,
        attr_type: AttrType | str | None = None,
        **options: Any,
    ) -> Attribute:
        """Replace an attribute's whole declaration, keeping its position."""
        self[name]
        unknown = set(options) - _OPTION_NAMES
        if unknown:
            msg = f"attribute {name}: unknown options {sorted(unknown)}"
            raise DeclarationError(msg)
        attribute = _build_attribute(
            name,
            attr_type,
            settable=options.get("settable", False),
            default=options.get("default"),
            validate=options.get("validate"),
            coerce=options.get("coerce"),
            transform=options.get("transform"),
        )
        self._attributes[name] = attribute
        return attribute

    def update(self, name: str, **options: Any) -> Attribute:
        """Merge *options* over a settable attribute's current declaration."""
        current = self[name]
        if not current.settable:
            msg = f"attribute {name}: cannot update non-settable attribute"
            raise ReadOnlyAttributeError(msg)
        merged: dict[str, Any] = {
            "attr_type": current.attr_type,
            "settable": current.settable,
            "default": current.default,
            "validate": current.validate,
            "coerce": current.coerce,
            "transform": current.transform,
        }
        merged.update(options)
        return self.replace(name, **merged)

    def expand(self, prefix: str) -> str:
        """Resolve a unique attribute-name prefix to the full name."""
        if prefix in self._attributes:
            return prefix
        candidates = [n for n in self._attributes if n.startswith(prefix)]
        if not candidates:
            msg = f"no attribute is prefixed with {prefix!r}"
            raise UnknownAttributeError(msg, name=prefix)
        if len(candidates) > 1:
            msg = f"prefix {prefix!r} is not unique: {', '.join(candidates)}"
            raise UnknownAttributeError(msg, name=prefix)
        return candidates[0]

    # ------------------------------------------------------------------
    # Dispatcher
    # ------------------------------------------------------------------

    def get(self, values: dict[str, Any], name: str) -> Any:
        attribute = self[name]
        if name not in values:
            values[name] = attribute.evaluate_default()
        return values[name]

    def set(
        self,
        values: dict[str, Any],
        name: str,
        value: Any,
        *,
        on_change: ChangeCallback = _ignore_change,
        internal: bool = False,
    ) -> Any:
        """Accept *value* for *name* and commit it into *values*.

        ``internal`` lets the owner write non-settable attributes.
        """
        attribute = self[name]
        if not attribute.settable and not internal:
            msg = f"attribute {name}: is not settable"
            raise ReadOnlyAttributeError(msg)
        accepted = attribute.accept(value)
        on_change(name, values.get(name), accepted)
        values[name] = accepted
        return accepted

    def first_invalid(self, values: dict[str, Any]) -> tuple[str, Any] | None:
        """Return ``(attribute, value)`` for the first failing attribute, or None."""
        for attribute in self:
            value = self.get(values, attribute.name)
            if not attribute.is_valid(value):
                return attribute.name, value
        return None


# ---------------------------------------------------------------------------
# Record base class
# ---------------------------------------------------------------------------


class SchemaRecord:
    """Base for records whose attributes are governed by a :class:`Schema`.

    Declared attributes are reachable as ``record.get(name)`` and as plain
    attribute syntax; both go through the schema dispatcher.
    """

    def __init__(self, schema: Schema) -> None:
        object.__setattr__(self, "_schema", schema)
        object.__setattr__(self, "_values", {})
        object.__setattr__(self, "_errors", [])

    @property
    def schema(self) -> Schema:
        return self._schema

    def get(self, name: str) -> Any:
        return self._schema.get(self._values, name)

    def set(self, name: str, value: Any) -> Any:
        return self._schema.set(self._values, name, value, on_change=self._attribute_changed)

    def _attribute_changed(self, name: str, old: Any, new: Any) -> None:
        """Hook called before a set commits. No-op by default."""

    def __getattr__(self, name: str) -> Any:
        schema = self.__dict__.get("_schema")
        if not name.startswith("_") and schema is not None and name in schema:
            return self.get(name)
        msg = f"{type(self).__name__!r} object has no attribute {name!r}"
        raise AttributeError(msg)

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_") and name in self._schema:
            self.set(name, value)
        else:
            object.__setattr__(self, name, value)

    def to_mapping(self) -> dict[str, Any]:
        """Every declared attribute's current value, in declaration order."""
        return {attribute.name: self.get(attribute.name) for attribute in self._schema}

    @property
    def schema_errors(self) -> list[tuple[str, Any]]:
        """``(attribute, value)`` recorded by the last :meth:`is_valid` call."""
        return list(self._errors)

    def is_valid(self) -> bool:
        failure = self._schema.first_invalid(self._values)
        object.__setattr__(self, "_errors", [failure] if failure else [])
        return failure is None

    def validate(self) -> None:
        """Raise :class:`InvalidIssueError` if the record is invalid."""
        if not self.is_valid():
            attribute, value = self._errors[0]
            raise InvalidIssueError(attribute, value)
