"""Tests for listing filters."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from taco.domain.errors import InvalidFilterError, UnknownAttributeError
from taco.domain.filters import Filter, index_value, parse_filters
from taco.domain.schema import Schema


class TestFilterParse:
    def test_basic(self, schema: Schema) -> None:
        assert Filter.parse("kind:Defect", schema) == Filter("kind", "defect")

    def test_attribute_prefix(self, schema: Schema) -> None:
        assert Filter.parse("prio:3", schema) == Filter("priority", "3")
        assert Filter.parse("Own:Mike", schema) == Filter("owner", "mike")

    def test_value_may_contain_colons(self, schema: Schema) -> None:
        assert Filter.parse("summary:a:b", schema).value == "a:b"

    @pytest.mark.parametrize("text", ["nocolon", ":value", ""])
    def test_malformed(self, schema: Schema, text: str) -> None:
        with pytest.raises(InvalidFilterError):
            Filter.parse(text, schema)

    def test_ambiguous_prefix(self, schema: Schema) -> None:
        with pytest.raises(UnknownAttributeError):
            Filter.parse("s:open", schema)

    def test_str(self, schema: Schema) -> None:
        assert str(Filter.parse("kind:Defect", schema)) == "kind:defect"

    def test_parse_filters(self, schema: Schema) -> None:
        assert parse_filters(("kind:a", "owner:x"), schema) == [
            Filter("kind", "a"),
            Filter("owner", "x"),
        ]


class TestIndexValue:
    def test_text_is_lowercased(self) -> None:
        assert index_value("Feature Request") == "feature request"

    def test_integer(self) -> None:
        assert index_value(3) == "3"

    def test_timestamp(self) -> None:
        assert index_value(datetime(2024, 1, 2, tzinfo=UTC)) == "2024-01-02t00:00:00+00:00"
