"""SQLAlchemy Core table definitions for the derived filter index.

The index maps ``(attribute, normalized value)`` to issue IDs. It is
rebuilt wholesale from the issue files and never consulted as the
source of truth.
"""

from __future__ import annotations

from sqlalchemy import Column, Index, MetaData, Table, Text, UniqueConstraint

metadata = MetaData()

issue_index = Table(
    "issue_index",
    metadata,
    Column("attribute", Text, nullable=False),
    Column("value", Text, nullable=False),  # index_value(): isoformat or str, lowercased
    Column("issue_id", Text, nullable=False),
    UniqueConstraint("attribute", "value", "issue_id"),
)

index_meta = Table(
    "index_meta",
    metadata,
    Column("key", Text, primary_key=True),
    Column("value", Text, nullable=False),
)

Index("ix_issue_index_lookup", issue_index.c.attribute, issue_index.c.value)
Index("ix_issue_index_issue", issue_index.c.issue_id)

# index_meta keys
SIGNATURE_KEY = "signature"
BUILT_AT_KEY = "built_at"
