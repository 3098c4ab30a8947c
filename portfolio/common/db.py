"""
Document table definitions.
Every collection is stored as one table holding an id, an optional unique key, the JSON
document body, and fixed-width UTC timestamp strings.
"""

from __future__ import annotations

from sqlalchemy import JSON, Column, MetaData, String, Table

from portfolio.catalog.descriptors import COLLECTIONS

metadata = MetaData()


def document_table(name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", String(32), primary_key=True),
        Column("unique_key", String(255), unique=True, nullable=True),
        Column("data", JSON, nullable=False),
        Column("created_at", String(24), nullable=False, index=True),
        Column("updated_at", String(24), nullable=False),
    )


TABLES: dict[str, Table] = {name: document_table(name) for name in COLLECTIONS}
