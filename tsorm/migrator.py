# SPDX-License-Identifier: MIT
"""DDL rendering for record families."""

from __future__ import annotations

from .schema import Schema

__all__ = ["create_stable_sql"]


def create_stable_sql(schema: Schema) -> str:
    """Return an idempotent CREATE statement for ``schema``.

    Records with tags map onto a super-table. Without tags there is nothing to
    partition subtables by, so a plain table is created instead. Existing
    tables are never altered.
    """

    columns = ", ".join(item.ddl() for item in schema.cols)
    if not schema.tags:
        return f"CREATE TABLE IF NOT EXISTS {schema.name} ({columns})"
    tags = ", ".join(item.ddl() for item in schema.tags)
    return f"CREATE STABLE IF NOT EXISTS {schema.name} ({columns}) TAGS ({tags})"
