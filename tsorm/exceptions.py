# SPDX-License-Identifier: MIT
"""Domain specific exceptions raised or recorded by the mapper."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "ExecutionError",
    "MigrationError",
    "MissingDestinationError",
    "OpenError",
    "OrmError",
    "OrmErrorGroup",
    "QueryError",
    "ScanError",
    "SchemaError",
]


class OrmError(RuntimeError):
    """Base class for failures produced by the mapper."""


class SchemaError(OrmError):
    """A record could not be mapped onto its schema."""


class MissingDestinationError(OrmError):
    """No table name could be resolved for a row."""

    def __init__(self, row_index: int | None = None) -> None:
        if row_index is None:
            message = "table name is required, use db.table('name') or implement table_name()"
        else:
            message = f"table name is required at index {row_index}"
        super().__init__(message)
        self.row_index = row_index


class ExecutionError(OrmError):
    """The execution channel rejected a statement."""

    def __init__(
        self,
        message: str,
        *,
        sql: str,
        table: str | None = None,
        signature: str | None = None,
    ) -> None:
        super().__init__(message)
        self.sql = sql
        self.table = table
        self.signature = signature


class QueryError(ExecutionError):
    """A SELECT statement or its column introspection failed."""


class MigrationError(ExecutionError):
    """A DDL statement issued by ``auto_migrate`` failed."""


class ScanError(OrmError):
    """A result value could not be decoded into the destination field."""

    def __init__(self, message: str, *, column: str) -> None:
        super().__init__(message)
        self.column = column


class OpenError(OrmError):
    """The database could not be reached while opening a connection."""


class OrmErrorGroup(ExceptionGroup):
    """Ordered collection of every error recorded on a call chain.

    The first member is the first error recorded. ``str()`` joins all member
    messages so that no failure is hidden behind a count.
    """

    def __new__(cls, errors: Sequence[Exception]) -> "OrmErrorGroup":
        message = "; ".join(str(error) for error in errors)
        return super().__new__(cls, message, list(errors))

    def __init__(self, errors: Sequence[Exception]) -> None:
        message = "; ".join(str(error) for error in errors)
        super().__init__(message, list(errors))

    def derive(self, excs: Sequence[Exception]) -> "OrmErrorGroup":
        return OrmErrorGroup(excs)

    def __str__(self) -> str:
        return self.message
