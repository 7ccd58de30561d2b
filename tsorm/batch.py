# SPDX-License-Identifier: MIT
"""Batch insert grouping.

A batch of records of one type is split twice before anything is written:

1. by destination table, so each statement targets a single subtable;
2. within a destination, by *column signature*: the ordered names of the
   columns whose value is present on the row.

Rows sharing a signature are written by one multi-row ``INSERT``; rows with
different signatures never share a statement, because an absent column must
be left out of the column list rather than written as ``NULL`` or zero.

Tags are read from the first row of each destination group only. Rows routed
to the same subtable are expected to carry equal tag values; this is not
checked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from .exceptions import ExecutionError, MissingDestinationError, OrmError, SchemaError
from .fields import ABSENT
from .literals import format_literal
from .schema import Field, Schema, parse
from .utils.logging import get_logger

__all__ = [
    "BatchOutcome",
    "BatchPlan",
    "ColumnSignature",
    "InsertStatement",
    "column_signature",
    "execute_plan",
    "insert_batch",
    "plan_batch",
    "render_insert",
    "resolve_destination",
]

_LOGGER = get_logger(__name__)


class SupportsExecute(Protocol):
    """Write side of the execution channel."""

    def execute(self, sql: str) -> int:  # pragma: no cover - runtime duck typing
        """Run ``sql`` and return the affected row count."""


@dataclass(frozen=True, slots=True)
class ColumnSignature:
    """Ordered names of the columns present on a row."""

    columns: tuple[str, ...]

    @property
    def key(self) -> str:
        return "".join(f"{name}," for name in self.columns)

    def __len__(self) -> int:
        return len(self.columns)


@dataclass(frozen=True, slots=True)
class InsertStatement:
    """One rendered ``INSERT`` covering rows of a single signature."""

    table: str
    signature: ColumnSignature
    row_count: int
    sql: str


@dataclass(frozen=True, slots=True)
class BatchPlan:
    """Statements to run plus the errors found while planning them."""

    statements: tuple[InsertStatement, ...] = ()
    errors: tuple[OrmError, ...] = ()


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """Result of executing a :class:`BatchPlan`.

    ``rows_affected`` only counts statements that succeeded.
    """

    rows_affected: int = 0
    statements_executed: int = 0
    errors: tuple[OrmError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(slots=True)
class _DestinationGroup:
    schema: Schema
    records: list[Any] = field(default_factory=list)


@dataclass(slots=True)
class _SignatureGroup:
    fields: tuple[Field, ...]
    records: list[Any] = field(default_factory=list)


def resolve_destination(schema: Schema, table: str = "") -> str:
    """Return the table a record is written to, or ``""`` when unresolvable.

    An explicit ``table`` wins, then the record's own ``table_name()``. A
    schema without tags falls back to its family name; a super-table never
    receives rows directly.
    """

    if table:
        return table
    if schema.table_name:
        return schema.table_name
    if not schema.tags:
        return schema.name
    return ""


def column_signature(schema: Schema, record: Any) -> tuple[ColumnSignature, tuple[Field, ...]]:
    """Return the signature of ``record`` and the fields it covers."""

    present = tuple(col for col in schema.cols if getattr(record, col.attr) is not ABSENT)
    return ColumnSignature(tuple(col.name for col in present)), present


def _render_rows(records: Sequence[Any], fields: Sequence[Field]) -> str:
    rendered = []
    for record in records:
        values = ", ".join(format_literal(getattr(record, col.attr)) for col in fields)
        rendered.append(f"({values})")
    return ", ".join(rendered)


def render_insert(
    table: str,
    schema: Schema,
    fields: Sequence[Field],
    records: Sequence[Any],
    tag_values: Sequence[Any] = (),
) -> str:
    """Render a multi-row ``INSERT`` for records sharing ``fields``."""

    columns = ", ".join(col.name for col in fields)
    values = _render_rows(records, fields)
    if schema.tags:
        tags = ", ".join(format_literal(value) for value in tag_values)
        return f"INSERT INTO {table} ({columns}) USING {schema.name} TAGS ({tags}) VALUES {values}"
    return f"INSERT INTO {table} ({columns}) VALUES {values}"


def _tag_values(table: str, schema: Schema, first: Any) -> list[Any]:
    values = []
    for tag in schema.tags:
        value = getattr(first, tag.attr)
        if value is ABSENT:
            raise SchemaError(f"tag {tag.name} has no value for table {table}")
        values.append(value)
    return values


def _plan_destination(table: str, group: _DestinationGroup) -> list[InsertStatement]:
    schema = group.schema
    tag_values = _tag_values(table, schema, group.records[0])

    by_signature: dict[ColumnSignature, _SignatureGroup] = {}
    for record in group.records:
        signature, fields = column_signature(schema, record)
        bucket = by_signature.get(signature)
        if bucket is None:
            bucket = by_signature[signature] = _SignatureGroup(fields)
        bucket.records.append(record)

    return [
        InsertStatement(
            table=table,
            signature=signature,
            row_count=len(bucket.records),
            sql=render_insert(table, schema, bucket.fields, bucket.records, tag_values),
        )
        for signature, bucket in by_signature.items()
    ]


def plan_batch(records: Sequence[Any], *, table: str = "") -> BatchPlan:
    """Group ``records`` and render their statements without executing them.

    Rows without a resolvable destination are reported by index and skipped;
    the remaining destination groups are still planned.
    """

    errors: list[OrmError] = []
    groups: dict[str, _DestinationGroup] = {}
    for index, record in enumerate(records):
        schema = parse(record)
        destination = resolve_destination(schema, table)
        if not destination:
            errors.append(MissingDestinationError(index))
            continue
        group = groups.get(destination)
        if group is None:
            group = groups[destination] = _DestinationGroup(schema)
        group.records.append(record)

    statements: list[InsertStatement] = []
    for destination, group in groups.items():
        try:
            statements.extend(_plan_destination(destination, group))
        except SchemaError as exc:
            errors.append(exc)
    return BatchPlan(statements=tuple(statements), errors=tuple(errors))


def execute_plan(channel: SupportsExecute, plan: BatchPlan) -> BatchOutcome:
    """Run every statement of ``plan``; a failure never stops the others."""

    errors: list[OrmError] = list(plan.errors)
    rows_affected = 0
    executed = 0
    for statement in plan.statements:
        _LOGGER.debug(
            "tsorm_execute",
            table=statement.table,
            signature=statement.signature.key,
            rows=statement.row_count,
            sql=statement.sql,
        )
        try:
            affected = channel.execute(statement.sql)
        except Exception as exc:
            _LOGGER.warning(
                "tsorm_execute_failed",
                table=statement.table,
                signature=statement.signature.key,
                error=str(exc),
            )
            error = ExecutionError(
                f"insert into {statement.table} failed: {exc}",
                sql=statement.sql,
                table=statement.table,
                signature=statement.signature.key,
            )
            error.__cause__ = exc
            errors.append(error)
            continue
        rows_affected += max(int(affected), 0)
        executed += 1
    return BatchOutcome(rows_affected=rows_affected, statements_executed=executed, errors=tuple(errors))


def insert_batch(channel: SupportsExecute, records: Sequence[Any], *, table: str = "") -> BatchOutcome:
    """Plan and execute a batch insert of ``records``."""

    if not records:
        return BatchOutcome()
    return execute_plan(channel, plan_batch(records, table=table))
