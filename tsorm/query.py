# SPDX-License-Identifier: MIT
"""SELECT rendering and mapping of result rows back onto records."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Any, Sequence

import numpy as np

from .exceptions import ScanError
from .literals import explain
from .schema import Field, Schema
from .statement import Statement

__all__ = [
    "build_select",
    "decode_value",
    "instantiate",
    "resolve_read_table",
    "scan_rows",
    "zero_value",
]

_ZERO_VALUES: dict[type, Any] = {bool: False, int: 0, float: 0.0, str: "", bytes: b""}


def resolve_read_table(statement: Statement, schema: Schema) -> str:
    """Return the table a read targets.

    A schema with tags reads from its super-table so every subtable is
    covered; otherwise the instance's own table name, then the family name.
    """

    if statement.table:
        return statement.table
    if schema.tags:
        return schema.name
    return schema.table_name or schema.name


def build_select(statement: Statement, table: str) -> str:
    """Render ``statement`` as a SELECT with every placeholder inlined."""

    select_clause = ", ".join(statement.selects) if statement.selects else "*"
    where_clause, args = statement.build_condition()
    sql = f"SELECT {select_clause} FROM {table}{where_clause}"
    if statement.order_by:
        sql += " ORDER BY " + statement.order_by
    if statement.limit_value > 0:
        sql += f" LIMIT {statement.limit_value}"
    if statement.offset_value > 0:
        sql += f" OFFSET {statement.offset_value}"
    if statement.group_by:
        sql += " GROUP BY " + statement.group_by
    return explain(sql, *args)


def zero_value(python_type: Any) -> Any:
    if not isinstance(python_type, type):
        return None
    if python_type in _ZERO_VALUES:
        return _ZERO_VALUES[python_type]
    if issubclass(python_type, np.generic):
        return python_type(0)
    return None


def _decode_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch milliseconds, the database's default precision.
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    raise TypeError(f"unsupported timestamp value {value!r}")


def _decode_bool(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, np.integer)):
        return value != 0
    if isinstance(value, str) and value.lower() in {"true", "false"}:
        return value.lower() == "true"
    raise TypeError(f"unsupported boolean value {value!r}")


def decode_value(item: Field, value: Any) -> Any:
    """Convert a driver value into the annotated type of ``item``."""

    target = item.python_type
    if value is None or not isinstance(target, type):
        return value
    try:
        if issubclass(target, datetime):
            return _decode_datetime(value)
        if issubclass(target, (bool, np.bool_)):
            return _decode_bool(value)
        if issubclass(target, np.generic):
            return target(value)
        if issubclass(target, str):
            if isinstance(value, (bytes, bytearray)):
                return bytes(value).decode("utf-8")
            return str(value)
        if issubclass(target, bytes):
            return value.encode("utf-8") if isinstance(value, str) else bytes(value)
        if issubclass(target, int):
            return int(value)
        if issubclass(target, float):
            return float(value)
    except (TypeError, ValueError, OverflowError, UnicodeDecodeError) as exc:
        raise ScanError(f"cannot decode column {item.name}: {exc}", column=item.name) from exc
    return value


def _default_of(spec: dataclasses.Field[Any], python_type: Any) -> Any:
    if spec.default is not dataclasses.MISSING:
        return spec.default
    if spec.default_factory is not dataclasses.MISSING:
        return spec.default_factory()
    return zero_value(python_type)


def instantiate(schema: Schema, values: dict[str, Any]) -> Any:
    """Build a record of ``schema.model`` from attribute values.

    Attributes missing from ``values`` take their dataclass default, or the
    zero value of their type when they have none.
    """

    types_by_attr = {item.attr: item.python_type for item in schema.fields}
    kwargs: dict[str, Any] = {}
    late: dict[str, Any] = {}
    for spec in dataclasses.fields(schema.model):
        if spec.name in values:
            target = kwargs if spec.init else late
            target[spec.name] = values[spec.name]
        elif spec.init:
            kwargs[spec.name] = _default_of(spec, types_by_attr.get(spec.name))
    record = schema.model(**kwargs)
    for name, value in late.items():
        setattr(record, name, value)
    return record


def scan_rows(schema: Schema, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> list[Any]:
    """Map result rows onto new records by case-sensitive column name.

    Columns without a matching field are discarded. A decoding failure raises
    :class:`ScanError` and nothing scanned so far is returned.
    """

    by_column = schema.fields_by_column()
    matched = [(index, by_column[name]) for index, name in enumerate(columns) if name in by_column]
    records = []
    for row in rows:
        values = {item.attr: decode_value(item, row[index]) for index, item in matched}
        records.append(instantiate(schema, values))
    return records
