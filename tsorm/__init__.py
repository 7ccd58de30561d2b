# SPDX-License-Identifier: MIT
"""Lightweight mapper for super-table time-series databases.

Records are dataclasses; tags address subtables, columns carry the data and
may be left :data:`ABSENT` so that a write does not touch them.
"""

from .batch import (
    BatchOutcome,
    BatchPlan,
    ColumnSignature,
    InsertStatement,
    execute_plan,
    insert_batch,
    plan_batch,
)
from .config import OrmSettings, PoolConfig, RuntimeConfig
from .connection import EngineChannel, ExecutionChannel, ResultSet, create_engine_from_config
from .db import DB, connect
from .exceptions import (
    ExecutionError,
    MigrationError,
    MissingDestinationError,
    OpenError,
    OrmError,
    OrmErrorGroup,
    QueryError,
    ScanError,
    SchemaError,
)
from .fields import ABSENT, Absent, Maybe, is_absent, orm_field, parse_tag_setting
from .literals import explain, format_literal
from .migrator import create_stable_sql
from .retry import RetryPolicy
from .schema import Field, Schema, SupportsStableName, SupportsTableName, data_type_of, parse, to_snake_case
from .statement import Statement

__all__ = [
    "ABSENT",
    "Absent",
    "BatchOutcome",
    "BatchPlan",
    "ColumnSignature",
    "DB",
    "EngineChannel",
    "ExecutionChannel",
    "ExecutionError",
    "Field",
    "InsertStatement",
    "Maybe",
    "MigrationError",
    "MissingDestinationError",
    "OpenError",
    "OrmError",
    "OrmErrorGroup",
    "OrmSettings",
    "PoolConfig",
    "QueryError",
    "ResultSet",
    "RetryPolicy",
    "RuntimeConfig",
    "ScanError",
    "Schema",
    "SchemaError",
    "Statement",
    "SupportsStableName",
    "SupportsTableName",
    "connect",
    "create_engine_from_config",
    "create_stable_sql",
    "data_type_of",
    "execute_plan",
    "explain",
    "format_literal",
    "insert_batch",
    "is_absent",
    "orm_field",
    "parse",
    "parse_tag_setting",
    "plan_batch",
    "to_snake_case",
]
