# SPDX-License-Identifier: MIT
"""Schema introspection for dataclass records.

The type-level description of a record (family name, tags, columns and their
storage types) is derived once per class and cached. The destination table
name is resolved per instance because it usually depends on tag values.
"""

from __future__ import annotations

import dataclasses
import inspect
import types
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Any, Annotated, Mapping, Protocol, Union, get_args, get_origin, get_type_hints, runtime_checkable

import numpy as np

from .fields import METADATA_KEY, Absent, parse_tag_setting

__all__ = [
    "DEFAULT_BINARY_TYPE",
    "Field",
    "Schema",
    "SupportsStableName",
    "SupportsTableName",
    "data_type_of",
    "model_type_of",
    "parse",
    "to_snake_case",
]

DEFAULT_BINARY_TYPE = "BINARY(64)"

_NUMPY_TYPES: Mapping[type, str] = {
    np.bool_: "BOOL",
    np.int8: "INT",
    np.int16: "INT",
    np.int32: "INT",
    np.int64: "BIGINT",
    np.uint8: "INT UNSIGNED",
    np.uint16: "INT UNSIGNED",
    np.uint32: "INT UNSIGNED",
    np.uint64: "BIGINT UNSIGNED",
    np.float32: "FLOAT",
    np.float64: "DOUBLE",
}


@runtime_checkable
class SupportsStableName(Protocol):
    """Record classes overriding the super-table name.

    ``stable_name`` is resolved at type level, so it must be a classmethod or
    a staticmethod.
    """

    @classmethod
    def stable_name(cls) -> str:  # pragma: no cover - runtime duck typing
        """Return the super-table name."""


@runtime_checkable
class SupportsTableName(Protocol):
    """Records choosing their own destination subtable."""

    def table_name(self) -> str:  # pragma: no cover - runtime duck typing
        """Return the destination table for this instance."""


@dataclass(frozen=True, slots=True)
class Field:
    """Column or tag mapped from a single dataclass attribute."""

    name: str
    attr: str
    data_type: str
    python_type: Any = None
    settings: str = ""
    is_tag: bool = False
    is_primary_key: bool = False

    def ddl(self) -> str:
        return f"{self.name} {self.data_type}"


@dataclass(frozen=True, slots=True)
class Schema:
    """Mapping metadata for one record type."""

    name: str
    model: type
    fields: tuple[Field, ...]
    tags: tuple[Field, ...] = field(default_factory=tuple)
    cols: tuple[Field, ...] = field(default_factory=tuple)
    table_name: str = ""

    @property
    def has_tags(self) -> bool:
        return bool(self.tags)

    def fields_by_column(self) -> dict[str, Field]:
        """Return the column name to field mapping used when scanning rows."""

        return {item.name: item for item in self.fields}


def to_snake_case(name: str) -> str:
    """Insert ``_`` before an upper-case letter that follows a non-upper one."""

    out: list[str] = []
    for index, char in enumerate(name):
        if index > 0 and char.isupper() and not name[index - 1].isupper():
            out.append("_")
        out.append(char.lower())
    return "".join(out)


def _unwrap(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Annotated:
        return _unwrap(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        members = [
            arg for arg in get_args(annotation) if arg is not type(None) and arg is not Absent
        ]
        if len(members) == 1:
            return _unwrap(members[0])
    return annotation


def data_type_of(annotation: Any) -> str:
    """Return the storage type inferred from a field annotation."""

    resolved = _unwrap(annotation)
    if not isinstance(resolved, type):
        return DEFAULT_BINARY_TYPE
    if resolved in _NUMPY_TYPES:
        return _NUMPY_TYPES[resolved]
    if issubclass(resolved, bool):
        return "BOOL"
    if issubclass(resolved, datetime):
        return "TIMESTAMP"
    if issubclass(resolved, int):
        return "BIGINT"
    if issubclass(resolved, float):
        return "DOUBLE"
    return DEFAULT_BINARY_TYPE


def model_type_of(value: Any) -> type:
    """Return the record class behind a class, an instance or a list of them."""

    if isinstance(value, type):
        return value
    if isinstance(value, (list, tuple)):
        if not value:
            raise TypeError("cannot infer the record type of an empty sequence")
        return model_type_of(value[0])
    return type(value)


def _type_level_name(model: type, attribute: str) -> str:
    member = inspect.getattr_static(model, attribute, None)
    if isinstance(member, (classmethod, staticmethod)):
        return str(getattr(model, attribute)() or "")
    return ""


def _resolve_hints(model: type) -> dict[str, Any]:
    try:
        return get_type_hints(model)
    except (NameError, TypeError):
        # Unresolvable forward references fall back to the raw annotations.
        return {item.name: item.type for item in dataclasses.fields(model)}


@lru_cache(maxsize=None)
def _model_schema(model: type) -> Schema:
    if not dataclasses.is_dataclass(model):
        raise TypeError(f"{model.__name__} is not a dataclass record")

    hints = _resolve_hints(model)
    fields: list[Field] = []
    tags: list[Field] = []
    cols: list[Field] = []
    for item in dataclasses.fields(model):
        if item.name.startswith("_"):
            continue
        settings_text = str(item.metadata.get(METADATA_KEY, ""))
        settings = parse_tag_setting(settings_text)
        if "-" in settings:
            continue
        annotation = hints.get(item.name, item.type)
        mapped = Field(
            name=settings.get("COLUMN", "").strip() or to_snake_case(item.name),
            attr=item.name,
            data_type=settings.get("TYPE", "").strip() or data_type_of(annotation),
            python_type=_unwrap(annotation),
            settings=settings_text,
            is_tag="TAG" in settings,
            is_primary_key="PRIMARYKEY" in settings,
        )
        (tags if mapped.is_tag else cols).append(mapped)
        fields.append(mapped)

    return Schema(
        name=_type_level_name(model, "stable_name") or to_snake_case(model.__name__),
        model=model,
        fields=tuple(fields),
        tags=tuple(tags),
        cols=tuple(cols),
        table_name=_type_level_name(model, "table_name"),
    )


def parse(value: Any) -> Schema:
    """Return the :class:`Schema` describing ``value``.

    ``value`` may be a record class, a record instance or a sequence of
    records. Only instances contribute a per-instance table name.
    """

    schema = _model_schema(model_type_of(value))
    if isinstance(value, (type, list, tuple)):
        return schema
    if isinstance(value, SupportsTableName):
        return dataclasses.replace(schema, table_name=str(value.table_name() or ""))
    return schema
