# SPDX-License-Identifier: MIT
"""Field declaration helpers shared by record definitions.

A record is a plain :func:`dataclasses.dataclass`. Fields are classified
through a settings string stored in the dataclass field metadata, for example::

    @dataclass
    class Sensor:
        ts: datetime = orm_field("primaryKey;column:ts")
        temperature: Maybe[float] = orm_field("column:current_temp")
        location: str = orm_field("tag")

Column values may be left :data:`ABSENT`, which means "do not write this
column" rather than "write NULL" or "write zero".
"""

from __future__ import annotations

import dataclasses
from typing import Any, Final, TypeVar, Union

__all__ = [
    "ABSENT",
    "Absent",
    "METADATA_KEY",
    "Maybe",
    "is_absent",
    "orm_field",
    "parse_tag_setting",
]

METADATA_KEY: Final = "tsorm"

T = TypeVar("T")


class Absent:
    """Marker type for a column value that was never supplied."""

    _instance: "Absent | None" = None

    def __new__(cls) -> "Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "Absent":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "Absent":
        return self

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Final = Absent()

# ``Maybe[float]`` reads as "a float, or nothing supplied".
Maybe = Union[T, Absent]


def is_absent(value: object) -> bool:
    return value is ABSENT


def parse_tag_setting(text: str) -> dict[str, str]:
    """Parse ``key[:value]`` pairs separated by semicolons.

    Keys are upper-cased; values keep everything after the first colon. Flag
    keys without a value map to themselves.
    """

    settings: dict[str, str] = {}
    for chunk in text.split(";"):
        key, sep, value = chunk.partition(":")
        key = key.strip().upper()
        if not key:
            continue
        settings[key] = value if sep else key
    return settings


def orm_field(
    settings: str = "",
    *,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field carrying mapper settings.

    Non-tag fields without an explicit default start out :data:`ABSENT`. Tags
    and primary keys stay required unless a default is given.
    """

    parsed = parse_tag_setting(settings)
    if (
        default is dataclasses.MISSING
        and default_factory is dataclasses.MISSING
        and "TAG" not in parsed
        and "PRIMARYKEY" not in parsed
    ):
        default = ABSENT
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = settings
    if default_factory is not dataclasses.MISSING:
        return dataclasses.field(default_factory=default_factory, metadata=metadata, **kwargs)
    return dataclasses.field(default=default, metadata=metadata, **kwargs)
