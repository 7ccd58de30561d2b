# SPDX-License-Identifier: MIT
"""SQL literal rendering.

Values are embedded in the statement text instead of being bound as
parameters, so every value that reaches the database goes through
:func:`format_literal`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import numpy as np

from .fields import ABSENT

__all__ = ["explain", "format_literal", "quote_text"]

PLACEHOLDER = "?"


def quote_text(value: str) -> str:
    """Return ``value`` single quoted, with backslashes and quotes backslash-escaped."""

    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat(timespec="microseconds")


def format_literal(value: Any) -> str:
    """Render ``value`` as a SQL literal."""

    if value is ABSENT:
        raise TypeError("absent values have no literal form")
    if value is None:
        return "NULL"
    if isinstance(value, str):
        return quote_text(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return quote_text(bytes(value).decode("utf-8", errors="replace"))
    if isinstance(value, datetime):
        return "'" + _format_timestamp(value) + "'"
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return "NULL"
        # Microsecond precision so item() yields a datetime, not an integer.
        return format_literal(value.astype("datetime64[us]").item())
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, np.generic):
        return str(value.item())
    return str(value)


def explain(sql: str, *args: Any) -> str:
    """Substitute ``?`` placeholders left to right with rendered literals.

    Each argument consumes one placeholder. Placeholders beyond the argument
    count stay in place and surplus arguments are ignored. Substituted text is
    never rescanned, so a literal containing ``?`` is left intact.
    """

    if not args:
        return sql
    parts: list[str] = []
    cursor = 0
    for arg in args:
        index = sql.find(PLACEHOLDER, cursor)
        if index < 0:
            break
        parts.append(sql[cursor:index])
        parts.append(format_literal(arg))
        cursor = index + len(PLACEHOLDER)
    parts.append(sql[cursor:])
    return "".join(parts)
