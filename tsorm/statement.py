# SPDX-License-Identifier: MIT
"""Immutable query-builder state accumulated across a call chain."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

__all__ = ["Statement"]


@dataclass(frozen=True, slots=True)
class Statement:
    """Chained predicate, ordering and paging state.

    Every builder method returns a new instance; sequence-valued state is held
    in tuples so two chains branching from the same base never share anything
    mutable. No validation happens here.
    """

    table: str = ""
    selects: tuple[str, ...] = ()
    conditions: tuple[str, ...] = ()
    args: tuple[Any, ...] = ()
    limit_value: int = 0
    offset_value: int = 0
    order_by: str = ""
    group_by: str = ""

    def with_table(self, name: str) -> "Statement":
        return replace(self, table=name)

    def where(self, query: str, *args: Any) -> "Statement":
        return replace(
            self,
            conditions=(*self.conditions, query),
            args=(*self.args, *args),
        )

    def select(self, query: str) -> "Statement":
        return replace(self, selects=(*self.selects, query))

    def limit(self, limit: int) -> "Statement":
        return replace(self, limit_value=limit)

    def offset(self, offset: int) -> "Statement":
        return replace(self, offset_value=offset)

    def order(self, value: str) -> "Statement":
        return replace(self, order_by=value)

    def group(self, value: str) -> "Statement":
        return replace(self, group_by=value)

    def build_condition(self) -> tuple[str, tuple[Any, ...]]:
        """Return the rendered ``WHERE`` clause and its positional arguments."""

        if not self.conditions:
            return "", ()
        return " WHERE " + " AND ".join(self.conditions), self.args
