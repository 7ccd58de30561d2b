# SPDX-License-Identifier: MIT
"""Tests for record schema introspection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import numpy as np
import pytest

from tsorm import ABSENT, Maybe, data_type_of, orm_field, parse, parse_tag_setting, to_snake_case
from tsorm.schema import DEFAULT_BINARY_TYPE

from tests.unit.orm.sample_records import Event, Gauge, Meter, Probe

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("GroupId", "group_id"),
        ("SensorReading", "sensor_reading"),
        ("HTTPCode", "httpcode"),
        ("current_temp", "current_temp"),
        ("ts", "ts"),
    ],
)
def test_to_snake_case(name: str, expected: str) -> None:
    assert to_snake_case(name) == expected


def test_parse_tag_setting_is_case_insensitive_and_keeps_colons() -> None:
    settings = parse_tag_setting("primaryKey; column:ts ;TYPE:NCHAR(8);note:a:b")
    assert settings["PRIMARYKEY"] == "PRIMARYKEY"
    assert settings["COLUMN"] == "ts "
    assert settings["TYPE"] == "NCHAR(8)"
    assert settings["NOTE"] == "a:b"
    assert parse_tag_setting("") == {}


def test_parse_classifies_tags_and_columns_in_declaration_order() -> None:
    schema = parse(Meter)
    assert schema.name == "meters"
    assert [tag.name for tag in schema.tags] == ["location", "group_id"]
    assert [col.name for col in schema.cols] == ["ts", "current", "voltage", "phase_angle"]
    assert schema.cols[0].is_primary_key
    assert schema.table_name == ""


def test_parse_instance_evaluates_table_name_per_instance() -> None:
    first = parse(Meter(ts=NOW, location="hall", group_id=1))
    second = parse(Meter(ts=NOW, location="yard", group_id=7))
    assert first.table_name == "d_hall_1"
    assert second.table_name == "d_yard_7"
    assert parse(Meter).table_name == ""


def test_parse_defaults_family_name_to_snake_cased_class() -> None:
    assert parse(Probe).name == "probe"
    assert parse([Event(ts=NOW)]).name == "event"


def test_parse_infers_storage_types_and_skips_ignored_fields() -> None:
    schema = parse(Gauge)
    types = {col.name: col.data_type for col in schema.cols}
    assert types == {
        "ts": "TIMESTAMP",
        "ok": "BOOL",
        "small": "INT",
        "big": "BIGINT",
        "tiny_unsigned": "INT UNSIGNED",
        "huge_unsigned": "BIGINT UNSIGNED",
        "single": "FLOAT",
        "double": "DOUBLE",
        "label": DEFAULT_BINARY_TYPE,
        "payload": DEFAULT_BINARY_TYPE,
        "note": "NCHAR(32)",
    }
    assert not schema.tags


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (Maybe[float], "DOUBLE"),
        (Optional[int], "BIGINT"),
        (np.int64 | None, "BIGINT"),
        (bool, "BOOL"),
        (list, DEFAULT_BINARY_TYPE),
        ("not-a-type", DEFAULT_BINARY_TYPE),
    ],
)
def test_data_type_of_unwraps_optional_markers(annotation: object, expected: str) -> None:
    assert data_type_of(annotation) == expected


def test_orm_field_defaults_columns_to_absent_but_keeps_tags_required() -> None:
    @dataclass
    class Reading:
        site: str = orm_field("tag")
        value: Maybe[float] = orm_field()

    with pytest.raises(TypeError):
        Reading()  # type: ignore[call-arg]
    assert Reading(site="a").value is ABSENT


def test_parse_rejects_non_dataclass() -> None:
    class Plain:
        pass

    with pytest.raises(TypeError):
        parse(Plain)
