# SPDX-License-Identifier: MIT
"""End-to-end write and read through a pooled SQLite engine."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from tsorm import ABSENT, DB, OpenError, OrmSettings, RetryPolicy, connect

from tests.unit.orm.sample_records import Event

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def db(tmp_path: Path):
    handle = connect(f"sqlite:///{tmp_path / 'events.db'}")
    handle.auto_migrate(Event)
    yield handle
    handle.close()


def test_create_then_find_returns_written_rows(db: DB) -> None:
    written = db.create(
        [
            Event(ts=T0, level="warn", code=3),
            Event(ts=T0 + timedelta(seconds=1), level="info", code=1, ratio=0.25),
            Event(ts=T0 + timedelta(seconds=2), level="warn", code=7),
        ]
    )
    assert written.error is None
    assert written.rows_affected == 3

    rows: list[Event] = []
    result = db.where("level = ?", "warn").order("ts").find(rows, Event)

    assert result.error is None
    assert [(row.ts, row.code) for row in rows] == [(T0, 3), (T0 + timedelta(seconds=2), 7)]
    # Columns never written come back as SQL NULL.
    assert rows[0].ratio is None


def test_first_overwrites_instance(db: DB) -> None:
    db.create(Event(ts=T0, level="info", code=9, ratio=1.5))
    event = Event(ts=T0 - timedelta(days=1))
    db.where("code = ?", 9).first(event)
    assert event.ts == T0
    assert event.ratio == 1.5


def test_auto_migrate_is_idempotent(db: DB) -> None:
    db.auto_migrate(Event)
    assert db.exec("DELETE FROM event").error is None


def test_omitted_columns_keep_their_absent_marker_out_of_sql(db: DB) -> None:
    result = db.create(Event(ts=T0, level=ABSENT, code=ABSENT, ratio=2.0))
    assert result.error is None
    rows: list[Event] = []
    db.select("ts").select("ratio").find(rows, Event)
    (row,) = rows
    assert row.ratio == 2.0
    assert row.level is ABSENT


def test_connect_raises_open_error_when_database_is_unreachable(tmp_path: Path) -> None:
    settings = OrmSettings(
        dsn=f"sqlite:///{tmp_path / 'missing' / 'events.db'}",
        retry=RetryPolicy(attempts=1),
    )
    with pytest.raises(OpenError):
        connect(settings)
