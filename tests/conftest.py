"""Shared test fixtures."""

import json
import sqlite3
from pathlib import Path

import pytest

from matchlog.sources import init_schema


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Empty SQLite database with the matches table."""
    path = tmp_path / 'matches.db'
    init_schema(path)
    return path


@pytest.fixture
def add_match(db_path):
    """Insert a match row and return its primary key."""

    def _add(opponent_name, match_date, team_id=1, stats=None, **columns):
        columns.update(
            team_id=team_id,
            opponent_name=opponent_name,
            match_date=match_date,
            stats_json=json.dumps(stats) if stats is not None else None,
        )
        names = ', '.join(columns)
        marks = ', '.join('?' for _ in columns)
        with sqlite3.connect(str(db_path)) as conn:
            cursor = conn.execute(
                f'INSERT INTO matches ({names}) VALUES ({marks})',
                list(columns.values()),
            )
            return cursor.lastrowid

    return _add


class FakeSheetSource:
    """Sheet source serving fixed rows, or raising a given error."""

    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.calls = []

    def fetch_rows(self, range_selector):
        self.calls.append(range_selector)
        if self.error is not None:
            raise self.error
        return [dict(row) for row in self.rows]


@pytest.fixture
def sheet_source_factory():
    return FakeSheetSource
