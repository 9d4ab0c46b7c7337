"""Shared fixtures.

Each test that touches the database gets its own file-backed SQLite database
under ``tmp_path`` so sessions never share state across tests.
"""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker

from smart_expense_manager.database import init_db, make_engine
from smart_expense_manager.records import load_frame
from smart_expense_manager.seed_db import seed_categories
from smart_expense_manager.storage import MemoryBackend
from tests.helpers import make_row

TODAY = date(2026, 10, 18)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def db_session(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    seed_categories(session)
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def sample_rows() -> list[dict]:
    """Nine transactions over the last year, newest first.

    October 2026 expenses total 2300, September 4000, August 2500.
    Overall income is 100000 and overall expense 9500.
    """

    return [
        make_row("expense", "Food", 799.50, date(2026, 10, 12), "Groceries"),
        make_row("expense", "Transport", 300, date(2026, 10, 10), "Metro card"),
        make_row("expense", "Food", 1200.50, date(2026, 10, 5), "Dinner out"),
        make_row("income", "Salary", 50000, date(2026, 10, 2)),
        make_row("expense", "Bills", 4000, date(2026, 9, 15), "Electricity"),
        make_row("income", "Salary", 50000, date(2026, 9, 1)),
        make_row("expense", "Shopping", 2500, date(2026, 8, 20)),
        make_row("expense", "Food", 100, date(2026, 5, 3)),
        make_row("expense", "Entertainment", 600, date(2025, 12, 24), "Concert"),
    ]


@pytest.fixture
def sample_df(sample_rows):
    df, rejected = load_frame(sample_rows)
    assert rejected == []
    return df


@pytest.fixture
def empty_df():
    df, _ = load_frame([])
    return df
