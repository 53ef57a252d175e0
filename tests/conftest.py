from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, Sequence

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from jobly.db.session import DbSession


# SQLite stand-in for the PostgreSQL schema in jobly.db.schema
# (INTEGER PRIMARY KEY instead of SERIAL, no ILIKE support).
SQLITE_SCHEMA = (
    """
    CREATE TABLE companies (
        handle VARCHAR(25) PRIMARY KEY CHECK (handle = lower(handle)),
        name TEXT UNIQUE NOT NULL,
        num_employees INTEGER CHECK (num_employees >= 0),
        description TEXT NOT NULL,
        logo_url TEXT
    )
    """,
    """
    CREATE TABLE jobs (
        id INTEGER PRIMARY KEY,
        title TEXT NOT NULL,
        salary INTEGER CHECK (salary >= 0),
        equity NUMERIC CHECK (equity <= 1.0),
        company_handle VARCHAR(25) NOT NULL
            REFERENCES companies ON DELETE CASCADE,
        UNIQUE (title, company_handle)
    )
    """,
)


@pytest.fixture
def engine(tmp_path) -> Iterator[Engine]:
    """
    Per-test SQLite engine with the companies/jobs tables and FK enforcement.
    """
    eng = create_engine(f"sqlite:///{tmp_path / 'jobly.db'}")

    @event.listens_for(eng, "connect")
    def _enable_foreign_keys(dbapi_conn, _record) -> None:
        dbapi_conn.execute("PRAGMA foreign_keys = ON")

    with DbSession(eng) as session:
        session.execute_script(SQLITE_SCHEMA)

    yield eng
    eng.dispose()


@pytest.fixture
def session(engine: Engine) -> Iterator[DbSession]:
    with DbSession(engine) as s:
        yield s


@pytest.fixture
def seed(session: DbSession) -> dict[str, Any]:
    """
    Two companies (c1, c2) and two jobs, like the fixtures most model tests share.
    """
    session.query(
        "INSERT INTO companies (handle, name, description, num_employees, logo_url) "
        "VALUES ($1, $2, $3, $4, $5), ($6, $7, $8, $9, $10)",
        ["c1", "C1", "Desc1", 1, "http://c1.img",
         "c2", "C2", "Desc2", 2, "http://c2.img"],
    )
    rows = session.query(
        "INSERT INTO jobs (title, salary, equity, company_handle) "
        "VALUES ($1, $2, $3, $4), ($5, $6, $7, $8) RETURNING id",
        ["J1", 70000, 0.06, "c1",
         "J2", 90000, 0, "c2"],
    )
    return {"job_ids": sorted(row["id"] for row in rows)}


class RecordingDb:
    """
    Fake executor: records every (sql, params) call and replays queued results.

    Usage:
        db = RecordingDb([[{"handle": "c1"}]])
        CompanyRepository(db).remove("c1")
        assert db.calls[0][1] == ["c1"]
    """

    def __init__(self, results: Sequence[Any] = ()) -> None:
        self._results = list(results)
        self.calls: list[tuple[str, list[Any]]] = []

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        self.calls.append((sql, list(params)))
        if not self._results:
            return []
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def recording_db() -> Callable[..., RecordingDb]:
    return RecordingDb


def _markexpr_allows(config: pytest.Config, marker_name: str) -> bool:
    """
    Return True if the user's `-m` expression *mentions* marker_name.
    """
    expr = getattr(config.option, "markexpr", "") or ""
    return marker_name in expr


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """
    Skip PostgreSQL integration tests unless explicitly selected with `-m integration`.
    """
    if _markexpr_allows(config, "integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="Skipped: run with `pytest -m integration` against a PostgreSQL database."
    )
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip_integration)
