from __future__ import annotations

import logging

from .session import DbSession

logger = logging.getLogger(__name__)


# Natural keys are enforced by constraints so create() can be a single INSERT.
SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS companies (
        handle VARCHAR(25) PRIMARY KEY CHECK (handle = lower(handle)),
        name TEXT UNIQUE NOT NULL,
        num_employees INTEGER CHECK (num_employees >= 0),
        description TEXT NOT NULL,
        logo_url TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS jobs (
        id SERIAL PRIMARY KEY,
        title TEXT NOT NULL,
        salary INTEGER CHECK (salary >= 0),
        equity NUMERIC CHECK (equity <= 1.0),
        company_handle VARCHAR(25) NOT NULL
            REFERENCES companies ON DELETE CASCADE,
        CONSTRAINT jobs_title_company_handle_key UNIQUE (title, company_handle)
    )
    """,
)

DROP_STATEMENTS = (
    "DROP TABLE IF EXISTS jobs",
    "DROP TABLE IF EXISTS companies",
)


def init_schema(session: DbSession) -> None:
    """Create the companies and jobs tables if they do not exist."""
    session.execute_script(SCHEMA_STATEMENTS)
    logger.info("Schema initialized (companies, jobs)")


def drop_schema(session: DbSession) -> None:
    session.execute_script(DROP_STATEMENTS)
