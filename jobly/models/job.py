from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..db.session import QueryExecutor
from ..errors import (
    DuplicateError,
    ForeignKeyViolationError,
    NotFoundError,
    UniqueViolationError,
)
from ..sql import column_resolver, job_filters_sql, restrict_fields, sql_for_partial_update

logger = logging.getLogger(__name__)


JOB_COLUMNS = 'id, title, salary, equity, company_handle AS "companyHandle"'

# id and companyHandle are fixed once a job exists
UPDATABLE_FIELDS = frozenset({"title", "salary", "equity"})

# companyHandle is never updatable, so the update map leaves it out
resolve_job_column = column_resolver({})


class JobRepository:
    """
    Statements for the jobs table.

    Rows come back as { id, title, salary, equity, companyHandle }.
    Listings are ordered by id.
    """

    def __init__(self, db: QueryExecutor) -> None:
        self.db = db

    def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Insert a job and return it.

        data should be { title, salary, equity, companyHandle }

        Raises:
            DuplicateError: If the company already has a job with this title
            NotFoundError: If companyHandle does not name a company
        """
        title = data["title"]
        company_handle = data["companyHandle"]
        try:
            rows = self.db.query(
                f"""INSERT INTO jobs (title, salary, equity, company_handle)
                    VALUES ($1, $2, $3, $4)
                    RETURNING {JOB_COLUMNS}""",
                [title, data.get("salary"), data.get("equity"), company_handle],
            )
        except UniqueViolationError as exc:
            logger.info("Rejected duplicate job %r for %s", title, company_handle)
            raise DuplicateError(f"Duplicate job: {title}") from exc
        except ForeignKeyViolationError as exc:
            raise NotFoundError(f"No company: {company_handle}") from exc
        return rows[0]

    def find_all(self, criteria: Optional[Mapping[str, Any]] = None) -> list[dict[str, Any]]:
        """
        Jobs matching ``criteria``, ordered by id.

        criteria (all optional):
        - title (case-insensitive, partial match)
        - minSalary
        - hasEquity (True returns only jobs with equity > 0, other values ignored)
        """
        where = job_filters_sql(criteria)
        return self.db.query(
            f"SELECT {JOB_COLUMNS} FROM jobs{where.where_sql} ORDER BY id",
            where.params,
        )

    def get(self, job_id: int) -> dict[str, Any]:
        rows = self.db.query(f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = $1", [job_id])
        if not rows:
            raise NotFoundError(f"No job: {job_id}")
        return rows[0]

    def update(self, job_id: int, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Partial update: only the fields present in ``data`` change.

        Data can include: { title, salary, equity }

        Raises:
            InvalidFieldError: If data names id, companyHandle or an unknown field
            EmptyUpdateError: If data is empty
            NotFoundError: If no job has this id
        """
        restrict_fields(data, UPDATABLE_FIELDS, "job")
        set_fragment = sql_for_partial_update(data, resolve_job_column)

        rows = self.db.query(
            f"""UPDATE jobs
                SET {set_fragment.set_cols}
                WHERE id = ${set_fragment.next_index}
                RETURNING {JOB_COLUMNS}""",
            [*set_fragment.values, job_id],
        )
        if not rows:
            raise NotFoundError(f"No job: {job_id}")
        return rows[0]

    def remove(self, job_id: int) -> None:
        rows = self.db.query("DELETE FROM jobs WHERE id = $1 RETURNING id", [job_id])
        if not rows:
            raise NotFoundError(f"No job: {job_id}")
