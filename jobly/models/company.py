from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..db.session import QueryExecutor
from ..errors import DuplicateError, NotFoundError, UniqueViolationError
from ..sql import column_resolver, company_filters_sql, restrict_fields, sql_for_partial_update

logger = logging.getLogger(__name__)


COMPANY_COLUMNS = (
    'handle, name, description, num_employees AS "numEmployees", logo_url AS "logoUrl"'
)

UPDATABLE_FIELDS = frozenset({"name", "description", "numEmployees", "logoUrl"})

resolve_company_column = column_resolver({
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
})

# unique constraint on companies.name, as PostgreSQL and SQLite report it
_NAME_CONSTRAINTS = frozenset({"companies_name_key", "companies.name"})


def _is_name_clash(exc: UniqueViolationError) -> bool:
    return exc.constraint in _NAME_CONSTRAINTS


class CompanyRepository:
    """
    Statements for the companies table.

    Rows come back keyed by external names:
        { handle, name, description, numEmployees, logoUrl }
    """

    def __init__(self, db: QueryExecutor) -> None:
        self.db = db

    def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Insert a company and return it.

        data should be { handle, name, description, numEmployees, logoUrl }

        Raises:
            DuplicateError: If the handle or the name is already taken
        """
        handle = data["handle"]
        try:
            rows = self.db.query(
                f"""INSERT INTO companies
                        (handle, name, description, num_employees, logo_url)
                    VALUES ($1, $2, $3, $4, $5)
                    RETURNING {COMPANY_COLUMNS}""",
                [
                    handle,
                    data["name"],
                    data["description"],
                    data.get("numEmployees"),
                    data.get("logoUrl"),
                ],
            )
        except UniqueViolationError as exc:
            if _is_name_clash(exc):
                logger.info("Rejected duplicate company name %r", data["name"])
                raise DuplicateError(f"Duplicate company name: {data['name']}") from exc
            logger.info("Rejected duplicate company %s", handle)
            raise DuplicateError(f"Duplicate company: {handle}") from exc
        return rows[0]

    def find_all(self, criteria: Optional[Mapping[str, Any]] = None) -> list[dict[str, Any]]:
        """
        Companies matching ``criteria``, ordered by name.

        criteria (all optional): name, minEmployees, maxEmployees

        Raises:
            InvalidRangeError: If minEmployees > maxEmployees
        """
        where = company_filters_sql(criteria)
        return self.db.query(
            f"SELECT {COMPANY_COLUMNS} FROM companies{where.where_sql} ORDER BY name",
            where.params,
        )

    def get(self, handle: str) -> dict[str, Any]:
        """
        Return a company with its jobs.

        Returns { handle, name, description, numEmployees, logoUrl, jobs }
          where jobs is [{ id, title, salary, equity }, ...]

        Raises:
            NotFoundError: If no company has this handle
        """
        rows = self.db.query(
            f"SELECT {COMPANY_COLUMNS} FROM companies WHERE handle = $1",
            [handle],
        )
        if not rows:
            raise NotFoundError(f"No company: {handle}")

        company = rows[0]
        company["jobs"] = self.db.query(
            """SELECT id, title, salary, equity
               FROM jobs
               WHERE company_handle = $1
               ORDER BY id""",
            [handle],
        )
        return company

    def update(self, handle: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Partial update: only the fields present in ``data`` change.

        Data can include: { name, description, numEmployees, logoUrl }

        Raises:
            InvalidFieldError: If data names any other field
            EmptyUpdateError: If data is empty
            NotFoundError: If no company has this handle
            DuplicateError: If the new name belongs to another company
        """
        restrict_fields(data, UPDATABLE_FIELDS, "company")
        set_fragment = sql_for_partial_update(data, resolve_company_column)

        try:
            rows = self.db.query(
                f"""UPDATE companies
                    SET {set_fragment.set_cols}
                    WHERE handle = ${set_fragment.next_index}
                    RETURNING {COMPANY_COLUMNS}""",
                [*set_fragment.values, handle],
            )
        except UniqueViolationError as exc:
            if not _is_name_clash(exc):
                raise
            raise DuplicateError(f"Duplicate company name: {data['name']}") from exc
        if not rows:
            raise NotFoundError(f"No company: {handle}")
        return rows[0]

    def remove(self, handle: str) -> None:
        """
        Raises:
            NotFoundError: If no company has this handle
        """
        rows = self.db.query(
            "DELETE FROM companies WHERE handle = $1 RETURNING handle",
            [handle],
        )
        if not rows:
            raise NotFoundError(f"No company: {handle}")
