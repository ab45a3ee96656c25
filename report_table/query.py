"""
Query descriptors and the row store that executes them

A descriptor carries the raw SQL fragments of a row-producing query: the
field list, the FROM clause (joins), the WHERE/ORDER clause and the bound
parameters. It has no execution logic; RowStore runs it.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logging import get_logger

from .exceptions import MalformedQueryError, QueryExecutionError

logger = get_logger(__name__, domain="report_table")

# Same shape SQLAlchemy's text() uses for bind parameters; skips "::" casts
PARAM_PATTERN = re.compile(r"(?<![:\w\\]):([A-Za-z_]\w*)(?!:)")

# Filters that only order or group still need a WHERE condition in front
TRAILING_CLAUSE_PATTERN = re.compile(r"^(ORDER|GROUP)\s+BY\b", re.IGNORECASE)

LIMIT_PARAM = "rowstore_limit"
OFFSET_PARAM = "rowstore_offset"


@dataclass(frozen=True)
class QueryDescriptor:
    """Immutable description of a report query"""

    fields: Tuple[str, ...]
    source: str
    filter: str
    params: Mapping[str, Any]

    def referenced_params(self) -> Set[str]:
        """Named parameters used in the source and filter clauses"""
        names = set(PARAM_PATTERN.findall(self.source))
        names.update(PARAM_PATTERN.findall(self.filter))
        return names

    def missing_params(self) -> Set[str]:
        return self.referenced_params() - set(self.params)

    def validate(self) -> None:
        """
        Check every referenced parameter is bound

        Raises:
            MalformedQueryError: If a named parameter has no value
        """
        missing = self.missing_params()
        if missing:
            raise MalformedQueryError(missing)

    def select_sql(self) -> str:
        where = self.filter.strip()
        if not where:
            where = "1=1"
        elif TRAILING_CLAUSE_PATTERN.match(where):
            where = f"1=1 {where}"
        return f"SELECT {', '.join(self.fields)} FROM {self.source} WHERE {where}"

    def count_sql(self) -> str:
        # Sub-select keeps an ORDER BY inside the filter valid
        return f"SELECT COUNT(*) FROM ({self.select_sql()}) counted"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fields": list(self.fields),
            "source": self.source,
            "filter": self.filter,
            "params": dict(self.params),
        }


def build_query(
    fields: Iterable[str],
    source: str,
    filter: str = "",
    params: Optional[Mapping[str, Any]] = None,
) -> QueryDescriptor:
    """
    Build a query descriptor

    Parameter presence is checked lazily, when the descriptor is executed.
    """
    fields = tuple(fields)
    if not fields:
        raise ValueError("A query needs at least one field")
    return QueryDescriptor(
        fields=fields,
        source=source,
        filter=filter,
        params=MappingProxyType(dict(params or {})),
    )


class RowStore:
    """Read-only executor of query descriptors against a SQLAlchemy session"""

    def __init__(self, session: Session):
        self.session = session

    def fetch(self, query: QueryDescriptor, limit: Optional[int] = None, offset: int = 0) -> List[Dict[str, Any]]:
        """
        Execute the query and return its rows as dictionaries

        Args:
            query: Descriptor to execute
            limit: Maximum number of rows, or None for no limit
            offset: Number of rows to skip

        Raises:
            MalformedQueryError: If a referenced parameter is missing
            QueryExecutionError: If the database rejects the query
        """
        query.validate()

        sql = query.select_sql()
        params = dict(query.params)
        if limit is not None:
            sql += f" LIMIT :{LIMIT_PARAM} OFFSET :{OFFSET_PARAM}"
            params[LIMIT_PARAM] = limit
            params[OFFSET_PARAM] = offset

        result = self._execute(sql, params)
        return [dict(row) for row in result.mappings()]

    def count(self, query: QueryDescriptor) -> int:
        """Count the rows the query would return without paging"""
        query.validate()
        result = self._execute(query.count_sql(), dict(query.params))
        return int(result.scalar() or 0)

    def _execute(self, sql: str, params: Dict[str, Any]):
        try:
            return self.session.execute(text(sql), params)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Report query failed: {e}")
            raise QueryExecutionError(f"Report query failed: {e.__class__.__name__}", sql=sql) from e
