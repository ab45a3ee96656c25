"""
Report table specific exceptions
"""
from typing import Iterable, Optional

from core.exceptions import DashboardError, DatabaseError


class ReportTableError(DashboardError):
    """Base exception for report table domain"""

    pass


class MalformedQueryError(ReportTableError):
    """A named parameter referenced by the query is not bound"""

    def __init__(self, missing: Iterable[str], message: Optional[str] = None):
        self.missing = sorted(missing)
        super().__init__(
            message=message or f"Query references unbound parameters: {', '.join(self.missing)}",
            error_code="MALFORMED_QUERY",
            details={"missing_params": self.missing},
            status_code=500,
        )


class QueryExecutionError(DatabaseError):
    """The row store rejected a report query"""

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(message=message, operation="report_query", sql=sql)
        self.error_code = "QUERY_EXECUTION_ERROR"


class ColumnConfigError(ReportTableError):
    """Invalid region, slot or styling configuration"""

    def __init__(self, message: str, region: Optional[str] = None, slot: Optional[str] = None):
        details = {}
        if region:
            details["region"] = region
        if slot:
            details["slot"] = slot
        super().__init__(
            message=message,
            error_code="COLUMN_CONFIG_ERROR",
            details=details,
            status_code=500,
        )
