"""
Report Table Module

Tabular report builder: query descriptors, column registry, renderer with
list/cards/responsive-table layouts, and a Redis render cache.
"""

from .cache import NOCACHE_SCOPE, RenderCache, fingerprint
from .columns import ColumnRegistry, Region, Slot, SlotStyle, StyleRule, TableClass
from .exceptions import ColumnConfigError, MalformedQueryError, QueryExecutionError, ReportTableError
from .identity import TableIdentitySource
from .query import QueryDescriptor, RowStore, build_query
from .renderer import IDENTITY_MARKER, DownloadFormat, ExportResult, RenderedReport, ReportRenderer, ReportTemplate
from .template_engine import TemplateData, TemplateEngine

__all__ = [
    # Query
    "QueryDescriptor",
    "RowStore",
    "build_query",
    # Columns
    "ColumnRegistry",
    "Region",
    "Slot",
    "SlotStyle",
    "StyleRule",
    "TableClass",
    # Rendering
    "ReportRenderer",
    "ReportTemplate",
    "RenderedReport",
    "IDENTITY_MARKER",
    "DownloadFormat",
    "ExportResult",
    "TableIdentitySource",
    "TemplateEngine",
    "TemplateData",
    # Caching
    "RenderCache",
    "fingerprint",
    "NOCACHE_SCOPE",
    # Errors
    "ReportTableError",
    "MalformedQueryError",
    "QueryExecutionError",
    "ColumnConfigError",
]
