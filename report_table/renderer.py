"""
Report renderer

Executes a query descriptor, maps every row through a column registry and
serializes the result with one of the named templates. Rendering is a pure
function of its inputs and the row store contents; the only randomness is
the table identity, which comes from an injected identity source.
"""

import csv
import io
import json
import time
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from core.logging import get_logger
from core.metrics import metrics

from .columns import ColumnRegistry, Slot, TableClass
from .identity import TableIdentitySource
from .query import QueryDescriptor, RowStore
from .template_engine import TemplateData, TemplateEngine

logger = get_logger(__name__, domain="report_table")

DEFAULT_PER_PAGE = 1000

# Identity of markup that outlives one page view; swapped out before use
IDENTITY_MARKER = "__table_identity__"


class ReportTemplate(str, Enum):
    """Serialization layouts"""

    LIST = "list"
    CARDS = "cards"
    RESPONSIVE_TABLE = "responsive_table"


class DownloadFormat(str, Enum):
    """Export formats of the download mode"""

    NONE = "none"
    CSV = "csv"
    JSON = "json"


@dataclass(frozen=True)
class RenderedReport:
    """Serialized markup of one report table"""

    template: ReportTemplate
    table_identity: str
    markup: str
    row_count: int = 0
    total_count: Optional[int] = None
    page: int = 0
    lazy: bool = False

    def with_identity(self, identity: str) -> "RenderedReport":
        """Same report with every occurrence of its identity replaced"""
        if identity == self.table_identity:
            return self
        return replace(self, table_identity=identity, markup=self.markup.replace(self.table_identity, identity))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["template"] = self.template.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RenderedReport":
        values = dict(data)
        values["template"] = ReportTemplate(values["template"])
        return cls(**values)


@dataclass(frozen=True)
class ExportResult:
    """Flat, unstyled table for downloads"""

    columns: Tuple[str, ...]
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[Any, ...], ...]
    filename: str = "export"

    def to_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(self.headers)
        writer.writerows(self.rows)
        return buffer.getvalue()

    def to_json(self) -> str:
        records = [dict(zip(self.columns, row)) for row in self.rows]
        return json.dumps({"columns": list(self.columns), "rows": records}, default=str)

    def serialize(self, download_format: DownloadFormat) -> str:
        if download_format == DownloadFormat.JSON:
            return self.to_json()
        return self.to_csv()


def _format_timestamp(value: Any, format_str: str = "%d.%m.%Y %H:%M") -> str:
    if value in (None, "", 0):
        return ""
    return datetime.fromtimestamp(int(value), tz=timezone.utc).strftime(format_str)


def _dayofweek(row: Mapping[str, Any]) -> str:
    stored = row.get("dayofweektime")
    if stored:
        return str(stored)
    return _format_timestamp(row.get("coursestarttime"), "%a, %H:%M")


def _bookings(row: Mapping[str, Any]) -> str:
    booked = row.get("booked") or 0
    maxanswers = row.get("maxanswers")
    if maxanswers:
        return f"{booked}/{maxanswers}"
    return str(booked)


def _price(row: Mapping[str, Any]) -> str:
    amount = row.get("price")
    if amount is None or amount == "":
        return ""
    return f"{Decimal(str(amount)):.2f} {row.get('currency') or ''}".strip()


def _invisibleoption(row: Mapping[str, Any]) -> str:
    return "Invisible" if row.get("invisible") else ""


# Slots whose value is computed rather than read from a same-named field
VIRTUAL_COLUMNS: Dict[Slot, Callable[[Mapping[str, Any]], Any]] = {
    Slot.DAYOFWEEK: _dayofweek,
    Slot.BOOKINGS: _bookings,
    Slot.PRICE: _price,
    Slot.INVISIBLEOPTION: _invisibleoption,
    Slot.COURSESTARTTIME: lambda row: _format_timestamp(row.get("coursestarttime")),
    Slot.COURSEENDTIME: lambda row: _format_timestamp(row.get("courseendtime")),
}


def slot_value(row: Mapping[str, Any], slot: Slot) -> Any:
    """Value of a slot for one row; missing fields render empty"""
    compute = VIRTUAL_COLUMNS.get(slot)
    value = compute(row) if compute else row.get(slot.value)
    return "" if value is None else value


class ReportRenderer:
    """Turns a query descriptor and a column registry into markup"""

    def __init__(
        self,
        row_store: RowStore,
        template_engine: TemplateEngine,
        identity_source: Optional[TableIdentitySource] = None,
    ):
        self.row_store = row_store
        self.template_engine = template_engine
        self.identity_source = identity_source or TableIdentitySource()

    def render(
        self,
        query: QueryDescriptor,
        registry: ColumnRegistry,
        per_page: int = DEFAULT_PER_PAGE,
        paged: bool = False,
        template: ReportTemplate = ReportTemplate.LIST,
        page: int = 0,
        table_identity: Optional[str] = None,
    ) -> RenderedReport:
        """
        Execute the query and serialize the rows

        Unpaged reports still stop at per_page rows. Paged reports run an
        extra count query so the template can show the page count.

        Args:
            query: Row-producing query
            registry: Regions, slots and styles to apply to each row
            per_page: Rows per page, or the row cap when unpaged
            paged: Whether to page through the result
            template: Layout to serialize with
            page: Zero-based page number, only used when paged
            table_identity: Fixed identity (lazy callbacks); random otherwise

        Raises:
            MalformedQueryError: A referenced parameter is missing
            QueryExecutionError: The row store rejected the query
        """
        if per_page < 1:
            raise ValueError("per_page must be positive")
        template = ReportTemplate(template)
        page = max(page, 0) if paged else 0

        start = time.time()
        total_count = self.row_store.count(query) if paged else None
        rows = self.row_store.fetch(query, limit=per_page, offset=page * per_page)

        identity = table_identity or self.identity_source.random_identity()
        data = TemplateData(
            table=self._table_context(registry, identity, template, per_page, paged, page, len(rows), total_count),
            header=self._header(registry),
            rows=[self._map_row(row, registry) for row in rows],
            metadata={"row_fields": sorted(rows[0]) if rows else []},
        )
        markup = self.template_engine.render_template(template.value, data)

        duration = time.time() - start
        metrics.track_report_rendered(template.value, "eager", duration)
        logger.info(
            f"Rendered report paged={paged}",
            extra={
                "template": template.value,
                "identity": identity,
                "rows": len(rows),
                "duration_ms": round(duration * 1000, 1),
            },
        )

        return RenderedReport(
            template=template,
            table_identity=identity,
            markup=markup,
            row_count=len(rows),
            total_count=total_count,
            page=page,
        )

    def render_placeholder(
        self,
        query: QueryDescriptor,
        registry: ColumnRegistry,
        per_page: int = DEFAULT_PER_PAGE,
        paged: bool = False,
        template: ReportTemplate = ReportTemplate.CARDS,
        callback_url: str = "",
        name: str = "",
        table_identity: Optional[str] = None,
    ) -> RenderedReport:
        """
        Serialize a placeholder whose content is fetched later

        Takes the same inputs as render(); the query is validated but not
        executed. Unless given, the identity is derived from the report name
        so the deferred request can fill the same element.
        """
        if per_page < 1:
            raise ValueError("per_page must be positive")
        template = ReportTemplate(template)
        query.validate()

        identity = table_identity or self.identity_source.derived_identity(name or template.value)
        context = {
            "table": self._table_context(registry, identity, template, per_page, paged, 0, 0, None),
            "callback_url": callback_url,
        }
        markup = self.template_engine.render_template("placeholder", context)

        metrics.track_report_rendered(template.value, "placeholder")
        logger.info("Rendered lazy placeholder", extra={"template": template.value, "identity": identity})

        return RenderedReport(template=template, table_identity=identity, markup=markup, lazy=True)

    def export(self, query: QueryDescriptor, registry: ColumnRegistry, filename: str = "export") -> ExportResult:
        """Fetch every row, without paging, as plain values"""
        rows = self.row_store.fetch(query)
        slots = registry.slots()

        # Label of a slot comes from the first region it was declared in
        headers = []
        for slot in slots:
            region = next(r for r, declared in registry.regions().items() if slot in declared)
            headers.append(registry.label(region, slot))

        metrics.track_report_rendered("export", "export")
        logger.info(f"Exported report {filename}", extra={"rows": len(rows)})

        return ExportResult(
            columns=tuple(slot.value for slot in slots),
            headers=tuple(headers),
            rows=tuple(tuple(slot_value(row, slot) for slot in slots) for row in rows),
            filename=filename,
        )

    def _table_context(
        self,
        registry: ColumnRegistry,
        identity: str,
        template: ReportTemplate,
        per_page: int,
        paged: bool,
        page: int,
        row_count: int,
        total_count: Optional[int],
    ) -> Dict[str, Any]:
        pages = None
        if paged and total_count is not None:
            pages = max(1, -(-total_count // per_page))
        return {
            "identity": identity,
            "template": template.value,
            "classes": {target.value: registry.table_class(target) for target in TableClass},
            "per_page": per_page,
            "paged": paged,
            "page": page,
            "pages": pages,
            "row_count": row_count,
            "total_count": total_count,
        }

    def _header(self, registry: ColumnRegistry) -> Dict[str, List[Dict[str, Any]]]:
        header = {}
        for region, slots in registry.regions().items():
            header[region.value] = []
            for slot in slots:
                style = registry.resolve_style(region, slot)
                header[region.value].append(
                    {
                        "slot": slot.value,
                        "label": registry.label(region, slot),
                        "column_class": style.column_class,
                    }
                )
        return header

    def _map_row(self, row: Mapping[str, Any], registry: ColumnRegistry) -> Dict[str, Any]:
        regions: Dict[str, List[Dict[str, Any]]] = {}
        for region, slots in registry.regions().items():
            cells = []
            for slot in slots:
                style = registry.resolve_style(region, slot)
                cells.append(
                    {
                        "slot": slot.value,
                        "label": registry.label(region, slot),
                        "value": slot_value(row, slot),
                        "key_class": style.key_class,
                        "value_class": style.value_class,
                        "column_class": style.column_class,
                        "icon_before": style.icon_before,
                    }
                )
            regions[region.value] = cells
        return {"id": row.get("id"), "regions": regions}
