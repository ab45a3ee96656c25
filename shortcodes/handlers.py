"""
Shortcode handlers

Each shortcode resolves its arguments, picks a query and a column layout
and hands both to the renderer, optionally through the render cache.
Handlers never raise for caller misconfiguration; they return a UserError
instead. Query failures propagate.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

from sqlalchemy.orm import Session

from booking.queries import all_options_query, my_options_query, teacher_options_query
from booking.service import BookingService
from core.config import Settings
from core.exceptions import NotFoundError
from core.logging import get_logger
from core.viewer import ANONYMOUS, Viewer
from report_table.cache import NOCACHE_SCOPE, RenderCache, fingerprint
from report_table.columns import ColumnRegistry, Region, Slot, StyleRule, TableClass
from report_table.query import QueryDescriptor
from report_table.renderer import (
    IDENTITY_MARKER,
    DownloadFormat,
    ExportResult,
    RenderedReport,
    ReportRenderer,
    ReportTemplate,
)

from .arguments import ReportRequest, ShortcodeResolver, UserError

logger = get_logger(__name__, domain="shortcodes")

BOOKING_OPTIONS_SCOPE = "mod_booking:bookingoptionstable"
EXPORT_FILENAME = "list_of_booking_options"


@dataclass(frozen=True)
class ReportOk:
    report: RenderedReport

    @property
    def body(self) -> str:
        return self.report.markup


@dataclass(frozen=True)
class ExportOk:
    export: ExportResult
    format: DownloadFormat

    @property
    def body(self) -> str:
        return self.export.serialize(self.format)

    @property
    def media_type(self) -> str:
        return "application/json" if self.format == DownloadFormat.JSON else "text/csv"


ShortcodeResult = Union[ReportOk, ExportOk, UserError]


def list_columns() -> ColumnRegistry:
    """One line per option, keys only shown on small screens"""
    registry = ColumnRegistry()
    registry.declare_region(
        Region.CARDBODY,
        [Slot.TEXT, Slot.DAYOFWEEK, Slot.SPORTS, Slot.TEACHER, Slot.LOCATION, Slot.BOOKINGS, Slot.PRICE],
    )
    registry.style(Region.CARDBODY, {StyleRule.KEY_CLASS: "d-md-none"})
    registry.style(Region.CARDBODY, {StyleRule.COLUMN_CLASS: "col-sm"})

    registry.style(Region.CARDBODY, {StyleRule.COLUMN_CLASS: "col-md-3 col-sm-12"}, [Slot.TEXT])
    registry.style(
        Region.CARDBODY,
        {StyleRule.COLUMN_CLASS: "col-sm-12 col-md-3 text-left", StyleRule.ICON_BEFORE: "fa fa-clock-o"},
        [Slot.DAYOFWEEK],
    )
    registry.style(
        Region.CARDBODY,
        {StyleRule.COLUMN_CLASS: "col-sm-12 col-md-6 text-right", StyleRule.VALUE_CLASS: "sports-badge bg-info text-light"},
        [Slot.SPORTS],
    )
    registry.style(Region.CARDBODY, {StyleRule.COLUMN_CLASS: "col-sm-12 col-md-3"}, [Slot.TEACHER])
    registry.style(
        Region.CARDBODY,
        {StyleRule.COLUMN_CLASS: "col-sm-12 col-md-3", StyleRule.ICON_BEFORE: "fa fa-map-marker"},
        [Slot.LOCATION],
    )
    registry.style(Region.CARDBODY, {StyleRule.COLUMN_CLASS: "col-sm-12 col-md-3 text-right"}, [Slot.BOOKINGS, Slot.PRICE])

    registry.style(Region.CARDBODY, {StyleRule.LABEL_OVERRIDE: "Course name"}, [Slot.TEXT])
    registry.style(Region.CARDBODY, {StyleRule.LABEL_OVERRIDE: "Teacher(s)"}, [Slot.TEACHER])

    registry.set_table_class(TableClass.LIST_HEADER, "card d-none d-md-block")
    registry.set_table_class(TableClass.CARD_BODY, "list-group-item")
    return registry


def _card_layout(registry: ColumnRegistry) -> ColumnRegistry:
    registry.declare_region(Region.CARDLIST, [Slot.DAYOFWEEK, Slot.LOCATION, Slot.BOOKINGS])
    registry.style(Region.CARDLIST, {StyleRule.KEY_CLASS: "d-none"})
    registry.style(Region.CARDLIST, {StyleRule.ICON_BEFORE: "fa fa-map-marker"}, [Slot.LOCATION])
    registry.style(Region.CARDLIST, {StyleRule.ICON_BEFORE: "fa fa-clock-o"}, [Slot.DAYOFWEEK])
    registry.style(Region.CARDLIST, {StyleRule.ICON_BEFORE: "fa fa-users"}, [Slot.BOOKINGS])

    registry.declare_region(Region.CARDFOOTER, [Slot.PRICE])
    registry.style(Region.CARDFOOTER, {StyleRule.KEY_CLASS: "d-none"})

    registry.set_table_class(TableClass.CARD_IMAGE, "w-100")
    return registry


def card_columns() -> ColumnRegistry:
    """Card grid of all options, hidden options marked"""
    registry = ColumnRegistry()
    registry.declare_region(Region.ITEMCATEGORY, [Slot.SPORTS])
    registry.declare_region(Region.ITEMDAY, [Slot.DAYOFWEEK])
    registry.declare_region(Region.CARDIMAGE, [Slot.IMAGE])
    registry.declare_region(Region.OPTIONINVISIBLE, [Slot.INVISIBLEOPTION])
    registry.declare_region(Region.DATAFIELDS, [Slot.SPORTS, Slot.DAYOFWEEK])

    registry.declare_region(Region.CARDBODY, [Slot.INVISIBLEOPTION, Slot.SPORTS, Slot.TEXT, Slot.TEACHER])
    registry.style(Region.CARDBODY, {StyleRule.KEY_CLASS: "d-none"})
    registry.style(
        Region.CARDBODY, {StyleRule.VALUE_CLASS: "shortcodes_option_info_invisible"}, [Slot.INVISIBLEOPTION]
    )
    registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h6"}, [Slot.SPORTS])
    registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h5"}, [Slot.TEXT])
    return _card_layout(registry)


def my_card_columns() -> ColumnRegistry:
    """Cards of the viewer's own bookings"""
    registry = ColumnRegistry()
    registry.declare_region(Region.ITEMCATEGORY, [Slot.SPORTS])
    registry.declare_region(Region.ITEMDAY, [Slot.DAYOFWEEK])
    registry.declare_region(Region.CARDIMAGE, [Slot.IMAGE])

    registry.declare_region(Region.CARDBODY, [Slot.SPORTS, Slot.TEXT, Slot.TEACHER])
    registry.style(Region.CARDBODY, {StyleRule.KEY_CLASS: "d-none"})
    registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h6"}, [Slot.SPORTS])
    registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h5"}, [Slot.TEXT])
    return _card_layout(registry)


class Shortcodes:
    """The shortcodes of the dashboard, addressable by name"""

    def __init__(
        self,
        session: Session,
        settings: Settings,
        renderer: ReportRenderer,
        cache: RenderCache,
        viewer: Optional[Viewer] = None,
    ):
        self.booking_service = BookingService(session)
        self.settings = settings
        self.renderer = renderer
        self.cache = cache
        self.viewer = viewer or ANONYMOUS
        self.resolver = ShortcodeResolver(
            self.booking_service,
            default_instance_id=settings.shortcodes_default_instance,
            default_per_page=settings.default_per_page,
        )

        self.handlers: Dict[str, Callable[[Mapping[str, str]], ShortcodeResult]] = {
            "allcourseslist": self.allcourseslist,
            "allcoursescards": self.allcoursescards,
            "mycoursescards": self.mycoursescards,
            "allekurseliste": self.allcourseslist,
            "allekursekarten": self.allcoursescards,
            "meinekursekarten": self.mycoursescards,
        }

    def names(self):
        return sorted(self.handlers)

    def render(self, name: str, args: Mapping[str, str]) -> ShortcodeResult:
        """
        Run a shortcode by name

        Raises:
            NotFoundError: No shortcode is registered under the name
        """
        handler = self.handlers.get(name.lower())
        if handler is None:
            raise NotFoundError("shortcode", name)
        return handler(args)

    def allcourseslist(self, args: Mapping[str, str]) -> ShortcodeResult:
        request = self.resolver.resolve(args)
        if isinstance(request, UserError):
            return request
        return self._produce(
            "allcourseslist", request, self._options_query(request), list_columns(), ReportTemplate.LIST,
            scope=BOOKING_OPTIONS_SCOPE, lazy=False,
        )

    def allcoursescards(self, args: Mapping[str, str]) -> ShortcodeResult:
        request = self.resolver.resolve(args)
        if isinstance(request, UserError):
            return request
        return self._produce(
            "allcoursescards", request, self._options_query(request), card_columns(), ReportTemplate.CARDS,
            scope=BOOKING_OPTIONS_SCOPE, lazy=request.lazy,
        )

    def mycoursescards(self, args: Mapping[str, str]) -> ShortcodeResult:
        request = self.resolver.resolve(args)
        if isinstance(request, UserError):
            return request
        query = my_options_query(
            request.instance, self.viewer.user_id or 0, request.category, dialect=self.booking_service.dialect
        )
        return self._produce(
            "mycoursescards", request, query, my_card_columns(), ReportTemplate.RESPONSIVE_TABLE,
            scope=NOCACHE_SCOPE, lazy=False,
        )

    def _options_query(self, request: ReportRequest) -> QueryDescriptor:
        dialect = self.booking_service.dialect
        if request.teacher_scoped:
            return teacher_options_query(request.instance, request.teacher_id, dialect=dialect)
        return all_options_query(request.instance, request.category, dialect=dialect)

    def _produce(
        self,
        name: str,
        request: ReportRequest,
        query: QueryDescriptor,
        registry: ColumnRegistry,
        template: ReportTemplate,
        scope: str,
        lazy: bool,
    ) -> ShortcodeResult:
        if request.download != DownloadFormat.NONE:
            export = self.renderer.export(query, registry, filename=EXPORT_FILENAME)
            return ExportOk(export=export, format=request.download)

        if lazy:
            identity = self.renderer.identity_source.derived_identity(f"{name} {request.instance.name}")
            report = self.renderer.render_placeholder(
                query,
                registry,
                per_page=request.per_page,
                template=template,
                callback_url=self.callback_url(name, request, identity),
                table_identity=identity,
            )
            return ReportOk(report)

        # Cached markup carries the marker, each embed gets its own identity
        key = fingerprint(query, registry, template=template.value, per_page=request.per_page)
        report = self.cache.render_cached(
            scope,
            key,
            lambda: self.renderer.render(
                query,
                registry,
                per_page=request.per_page,
                template=template,
                table_identity=IDENTITY_MARKER,
            ),
        )
        identity = request.table_identity or self.renderer.identity_source.random_identity()
        logger.debug("Serving report", extra={"shortcode": name, "scope": scope, "identity": identity})
        return ReportOk(report.with_identity(identity))

    @staticmethod
    def callback_url(name: str, request: ReportRequest, identity: str) -> str:
        """URL that renders the deferred table eagerly into the same element"""
        params = [(key, value) for key, value in request.raw_args if key not in ("lazy", "nolazy", "tableid", "mode")]
        params.extend([("nolazy", "1"), ("tableid", identity)])
        return f"/shortcodes/{name}?{urlencode(params)}"
