"""
Test the shortcode handlers
"""
import csv
import io
import json
from unittest.mock import patch
from urllib.parse import parse_qsl, urlparse

import pytest

from booking.queries import all_options_query, teacher_options_query
from core.exceptions import NotFoundError
from core.viewer import Viewer
from report_table.columns import Region, Slot
from report_table.renderer import IDENTITY_MARKER, ReportTemplate
from shortcodes.arguments import UserError
from shortcodes.handlers import (
    BOOKING_OPTIONS_SCOPE,
    ExportOk,
    ReportOk,
    Shortcodes,
    card_columns,
    list_columns,
    my_card_columns,
)
from tests.fixtures.database import OUTSIDER_ID, SPORTS_CMID, TRAINER_ID


class TestColumnLayouts:
    def test_list_layout(self):
        registry = list_columns()

        assert registry.regions()[Region.CARDBODY] == [
            Slot.TEXT,
            Slot.DAYOFWEEK,
            Slot.SPORTS,
            Slot.TEACHER,
            Slot.LOCATION,
            Slot.BOOKINGS,
            Slot.PRICE,
        ]
        assert registry.resolve_style(Region.CARDBODY, Slot.TEXT).column_class == "col-md-3 col-sm-12"
        assert registry.resolve_style(Region.CARDBODY, Slot.DAYOFWEEK).icon_before == "fa fa-clock-o"
        assert registry.resolve_style(Region.CARDBODY, Slot.PRICE).key_class == "d-md-none"
        assert registry.label(Region.CARDBODY, Slot.TEXT) == "Course name"

    def test_card_layout_headings(self):
        registry = card_columns()

        assert registry.resolve_style(Region.CARDBODY, Slot.TEXT).value_class == "h5"
        assert registry.resolve_style(Region.CARDBODY, Slot.SPORTS).value_class == "h6"
        assert registry.resolve_style(Region.CARDLIST, Slot.BOOKINGS).icon_before == "fa fa-users"
        assert registry.has_region(Region.OPTIONINVISIBLE)

    def test_my_card_layout_has_no_invisible_marker(self):
        registry = my_card_columns()

        assert not registry.has_region(Region.OPTIONINVISIBLE)
        assert registry.resolve_style(Region.CARDBODY, Slot.TEXT).value_class == "h5"


class TestAllCoursesList:
    def test_renders_default_instance(self, shortcodes):
        result = shortcodes.allcourseslist({})

        assert isinstance(result, ReportOk)
        assert result.report.template == ReportTemplate.LIST
        assert result.report.row_count == 3
        assert "Ethics" in result.body
        assert "Theo Teacher" in result.body

    def test_category_filter(self, shortcodes):
        result = shortcodes.allcourseslist({"category": "philosophy"})

        assert result.report.row_count == 2
        assert "Yoga Basics" not in result.body

    def test_perpage_caps_rows(self, shortcodes):
        assert shortcodes.allcourseslist({"perpage": "1"}).report.row_count == 1

    def test_second_identical_call_is_cache_hit(self, shortcodes, render_cache):
        first = shortcodes.allcourseslist({"category": "philosophy"})
        second = shortcodes.allcourseslist({"category": "philosophy"})

        assert render_cache.get_cache_stats()["hits"] == 1
        assert second.body.replace(second.report.table_identity, "x") == first.body.replace(
            first.report.table_identity, "x"
        )

    def test_cached_embeds_get_distinct_identities(self, shortcodes, render_cache):
        first = shortcodes.allcoursescards({"nolazy": "1"})
        second = shortcodes.allcoursescards({"nolazy": "1"})

        assert render_cache.get_cache_stats()["hits"] == 1
        assert first.report.table_identity != second.report.table_identity
        assert f'id="{first.report.table_identity}"' in first.body
        assert f'id="{second.report.table_identity}"' in second.body
        assert first.report.table_identity not in second.body
        assert IDENTITY_MARKER not in second.body

    def test_stored_markup_has_no_identity(self, shortcodes, fake_redis):
        result = shortcodes.allcourseslist({})

        stored = json.loads(fake_redis.get(fake_redis.keys("report_cache:*")[0]))
        assert stored["table_identity"] == IDENTITY_MARKER
        assert result.report.table_identity not in stored["markup"]

    def test_fixed_identity_from_cache(self, shortcodes):
        shortcodes.allcourseslist({"category": "philosophy"})

        result = shortcodes.allcourseslist({"category": "philosophy", "tableid": "fixedtable"})

        assert result.report.table_identity == "fixedtable"
        assert 'id="fixedtable"' in result.body

    def test_cache_scope(self, shortcodes, fake_redis):
        shortcodes.allcourseslist({})

        keys = fake_redis.keys("report_cache:*")
        assert len(keys) == 1
        assert keys[0].startswith(f"report_cache:{BOOKING_OPTIONS_SCOPE}:")

    def test_missing_default_instance(self, db_session, settings_without_default, renderer, render_cache):
        shortcodes = Shortcodes(db_session, settings_without_default, renderer, render_cache)

        result = shortcodes.allcourseslist({"category": "philosophy"})

        assert isinstance(result, UserError)
        assert result.body == "Set id of booking instance"

    def test_unknown_instance(self, shortcodes):
        assert shortcodes.allcourseslist({"id": "999"}).body == "Couldn't find right booking instance 999"

    def test_unknown_zero_padded_instance(self, shortcodes):
        assert shortcodes.allcourseslist({"id": "0777"}).body == "Couldn't find right booking instance 0777"

    def test_download_csv(self, shortcodes):
        result = shortcodes.allcourseslist({"download": "csv", "perpage": "1"})

        assert isinstance(result, ExportOk)
        assert result.media_type == "text/csv"
        rows = list(csv.reader(io.StringIO(result.body)))
        assert rows[0][0] == "Course name"
        # Downloads ignore the page size
        assert len(rows) == 4

    def test_download_json(self, shortcodes):
        result = shortcodes.allcourseslist({"download": "json", "category": "philosophy"})

        assert result.media_type == "application/json"
        assert [row["text"] for row in json.loads(result.body)["rows"]] == ["Ethics", "Logic"]


class TestAllCoursesCards:
    def test_renders_cards(self, shortcodes):
        result = shortcodes.allcoursescards({})

        assert result.report.template == ReportTemplate.CARDS
        assert "card-body" in result.body
        assert "shortcodes_option_info_invisible" in result.body
        assert "musi-invisible" in result.body

    def test_teacherid_selects_teacher_query(self, shortcodes):
        with patch("shortcodes.handlers.teacher_options_query", wraps=teacher_options_query) as teacher_query, patch(
            "shortcodes.handlers.all_options_query", wraps=all_options_query
        ) as all_query:
            result = shortcodes.allcoursescards({"id": str(SPORTS_CMID), "teacherid": str(TRAINER_ID)})

        teacher_query.assert_called_once()
        all_query.assert_not_called()
        assert result.report.row_count == 1
        assert "Climbing" in result.body
        assert "Skiing" not in result.body

    def test_lazy_renders_placeholder(self, shortcodes):
        result = shortcodes.allcoursescards({"lazy": "1", "category": "philosophy"})

        assert result.report.lazy is True
        assert result.report.table_identity == "allcoursescardsphilosophysummer"
        assert "musi-lazy" in result.body
        assert "Ethics" not in result.body

    def test_lazy_callback_fills_same_element(self, shortcodes):
        placeholder = shortcodes.allcoursescards({"lazy": "1", "category": "philosophy"})
        url = shortcodes.callback_url(
            "allcoursescards",
            shortcodes.resolver.resolve({"lazy": "1", "category": "philosophy"}),
            placeholder.report.table_identity,
        )

        parsed = urlparse(url)
        args = dict(parse_qsl(parsed.query))
        assert parsed.path == "/shortcodes/allcoursescards"
        assert args == {
            "category": "philosophy",
            "nolazy": "1",
            "tableid": placeholder.report.table_identity,
        }

        filled = shortcodes.allcoursescards(args)
        assert filled.report.lazy is False
        assert filled.report.table_identity == placeholder.report.table_identity
        assert "Ethics" in filled.body

    def test_nolazy_renders_directly(self, shortcodes):
        result = shortcodes.allcoursescards({"lazy": "1", "nolazy": "1"})

        assert result.report.lazy is False
        assert result.report.row_count == 3

    def test_lazy_identities_differ_per_page_view(self, shortcodes):
        first = shortcodes.allcoursescards({"lazy": "1"})
        second = shortcodes.allcoursescards({"lazy": "1"})

        assert first.report.table_identity != second.report.table_identity


class TestMyCoursesCards:
    def test_shows_viewers_bookings(self, shortcodes):
        result = shortcodes.mycoursescards({})

        assert result.report.template == ReportTemplate.RESPONSIVE_TABLE
        assert result.report.row_count == 1
        assert "Ethics" in result.body
        # Waiting list places are not bookings
        assert "Logic" not in result.body

    def test_never_cached(self, shortcodes, fake_redis, render_cache):
        shortcodes.mycoursescards({})
        shortcodes.mycoursescards({})

        assert fake_redis.keys("report_cache:*") == []
        assert render_cache.get_cache_stats()["hits"] == 0

    def test_always_eager(self, shortcodes):
        assert shortcodes.mycoursescards({"lazy": "1", "mode": "lazy"}).report.lazy is False

    def test_other_viewer(self, db_session, settings, renderer, render_cache):
        shortcodes = Shortcodes(db_session, settings, renderer, render_cache, Viewer(user_id=OUTSIDER_ID))

        assert shortcodes.mycoursescards({"id": str(SPORTS_CMID)}).report.row_count == 0

    def test_anonymous_viewer_has_no_bookings(self, db_session, settings, renderer, render_cache):
        shortcodes = Shortcodes(db_session, settings, renderer, render_cache)

        result = shortcodes.mycoursescards({})
        assert result.report.row_count == 0
        assert "No booking options found." in result.body


class TestDispatch:
    @pytest.mark.parametrize(
        "alias,name",
        [("allekurseliste", "allcourseslist"), ("allekursekarten", "allcoursescards"), ("meinekursekarten", "mycoursescards")],
    )
    def test_aliases(self, shortcodes, alias, name):
        assert shortcodes.handlers[alias] == shortcodes.handlers[name]

    def test_render_by_name(self, shortcodes):
        assert shortcodes.render("AllCoursesList", {}).report.template == ReportTemplate.LIST

    def test_unknown_shortcode(self, shortcodes):
        with pytest.raises(NotFoundError):
            shortcodes.render("nosuchshortcode", {})

    def test_names(self, shortcodes):
        assert "allcoursescards" in shortcodes.names()
        assert "meinekursekarten" in shortcodes.names()
