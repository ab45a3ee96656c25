"""
Query descriptors for booking options

All three constructors produce the same row shape, so one column registry
works for any of them. Callers pick the teacher-scoped query when a
teacher id is given and the category-scoped one otherwise.
"""

from typing import Optional, Tuple

from report_table.query import QueryDescriptor, build_query

from .service import BookingInstance

OPTION_SOURCE = "booking_options bo"
OPTION_ORDER = "ORDER BY bo.text, bo.id"


def _teacher_names(dialect: str) -> str:
    name = "u.firstname || ' ' || u.lastname"
    if dialect == "sqlite":
        aggregate = f"group_concat({name}, ', ')"
    else:
        aggregate = f"string_agg({name}, ', ')"
    return (
        f"(SELECT {aggregate} FROM booking_teachers bt "
        "JOIN users u ON u.id = bt.userid "
        "WHERE bt.optionid = bo.id) AS teacher"
    )


def option_fields(dialect: str = "sqlite") -> Tuple[str, ...]:
    return (
        "bo.id",
        "bo.bookingid",
        "bo.text",
        "bo.description",
        "bo.location",
        "bo.sport AS sports",
        "bo.category",
        "bo.dayofweektime",
        "bo.coursestarttime",
        "bo.courseendtime",
        "bo.maxanswers",
        "bo.maxoverbooking",
        "bo.price",
        "bo.currency",
        "bo.imageurl AS image",
        "bo.invisible",
        "(SELECT COUNT(*) FROM booking_answers ba WHERE ba.optionid = bo.id AND ba.waitinglist = 0) AS booked",
        _teacher_names(dialect),
    )


def all_options_query(
    instance: BookingInstance, category: Optional[str] = None, dialect: str = "sqlite"
) -> QueryDescriptor:
    """Every option of a booking instance, optionally only one category"""
    where = "bo.bookingid = :bookingid"
    params = {"bookingid": instance.id}
    if category:
        where += " AND bo.category = :category"
        params["category"] = category

    return build_query(option_fields(dialect), OPTION_SOURCE, f"{where} {OPTION_ORDER}", params)


def teacher_options_query(instance: BookingInstance, teacher_id: int, dialect: str = "sqlite") -> QueryDescriptor:
    """Options of a booking instance taught by one teacher"""
    where = (
        "bo.bookingid = :bookingid AND EXISTS ("
        "SELECT 1 FROM booking_teachers tt WHERE tt.optionid = bo.id AND tt.userid = :teacherid)"
    )
    return build_query(
        option_fields(dialect),
        OPTION_SOURCE,
        f"{where} {OPTION_ORDER}",
        {"bookingid": instance.id, "teacherid": teacher_id},
    )


def my_options_query(
    instance: BookingInstance, user_id: int, category: Optional[str] = None, dialect: str = "sqlite"
) -> QueryDescriptor:
    """Options of a booking instance the user holds a confirmed place in"""
    where = (
        "bo.bookingid = :bookingid AND EXISTS ("
        "SELECT 1 FROM booking_answers ma WHERE ma.optionid = bo.id "
        "AND ma.userid = :userid AND ma.waitinglist = 0)"
    )
    params = {"bookingid": instance.id, "userid": user_id}
    if category:
        where += " AND bo.category = :category"
        params["category"] = category

    return build_query(option_fields(dialect), OPTION_SOURCE, f"{where} {OPTION_ORDER}", params)
