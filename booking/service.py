"""
Lookup of booking instances and teacher assignments

Read-only access to the booking plugin's tables. Instances are memoized
per service, and a service lives for one request.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sqlalchemy import distinct, select
from sqlalchemy.orm import Session

from core.logging import get_logger
from database.models import BookingInstance as BookingInstanceModel
from database.models import BookingTeacher

logger = get_logger(__name__, domain="booking")


@dataclass(frozen=True)
class BookingInstance:
    """A booking activity, addressed either by its id or its course module id"""

    id: int
    cmid: int
    course: int
    name: str


class BookingService:
    """Request-scoped access to booking instances"""

    def __init__(self, session: Session):
        self.session = session
        self._instances: Dict[Tuple[str, int], Optional[BookingInstance]] = {}

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name

    def get_instance_by_cmid(self, cmid: int) -> Optional[BookingInstance]:
        """Booking instance of a course module, or None when there is none"""
        return self._get_instance("cmid", cmid)

    def get_instance_by_bookingid(self, bookingid: int) -> Optional[BookingInstance]:
        return self._get_instance("id", bookingid)

    def _get_instance(self, column: str, value: int) -> Optional[BookingInstance]:
        key = (column, value)
        if key not in self._instances:
            model = self.session.execute(
                select(BookingInstanceModel).where(getattr(BookingInstanceModel, column) == value)
            ).scalar_one_or_none()

            instance = None
            if model is not None:
                instance = BookingInstance(id=model.id, cmid=model.cmid, course=model.course, name=model.name)
            else:
                logger.debug(f"No booking instance with {column}={value}")
            self._instances[key] = instance
        return self._instances[key]

    def teacher_ids(self) -> List[int]:
        """Every user assigned as teacher to at least one option"""
        return list(self.session.execute(select(distinct(BookingTeacher.userid))).scalars())

    def booking_ids_for_teacher(self, teacher_id: int) -> List[int]:
        """Booking instances the teacher teaches in, in ascending id order"""
        return list(
            self.session.execute(
                select(distinct(BookingTeacher.bookingid))
                .where(BookingTeacher.userid == teacher_id)
                .order_by(BookingTeacher.bookingid)
            ).scalars()
        )
