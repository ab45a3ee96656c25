"""
Teacher profile page

Collects a teacher's profile data and one booking option table per
booking instance the teacher teaches in. The first table is rendered
eagerly, the others lazily.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from core.config import Settings
from core.logging import get_logger
from core.viewer import ANONYMOUS, UPDATE_BOOKING_CAPABILITY, Viewer
from database.models import User
from shortcodes.handlers import Shortcodes

logger = get_logger(__name__, domain="teacher_page")

TEACHER_NOT_FOUND = "teacher not found"
NOT_A_TEACHER = "not a teacher"

COMMON_COURSES_SQL = text(
    """
    SELECT e.courseid
    FROM user_enrolments ue
    LEFT JOIN enrol e ON e.id = ue.enrolid
    WHERE ue.status = 0 AND ue.userid = :currentuserid

    INTERSECT

    SELECT e.courseid
    FROM user_enrolments ue
    LEFT JOIN enrol e ON e.id = ue.enrolid
    WHERE ue.status = 0 AND ue.userid = :teacherid
    """
)


def teacher_messaging_is_possible(session: Session, teacher_id: int, viewer_id: Optional[int]) -> bool:
    """True when viewer and teacher share an active enrolment in some course"""
    if not viewer_id:
        return False
    row = session.execute(COMMON_COURSES_SQL, {"currentuserid": viewer_id, "teacherid": teacher_id}).first()
    return row is not None


class TeacherPage:
    """Data of one teacher's profile page"""

    def __init__(
        self,
        session: Session,
        teacher_id: int,
        viewer: Optional[Viewer],
        shortcodes: Shortcodes,
        settings: Settings,
    ):
        self.session = session
        self.teacher_id = teacher_id
        self.viewer = viewer or ANONYMOUS
        self.shortcodes = shortcodes
        self.settings = settings

        self.teacher: Optional[User] = None
        self.error = False
        self.errormessage: Optional[str] = None

        self.teacher = session.get(User, teacher_id)
        if self.teacher is None:
            self._fail(TEACHER_NOT_FOUND)
        elif teacher_id not in shortcodes.booking_service.teacher_ids():
            self._fail(NOT_A_TEACHER)

    def _fail(self, message: str) -> None:
        logger.warning(f"Teacher page {self.teacher_id}: {message}")
        self.error = True
        self.errormessage = message

    def export_for_template(self) -> Dict[str, Any]:
        if self.error:
            return {"error": True, "errormessage": self.errormessage}

        teacher = self.teacher
        data: Dict[str, Any] = {
            "teacher": {
                "teacherid": teacher.id,
                "firstname": teacher.firstname,
                "lastname": teacher.lastname,
                "description": teacher.description or "",
                "optiontables": self.option_tables(),
            }
        }

        if teacher.picture:
            data["image"] = f"{self.settings.base_url}/user/pix.php/{teacher.id}/f1.jpg"

        if teacher_messaging_is_possible(self.session, teacher.id, self.viewer.user_id):
            data["messagingispossible"] = True

        if self.viewer.has_capability(UPDATE_BOOKING_CAPABILITY):
            data["linktoperformedunitsreport"] = (
                f"{self.settings.base_url}/mod/booking/teacher_performed_units_report.php?teacherid={teacher.id}"
            )

        data["wwwroot"] = self.settings.base_url
        return data

    def option_tables(self) -> List[Dict[str, Any]]:
        """One card table per booking instance, only the first loaded eagerly"""
        booking_service = self.shortcodes.booking_service
        identity_source = self.shortcodes.renderer.identity_source
        tables = []
        first = True
        for bookingid in booking_service.booking_ids_for_teacher(self.teacher_id):
            instance = booking_service.get_instance_by_bookingid(bookingid)
            if instance is None:
                continue

            args = {"id": str(instance.cmid), "teacherid": str(self.teacher_id)}
            if not first:
                args["lazy"] = "1"
            result = self.shortcodes.render("allekursekarten", args)

            tables.append(
                {
                    "bookingid": bookingid,
                    "bookinginstancename": instance.name,
                    "tablename": identity_source.derived_identity(instance.name),
                    "table": result.body,
                    "class": "active show" if first else "",
                }
            )
            first = False
        return tables
