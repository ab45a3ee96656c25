"""
FastAPI endpoints of the teacher profile page
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from api.dependencies import get_db, get_shortcodes, get_template_engine, get_viewer
from core.config import Settings, get_settings
from core.viewer import Viewer
from report_table.template_engine import TemplateEngine
from shortcodes.handlers import Shortcodes

from .page import TeacherPage

router = APIRouter()


def get_teacher_page(
    teacher_id: int,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
    shortcodes: Shortcodes = Depends(get_shortcodes),
    settings: Settings = Depends(get_settings),
) -> TeacherPage:
    return TeacherPage(db, teacher_id, viewer, shortcodes, settings)


@router.get("/{teacher_id}", response_class=HTMLResponse)
def teacher_page(
    page: TeacherPage = Depends(get_teacher_page),
    engine: TemplateEngine = Depends(get_template_engine),
) -> HTMLResponse:
    """Rendered profile page; unknown ids and non-teachers show an inline error"""
    return HTMLResponse(engine.render_template("teacher_page", page.export_for_template()))


@router.get("/{teacher_id}/data")
def teacher_page_data(page: TeacherPage = Depends(get_teacher_page)) -> Dict[str, Any]:
    """Template context of the profile page as JSON"""
    return page.export_for_template()
