"""Teacher profile page"""

from .page import NOT_A_TEACHER, TEACHER_NOT_FOUND, TeacherPage, teacher_messaging_is_possible

__all__ = ["TeacherPage", "teacher_messaging_is_possible", "TEACHER_NOT_FOUND", "NOT_A_TEACHER"]
