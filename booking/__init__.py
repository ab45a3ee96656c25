"""Read-only access to the booking plugin: instances, teachers and option queries"""

from .queries import all_options_query, my_options_query, option_fields, teacher_options_query
from .service import BookingInstance, BookingService

__all__ = [
    "BookingInstance",
    "BookingService",
    "all_options_query",
    "teacher_options_query",
    "my_options_query",
    "option_fields",
]
