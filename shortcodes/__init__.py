"""Shortcodes that embed booking option tables into pages"""

from .arguments import ReportRequest, ShortcodeResolver, UserError
from .handlers import ExportOk, ReportOk, ShortcodeResult, Shortcodes, card_columns, list_columns, my_card_columns

__all__ = [
    "ReportRequest",
    "ShortcodeResolver",
    "UserError",
    "ReportOk",
    "ExportOk",
    "ShortcodeResult",
    "Shortcodes",
    "list_columns",
    "card_columns",
    "my_card_columns",
]
