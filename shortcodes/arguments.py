"""
Shortcode argument resolution

Embeds pass free-form string arguments. They are normalized into a
ReportRequest here, or into a UserError whose message is shown where the
report would have appeared.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from booking.service import BookingInstance, BookingService
from core.logging import get_logger
from report_table.renderer import DEFAULT_PER_PAGE, DownloadFormat

logger = get_logger(__name__, domain="shortcodes")

SET_ID_MESSAGE = "Set id of booking instance"
UNKNOWN_INSTANCE_MESSAGE = "Couldn't find right booking instance "

IDENTITY_PATTERN = re.compile(r"^[a-z0-9]{1,64}$")


@dataclass(frozen=True)
class UserError:
    """Caller misconfiguration, rendered inline instead of a report"""

    message: str

    @property
    def body(self) -> str:
        return self.message


@dataclass(frozen=True)
class ReportRequest:
    """Normalized arguments of one embed"""

    booking_instance_id: int
    instance: BookingInstance
    category: Optional[str] = None
    per_page: int = DEFAULT_PER_PAGE
    teacher_id: Optional[int] = None
    lazy: bool = False
    download: DownloadFormat = DownloadFormat.NONE
    mode: str = "normal"
    table_identity: Optional[str] = None
    raw_args: Tuple[Tuple[str, str], ...] = ()

    @property
    def teacher_scoped(self) -> bool:
        return self.teacher_id is not None


def parse_int(value: Any) -> Optional[int]:
    """Integer value of an argument, or None when it is not a plain number"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _flag(value: Optional[str]) -> bool:
    return value is not None and str(value).strip() == "1"


class ShortcodeResolver:
    """Turns raw embed arguments into a ReportRequest or a UserError"""

    def __init__(
        self,
        booking_service: BookingService,
        default_instance_id: Optional[int] = None,
        default_per_page: int = DEFAULT_PER_PAGE,
    ):
        self.booking_service = booking_service
        self.default_instance_id = default_instance_id
        self.default_per_page = default_per_page

    def resolve(self, raw_args: Mapping[str, Any]) -> Union[ReportRequest, UserError]:
        args = {str(key).lower(): value for key, value in raw_args.items()}

        raw_id = args.get("id")
        if raw_id is None:
            raw_id = self.default_instance_id

        cmid = parse_int(raw_id)
        if cmid is None or cmid <= 0:
            logger.warning(f"Shortcode without usable booking instance id: {raw_id!r}")
            return UserError(SET_ID_MESSAGE)

        instance = self.booking_service.get_instance_by_cmid(cmid)
        if instance is None:
            logger.warning(f"Shortcode references unknown booking instance {raw_id!r}")
            # Echo the id as the embed wrote it
            return UserError(UNKNOWN_INSTANCE_MESSAGE + str(raw_id).strip())

        category = str(args.get("category") or "").strip() or None

        per_page = parse_int(args.get("perpage"))
        if per_page is None or per_page <= 0:
            per_page = self.default_per_page

        teacher_id = parse_int(args.get("teacherid"))
        if teacher_id is not None and teacher_id <= 0:
            teacher_id = None

        mode = str(args.get("mode") or "normal").strip().lower()
        lazy = (_flag(args.get("lazy")) or mode == "lazy") and not _flag(args.get("nolazy"))

        download = str(args.get("download") or DownloadFormat.NONE.value).strip().lower()
        try:
            download_format = DownloadFormat(download)
        except ValueError:
            logger.warning(f"Ignoring unsupported download format {download!r}")
            download_format = DownloadFormat.NONE

        table_identity = args.get("tableid")
        if table_identity is not None and not IDENTITY_PATTERN.match(str(table_identity)):
            table_identity = None

        return ReportRequest(
            booking_instance_id=cmid,
            instance=instance,
            category=category,
            per_page=per_page,
            teacher_id=teacher_id,
            lazy=lazy,
            download=download_format,
            mode=mode,
            table_identity=table_identity,
            raw_args=tuple(sorted((key, str(value)) for key, value in args.items())),
        )
