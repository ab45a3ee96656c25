"""
FastAPI endpoint rendering shortcodes from query arguments
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from api.dependencies import get_shortcodes
from core.logging import get_logger

from .handlers import ExportOk, Shortcodes, UserError

logger = get_logger(__name__, domain="shortcodes")

router = APIRouter()


@router.get("/{name}")
def render_shortcode(name: str, request: Request, shortcodes: Shortcodes = Depends(get_shortcodes)) -> Response:
    """
    Render one embed

    Misconfigured embeds answer 200 with the message as body, so the
    embedding page keeps its layout. Unknown shortcodes are 404.
    """
    result = shortcodes.render(name, dict(request.query_params))

    if isinstance(result, ExportOk):
        filename = f"{result.export.filename}.{result.format.value}"
        return Response(
            content=result.body,
            media_type=result.media_type,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    if isinstance(result, UserError):
        logger.info(f"Answered with user error: {result.message}", extra={"shortcode": name})

    return HTMLResponse(content=result.body)
