"""
Main FastAPI application entry point
"""
import time

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.exceptions import DashboardError
from core.logging import get_logger
from core.metrics import get_metrics_response, metrics

logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Embeds are fetched from pages of the host application
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [settings.base_url],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# Request tracking middleware
@app.middleware("http")
async def track_requests(request: Request, call_next):
    """Track all HTTP requests for metrics"""
    start_time = time.time()

    # Skip metrics endpoint to avoid recursion
    if request.url.path == "/metrics":
        return await call_next(request)

    response = await call_next(request)

    # Route template rather than raw path keeps label cardinality bounded
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    metrics.track_request(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code,
        duration=time.time() - start_time,
    )

    return response


# Exception handlers
@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    """Handle custom dashboard errors"""
    logger.error(f"Dashboard error - error_code: {exc.error_code}, details: {exc.details}, path: {request.url.path}")
    metrics.track_error(exc.error_code, "api")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error - path: {request.url.path}", exc_info=exc)
    metrics.track_error(type(exc).__name__, "api")
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"},
    )


@app.get("/metrics", include_in_schema=False)
async def prometheus_metrics():
    """Expose metrics for Prometheus scraping"""
    if not settings.prometheus_enabled:
        return JSONResponse(status_code=404, content={"error": "Metrics not enabled"})

    metrics_data, content_type = get_metrics_response()
    return Response(content=metrics_data, media_type=content_type)


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info(
        f"Starting {settings.app_name} version={settings.app_version} environment={settings.environment} "
        f"default_instance={settings.shortcodes_default_instance}"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    from api.dependencies import close_redis

    close_redis()
    logger.info(f"Shutting down {settings.app_name}")


# Import and register routers
from api.health import router as health_router  # noqa: E402
from shortcodes.api import router as shortcodes_router  # noqa: E402
from teacher_page.api import router as teacher_page_router  # noqa: E402

# Register health router (no prefix needed as it defines its own paths)
app.include_router(health_router, tags=["health"])

app.include_router(shortcodes_router, prefix="/shortcodes", tags=["shortcodes"])
app.include_router(teacher_page_router, prefix="/teacher", tags=["teacher_page"])


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
