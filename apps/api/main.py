"""
Ride Dashboard API application.

Serves /v1/rides plus /health and /ping. Run directly for a uvicorn dev server.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routers import rides
from core.config import settings
from core.database import check_db_connection
from core.logging import request_fields, setup_logging
from core.exceptions import APIException
from datetime import datetime, timezone
import logging
import time

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Ride Dashboard API",
    description="Cycling ride records with filtering and dashboard metrics",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)


def cors_origins() -> list:
    """Any origin in DEBUG, else CORS_ORIGINS, else the local dashboard dev servers."""
    if settings.DEBUG:
        return ["*"]
    if settings.CORS_ORIGINS:
        return [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
    return [f"http://{host}:{port}" for host in ("localhost", "127.0.0.1") for port in (3000, 5173)]


app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """One log line per request, tagged with the ride or rider it touched."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    response.headers["X-Process-Time"] = f"{elapsed:.6f}"
    logger.log(
        logging.WARNING if response.status_code >= 500 else logging.INFO,
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={
            "extra_fields": request_fields(
                request,
                status_code=response.status_code,
                duration_ms=round(elapsed * 1000, 2),
            )
        },
    )
    return response


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Render ride errors as {"detail", "error_code"}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
        extra={"extra_fields": request_fields(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error_code": "INTERNAL_ERROR"},
    )


@app.get("/health")
async def health():
    """Ride storage reachability. 503 while the database is down."""
    if not check_db_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "degraded", "ride_storage": "down"},
        )
    return {
        "status": "ok",
        "ride_storage": "up",
        "checked_at": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/ping")
async def ping():
    """Liveness only; touches nothing."""
    return {"pong": True}


app.include_router(rides.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
    )
