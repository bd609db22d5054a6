# permit_admin/main.py
"""
FastAPI application entry point.
Includes security middleware, domain error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware
from permit_admin.routers import health, lots, permits, scan, users
from permit_admin.database import create_tables
from permit_admin.config import settings
from permit_admin.errors import (
    ForbiddenError, InvalidDateError, LotInUseError, NotFoundError,
    PermitValidationError, UniqueConstraintViolation,
)
from permit_admin.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Parking Permit Admin API",
    description="Permits, lots, staff access and QR scan lookup.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (staff dashboard runs on a separate origin) ────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional shared API key in front of every endpoint except health and docs.
    Set API_KEY in .env. Leave empty to disable.
    """
    open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Domain Error Handlers ────────────────────────────────────────────────────
def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(ForbiddenError)
async def forbidden_handler(request: Request, exc: ForbiddenError):
    return _error(status.HTTP_403_FORBIDDEN, exc)


@app.exception_handler(UniqueConstraintViolation)
async def conflict_handler(request: Request, exc: UniqueConstraintViolation):
    return _error(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(LotInUseError)
async def lot_in_use_handler(request: Request, exc: LotInUseError):
    return _error(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(PermitValidationError)
@app.exception_handler(InvalidDateError)
async def invalid_input_handler(request: Request, exc: Exception):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(ValidationError)
async def model_validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors(include_url=False, include_context=False, include_input=False)},
    )


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(permits.router, prefix="/api/v1", tags=["Permits"])
app.include_router(lots.router,    prefix="/api/v1", tags=["Lots"])
app.include_router(users.router,   prefix="/api/v1", tags=["Users"])
app.include_router(scan.router,    prefix="/api/v1", tags=["QR Scan"])
app.include_router(health.router,  prefix="/api/v1", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Permit Admin backend starting up...")
    create_tables()
    logger.info("Database tables ready")
    logger.info(f"QR deep links: {settings.QR_BASE_URL}/permit/<id>")
    logger.info(f"Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT} (docs at /docs)")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Permit Admin backend shutting down...")
