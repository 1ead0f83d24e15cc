# fuelguard/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers, all routers and the QR expiry sweep.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from fuelguard.routers import health, users, vehicles, households, rules, blacklist, stations, verification, gas
from fuelguard.database import create_tables
from fuelguard.config import settings
from fuelguard.errors import DomainError
from fuelguard.services.qr_service import get_qr_service
from fuelguard.services.qr_sweeper import run_qr_sweeper
from fuelguard.utils.logger import get_logger
import time
import asyncio

logger = get_logger(__name__)

app = FastAPI(
    title="FuelGuard Quota API",
    description="Fuel and gas bottle quota control — daily QR codes, station verification, transaction log.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (citizen app + station dashboards) ─────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to known front-ends in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Set API_KEY in .env. Leave empty to disable auth.
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


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.info(f"{request.method} {request.url.path} rejected [{exc.code}]: {exc.message}")
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": exc.message, "code": exc.code, **(exc.details or {})},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(health.router,       prefix="/api/v1", tags=["💚 Health"])
app.include_router(users.router,        prefix="/api/v1", tags=["👤 Users"])
app.include_router(vehicles.router,     prefix="/api/v1", tags=["🚗 Vehicles"])
app.include_router(households.router,   prefix="/api/v1", tags=["🏠 Households"])
app.include_router(rules.router,        prefix="/api/v1", tags=["📏 Quota Rules"])
app.include_router(blacklist.router,    prefix="/api/v1", tags=["⛔ Blacklist"])
app.include_router(stations.router,     prefix="/api/v1", tags=["⛽ Stations"])
app.include_router(verification.router, prefix="/api/v1", tags=["🔍 Fuel Verification"])
app.include_router(gas.router,          prefix="/api/v1", tags=["🔥 Gas Bottles"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 FuelGuard Backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"🔐 Custom vehicle limits: {'on' if settings.APPLY_CUSTOM_VEHICLE_LIMITS else 'off'}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")

    if settings.QR_SWEEP_INTERVAL_SECONDS > 0:
        asyncio.create_task(run_qr_sweeper(get_qr_service(), settings.QR_SWEEP_INTERVAL_SECONDS))


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 FuelGuard Backend shutting down...")
