"""
Agenda Gateway — booking platform dashboard backend

Entry point for the FastAPI backend. Sits between the dashboard and the
booking API: forwards calls with the caller's session and tenant, and
derives the views the dashboard shows (membership status, reservation
groups, analytics, cashbox).

URL scheme:
  /api/hub/*                   Platform (login, tenant, organization)
  /api/hub/billing/*           Plans, membership status, payment activation
  /api/reservations/*          Reservation approval table
  /api/analytics/*             Business report and cashbox
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from core.errors import ApiError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def _register_core_routes(app: FastAPI):
    """Register platform-level routes (hub, billing)."""
    from core.hub.router import router as hub_router
    from core.hub.billing import router as billing_router

    app.include_router(hub_router, prefix="/api/hub", tags=["Platform — Hub"])
    app.include_router(billing_router, prefix="/api/hub/billing", tags=["Platform — Billing"])
    logger.info("[Router] Platform hub: /api/hub/*")


def _register_feature_routes(app: FastAPI):
    """Register dashboard feature routes (reservations, analytics)."""
    from api.reservations import router as reservations_router
    from api.analytics import router as analytics_router

    app.include_router(reservations_router, prefix="/api/reservations", tags=["Reservations"])
    app.include_router(analytics_router, prefix="/api/analytics", tags=["Analytics"])
    logger.info("[Router] Features: /api/reservations/*, /api/analytics/*")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"[Startup] Booking API at {settings.api_base_url}")
    yield
    logger.info("[Shutdown] Gateway stopped")


# Create app
app = FastAPI(
    title="Agenda Gateway API",
    description="Dashboard backend for the multi-tenant booking platform",
    version="1.0.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    """Booking API failures reach the client as {detail} with the upstream status (502 if none)."""
    logger.error(f"[API] {request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code or 502, content={"detail": exc.message})


# ─────────────────────────────────────────────────────────────────────────────
# ROUTE REGISTRATION
# ─────────────────────────────────────────────────────────────────────────────

_register_core_routes(app)
_register_feature_routes(app)


# ─────────────────────────────────────────────────────────────────────────────
# HEALTH CHECK & ROOT
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "debug": settings.debug}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Agenda Gateway",
        "version": "1.0.0",
        "docs": "/docs",
        "routes": {
            "hub": "/api/hub",
            "billing": "/api/hub/billing",
            "reservations": "/api/reservations",
            "analytics": "/api/analytics",
        }
    }
