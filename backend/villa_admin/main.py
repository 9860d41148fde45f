import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.responses import JSONResponse

from villa_admin.core.config import settings
from villa_admin.core.logging import setup_logging
from villa_admin.database import session as db_session
from villa_admin.routers.api import booking as public_booking
from villa_admin.routers.web import (
    admin_dashboard,
    auth,
    booking,
    inventory,
    occupancy,
    package,
    reports,
    safari_option,
    safari_query,
    villa,
)
from villa_admin.services.admin_service import refresh_dashboard_cache
from villa_admin.services.seed_service import ensure_seed_data
from villa_admin.utils.cache import CacheLifecycle, TTLCache
from villa_admin.utils.errors import ServiceError

logger = logging.getLogger("villa_admin")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)

    if db_session.engine is not None:
        db_session.init_db()
        if settings.SEED_ON_STARTUP:
            db = db_session.SessionLocal()
            try:
                logger.info("Startup seed: %s", ensure_seed_data(db))
            finally:
                db.close()

    lifecycle = CacheLifecycle(
        TTLCache(settings.CACHE_MAX_SIZE, settings.CACHE_DEFAULT_TTL),
        sweep_seconds=settings.CACHE_SWEEP_SECONDS,
        poll_seconds=settings.DASHBOARD_POLL_SECONDS,
    )
    if db_session.engine is not None:
        lifecycle.add_refresher(refresh_dashboard_cache(db_session.SessionLocal))

    app.state.cache_lifecycle = lifecycle
    await lifecycle.start()
    try:
        yield
    finally:
        await lifecycle.stop()


app = FastAPI(title="Village Machaan Admin", lifespan=lifespan)

app.include_router(auth.router)
app.include_router(admin_dashboard.router)
app.include_router(villa.router)
app.include_router(package.router)
app.include_router(booking.router)
app.include_router(safari_query.router)
app.include_router(safari_option.router)
app.include_router(inventory.router)
app.include_router(occupancy.router)
app.include_router(reports.router)
app.include_router(public_booking.router)


@app.get("/health", name="health")
def health():
    return {
        "status": "ok",
        "database": "configured" if db_session.engine is not None else "demo",
    }


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(FastAPIHTTPException)
async def auth_exception_handler(request: Request, exc: FastAPIHTTPException):
    if exc.status_code == 401:
        response = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "error": "Please login to continue", "code": "UNAUTHORIZED"},
        )
        response.delete_cookie("access_token", path="/")
        return response
    elif exc.status_code == 403:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={
                "success": False,
                "error": "You do not have permission to access this page",
                "code": "FORBIDDEN",
            },
        )

    # Let FastAPI handle other errors
    return await http_exception_handler(request, exc)
