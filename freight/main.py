import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from freight.api import announcements, auth, checklist, counter_offers, matches, notifications, payments, quotes, trucks
from freight.core.config import settings
from freight.core.errors import STATUS_BY_KIND, ErrorKind, FreightError
from freight.core.metrics import db_connected, get_metrics_text, redis_connected, request_count, request_duration
from freight.core.redis import close_redis, get_redis, init_redis
from freight.db.session import engine
from freight.pricing.rate_table import get_rate_table

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)
            request_count.labels(
                method=request.method,
                endpoint=endpoint,
                status=status
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - start_time)


async def _check_database() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        db_connected.set(1)
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        db_connected.set(0)
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")

    # a broken rate table is fatal
    table = get_rate_table()
    logger.info(f"Rate table ready ({len(table.ranges)} ranges)")

    logger.info("Initializing Redis connection...")
    try:
        await init_redis()
        redis_connected.set(1)
    except Exception as e:
        logger.warning(f"Redis unavailable, continuing without cache: {e}")
        redis_connected.set(0)

    if await _check_database():
        logger.info("Database connected")

    yield

    logger.info("Application shutting down...")
    await close_redis()
    redis_connected.set(0)
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)


@app.exception_handler(FreightError)
async def freight_error_handler(request: Request, exc: FreightError):
    if exc.kind == ErrorKind.INTERNAL:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


KIND_BY_STATUS = {status: kind for kind, status in STATUS_BY_KIND.items()}


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    kind = KIND_BY_STATUS.get(exc.status_code, ErrorKind.INTERNAL if exc.status_code >= 500 else ErrorKind.INVALID_INPUT)
    content = FreightError(kind, str(exc.detail)).to_dict()
    content["status"] = exc.status_code
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else "Invalid request."
    return JSONResponse(status_code=400, content=FreightError(ErrorKind.INVALID_INPUT, message).to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content=FreightError(ErrorKind.INTERNAL).to_dict())


app.include_router(auth.router)
app.include_router(quotes.router)
app.include_router(matches.shipper_router)
app.include_router(matches.driver_router)
app.include_router(counter_offers.driver_router)
app.include_router(counter_offers.shipper_router)
app.include_router(notifications.router)
app.include_router(payments.router)
app.include_router(checklist.router)
app.include_router(announcements.router)
app.include_router(announcements.admin_router)
app.include_router(trucks.router)


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check():
    redis = get_redis()
    database_ok = await _check_database()

    return {
        "status": "healthy" if database_ok else "degraded",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "redis": "connected" if redis is not None else "disconnected",
            "database": "connected" if database_ok else "disconnected"
        }
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check():
    if not await _check_database():
        return JSONResponse(status_code=503, content={"ready": False, "reason": "Database not available"})

    return {
        "ready": True,
        "service": settings.API_TITLE
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
