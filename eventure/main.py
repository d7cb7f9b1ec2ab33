from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from starlette.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy import text
from eventure.api import auth, bookings, drafts, payments, quotes, scooters
from eventure.core.config import settings
from eventure.core.errors import BookingError
from eventure.core.redis import init_redis, close_redis, redis_available, ping_redis
from eventure.core.metrics import request_count, request_duration, db_connected, redis_connected, get_metrics_text
from eventure.db.session import engine
from eventure.services.listing import listing_reconciler
import time
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

database_ready = False


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        
        try:
            response = await call_next(request)
            duration = time.time() - start_time
            
            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=response.status_code
            ).inc()
            
            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)
            
            return response
        except Exception:
            duration = time.time() - start_time
            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=500
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    global database_ready
    logger.info("Application starting...")
    
    logger.info("Initializing Redis connection...")
    try:
        await init_redis()
        redis_connected.set(1)
        logger.info("Redis connected")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        redis_connected.set(0)
    
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        db_connected.set(1)
        database_ready = True
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        db_connected.set(0)
        database_ready = False
    
    await listing_reconciler.start()
    
    yield
    
    logger.info("Application shutting down...")
    await listing_reconciler.stop()
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

app.include_router(auth.router)
app.include_router(scooters.router)
app.include_router(quotes.router)
app.include_router(drafts.router)
app.include_router(payments.router)
app.include_router(bookings.router)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
    )


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check():
    redis_healthy = redis_available()
    
    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "redis": "connected" if redis_healthy else "disconnected",
            "database": "connected" if database_ready else "disconnected"
        },
        "listing": {
            "scooters": len(listing_reconciler.scooters),
            "fetched_at": listing_reconciler.fetched_at,
        }
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check():
    if not await ping_redis():
        return JSONResponse(
            status_code=503,
            content={"ready": False, "reason": "Redis not available"}
        )
    
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
