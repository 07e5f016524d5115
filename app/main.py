import asyncio
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.api.routes import (
    admin as admin_router,
    contact as contact_router,
    events as events_router,
    health as health_router,
    users as users_router,
)
from app.cache.redis_client import cache
from app.core.config import settings
from app.core.errors import AppError
from app.core.logging import logger
from app.core.rate_limit import limiter
from app.db.session import engine, Base
from app.events.consumer import run_worker
from app.events.publisher import close_connection

# Register every model with Base.metadata
from app.db import models  # noqa: F401

app = FastAPI(title="FestivalHub")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

app.include_router(events_router.router)
app.include_router(users_router.router)
app.include_router(contact_router.router)
app.include_router(admin_router.router)
app.include_router(health_router.router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request body for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Internal server error"})


_worker_task = None


@app.on_event("startup")
async def on_startup():
    global _worker_task
    # create tables (simple approach; schema is small and additive)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    # The worker can also run on its own: python -m app.events.consumer
    if settings.START_NOTIFICATION_WORKER:
        _worker_task = asyncio.create_task(run_worker())
    logger.info(f"{settings.FESTIVAL_NAME} API started ({settings.ENVIRONMENT})")


@app.on_event("shutdown")
async def on_shutdown():
    if _worker_task:
        _worker_task.cancel()
    await close_connection()
    cache.close()
    await engine.dispose()
