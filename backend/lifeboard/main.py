import logging
import traceback
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

from lifeboard import models  # noqa: F401  registers tables on Base.metadata
from lifeboard.config import settings
from lifeboard.db import Base, async_session, engine
from lifeboard.routers import auth, dashboard, ideas, subscriptions
from lifeboard.services.rates import build_rate_provider
from lifeboard.services.scheduler import roll_renewal_dates, warm_rate_cache

scheduler = AsyncIOScheduler()


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def run_scheduled_tasks() -> None:
    async with async_session() as db:
        await roll_renewal_dates(db)
        await warm_rate_cache(db, app.state.rate_provider)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    app.state.rate_provider = build_rate_provider()

    if settings.SCHEDULER_ENABLED:
        scheduler.add_job(run_scheduled_tasks, "cron", hour=0, minute=5, id="daily", replace_existing=True)
        scheduler.start()

    yield

    if scheduler.running:
        scheduler.shutdown()
    await engine.dispose()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(ideas.router, prefix="/api/v1")
app.include_router(subscriptions.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {exc}\n{traceback.format_exc()}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.get("/health")
async def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


@app.get("/api/v1/setup")
async def setup_database():
    try:
        await create_tables()
    except SQLAlchemyError as exc:
        logger.error(f"Database setup failed: {exc}")
        return JSONResponse(status_code=500, content={"status": "error", "message": str(exc)})
    return {"status": "success", "message": "Database tables created successfully"}
