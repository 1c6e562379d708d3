import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from carewatch.config import settings
from carewatch.core.logging import configure_logging

# Configure logging BEFORE any app imports
configure_logging(settings.LOG_LEVEL)

from carewatch.database import SessionLocal
from carewatch.routers import alert_engine
from carewatch.services.alert_engine import DEFAULT_RULE_SET, AlertEvaluationCronJob, validate_rule_set

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate rules on startup and optionally run the periodic evaluation job"""
    validate_rule_set(DEFAULT_RULE_SET)
    logger.info(f"Loaded {len(DEFAULT_RULE_SET.all_rules())} clinical rules")

    cron_job = None
    cron_task = None
    if settings.ALERT_EVALUATION_ENABLED:
        cron_job = AlertEvaluationCronJob(SessionLocal)
        cron_task = asyncio.create_task(cron_job.start())
        logger.info("Alert evaluation cron started")

    yield

    if cron_job:
        await cron_job.stop()
        cron_task.cancel()
        try:
            await cron_task
        except asyncio.CancelledError:
            pass
        logger.info("Alert evaluation cron stopped")


app = FastAPI(
    title="CareWatch - Clinical Rule Evaluation",
    description="Remote patient monitoring alert engine: threshold, trend and composite clinical rules",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(alert_engine.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}
