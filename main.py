"""Main entry point for the restaurant onboarding service.

Startup sequence:
1. Initialize DI container (Redis, S3, optional caption/e-mail clients)
2. Inject handlers into routers
3. Start scheduled background jobs (orphan upload cleanup, idle session sweep)
4. Serve HTTP with FastAPI
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from onboarding.config import Settings
from onboarding.container import Container
from onboarding.routers import (
    wizard_router,
    set_wizard_handler,
    admin_router,
    set_submission_handler,
    tools_router,
    set_tools_handler,
)
from onboarding.middleware import PrometheusMiddleware
from onboarding.metrics import (
    BACKGROUND_JOB_RUNS_TOTAL,
    BACKGROUND_JOB_DURATION_SECONDS,
    BACKGROUND_JOB_LAST_RUN_TIMESTAMP,
)

# Configure logging
settings = Settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global container and scheduler
container: Container = None
scheduler: AsyncIOScheduler = None


def _record_job(job_name: str, start_time: float, status: str):
    BACKGROUND_JOB_DURATION_SECONDS.labels(job_name=job_name).observe(time.perf_counter() - start_time)
    BACKGROUND_JOB_RUNS_TOTAL.labels(job_name=job_name, status=status).inc()
    if status == "success":
        BACKGROUND_JOB_LAST_RUN_TIMESTAMP.labels(job_name=job_name).set_to_current_time()


async def run_orphan_cleanup_job():
    """Background job: delete uploads left behind by failed submissions."""
    job_name = "orphan_upload_cleanup"
    start_time = time.perf_counter()
    try:
        deleted = await container.orphan_cleanup_service.cleanup()
        _record_job(job_name, start_time, "success")
        logger.info(f"[Scheduler] OrphanUploadCleanupJob completed ({deleted} deleted)")
    except Exception as e:
        _record_job(job_name, start_time, "error")
        logger.error(f"[Scheduler] OrphanUploadCleanupJob failed: {e}")


async def run_session_sweep_job():
    """Background job: forget wizard sessions idle past their TTL."""
    job_name = "wizard_session_sweep"
    start_time = time.perf_counter()
    try:
        container.wizard_registry.sweep_expired()
        _record_job(job_name, start_time, "success")
    except Exception as e:
        _record_job(job_name, start_time, "error")
        logger.error(f"[Scheduler] WizardSessionSweepJob failed: {e}")


def start_background_jobs(settings: Settings):
    """Start all background jobs using APScheduler."""
    global scheduler
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        run_orphan_cleanup_job,
        trigger=IntervalTrigger(minutes=settings.upload_cleanup_minutes),
        id="orphan_upload_cleanup",
        name="Orphan Upload Cleanup",
        replace_existing=True,
    )
    logger.info(f"[Scheduler] Scheduled orphan upload cleanup every {settings.upload_cleanup_minutes} minutes")

    scheduler.add_job(
        run_session_sweep_job,
        trigger=IntervalTrigger(minutes=settings.wizard_session_ttl_minutes),
        id="wizard_session_sweep",
        name="Wizard Session Sweep",
        replace_existing=True,
    )
    logger.info(f"[Scheduler] Scheduled wizard session sweep every {settings.wizard_session_ttl_minutes} minutes")

    scheduler.start()
    logger.info("[Scheduler] Background jobs started")


async def startup_sequence(settings: Settings):
    """Build the container, inject handlers and start jobs."""
    global container

    logger.info("[Main] Starting startup sequence")
    container = Container(settings)

    # Routes are registered at app creation; handlers arrive now
    set_wizard_handler(container.wizard_handler)
    set_submission_handler(container.submission_handler)
    set_tools_handler(container.tools_handler)
    logger.info("[Main] Handlers injected successfully")

    start_background_jobs(settings)
    logger.info("[Main] Startup sequence completed")


async def shutdown_sequence():
    """Clean up resources on shutdown."""
    global container, scheduler

    logger.info("[Main] Starting shutdown sequence")

    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("[Main] Scheduler stopped")

    if container:
        await container.shutdown()

    logger.info("[Main] Shutdown sequence completed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown."""
    await startup_sequence(settings)
    yield
    await shutdown_sequence()


app = FastAPI(
    title="Restaurant Onboarding API",
    description="Restaurant intake wizard, submission admin and photo tools",
    version="1.0.0",
    lifespan=lifespan,
)

# Add Prometheus metrics middleware
app.add_middleware(PrometheusMiddleware)

# Register routers at app creation time (before uvicorn starts)
app.include_router(wizard_router)
app.include_router(admin_router)
app.include_router(tools_router)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/ping")
def ping() -> dict[str, str]:
    """Liveness check endpoint."""
    return {"status": "pong"}


# Prometheus metrics endpoint
@app.get("/metrics", response_class=PlainTextResponse)
def metrics():
    """Prometheus metrics endpoint for scraping."""
    return PlainTextResponse(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


if __name__ == "__main__":
    import uvicorn

    logger.info("[Main] Starting onboarding service")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
