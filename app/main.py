from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from app.automation.scheduler import DueDateScheduler
from app.config import settings
from app.db import SessionLocal
from app.logging_config import configure_logging
from app.redis_client import redis_client
from app.routes.auth import router as auth_router
from app.routes.automations import router as automations_router
from app.routes.health import router as health_router
from app.routes.notifications import router as notifications_router
from app.routes.projects import router as projects_router
from app.routes.tasks import router as tasks_router

log = structlog.get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if settings.scheduler_enabled:
        scheduler = DueDateScheduler(SessionLocal, redis_client)
        scheduler.start()
    app.state.scheduler = scheduler
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.stop()

def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="taskboard-pro", version="0.1.0", lifespan=lifespan)
    app.state.scheduler = None
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(projects_router)
    app.include_router(tasks_router)
    app.include_router(automations_router)
    app.include_router(notifications_router)
    log.info("app_created", env=settings.app_env)
    return app

app = create_app()
