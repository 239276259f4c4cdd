"""FastAPI application serving the status site and its JSON API."""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings, api_dir
from .routers import status_router
from .services.monitor import MonitorService
from .services.scheduler import SchedulerService

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    monitor: Optional[MonitorService] = None,
    run_scheduler: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    monitor = monitor or MonitorService(settings)
    scheduler = SchedulerService(monitor, interval_minutes=settings.check_interval_minutes)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - startup and shutdown."""
        logger.info("Starting Status Monitor")
        if run_scheduler:
            scheduler.start()
        yield
        scheduler.stop()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Status Monitor",
        description="HTTP, TCP and DNS checks with history, uptime and badges",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.monitor = monitor
    app.state.scheduler = scheduler

    # Public read-only data; any origin may embed badges and JSON
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(status_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "scheduler": scheduler.running,
        }

    # Only the generated outputs are public, never the rest of site_path.
    # Badges come from the /badge route above; mounts go last so API routes win.
    index_path = os.path.join(settings.site_path, "index.html")
    service_dir = os.path.join(settings.site_path, "service")
    for directory in (service_dir, api_dir(settings)):
        os.makedirs(directory, exist_ok=True)

    @app.get("/", include_in_schema=False)
    @app.get("/index.html", include_in_schema=False)
    async def serve_index():
        if not os.path.isfile(index_path):
            raise HTTPException(status_code=404, detail="Site not generated yet")
        return FileResponse(index_path)

    app.mount(
        "/service",
        StaticFiles(directory=service_dir),
        name="service",
    )
    app.mount("/api", StaticFiles(directory=api_dir(settings)), name="api")

    return app
