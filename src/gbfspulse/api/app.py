from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

# `FastAPI` exposes the snapshot pipeline as HTTP endpoints for the dashboard.
from fastapi import FastAPI

from gbfspulse.api.routes import router
from gbfspulse.api.service import SnapshotService
from gbfspulse.config.models import AppConfig
# Central logging configuration keeps operational debugging consistent across scripts and the API.
from gbfspulse.utils.logging import configure_logging


# App factory: build everything from a typed config so tests can construct isolated apps.
def create_app(config: AppConfig, *, service: Optional[SnapshotService] = None) -> FastAPI:
    # Pitfall: `logging.basicConfig(...)` is a no-op if handlers already exist (common in tests).
    configure_logging(config.logging)

    snapshot_service = service or SnapshotService(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        # Release pooled HTTP connections when the server stops.
        app.state.snapshot_service.close()

    app = FastAPI(title=config.app.name, lifespan=lifespan)

    # Store the service on `app.state` so route handlers reach it through `Depends(get_service)`.
    app.state.snapshot_service = snapshot_service

    app.include_router(router)
    return app
