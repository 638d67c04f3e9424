from __future__ import annotations

import logging

# We use `Optional[...]` for parameters that can be omitted so the server can fall back to config defaults.
from typing import Optional, Union

# FastAPI primitives:
# - `APIRouter` groups endpoints so the app factory can include them cleanly.
# - `Depends` injects the service per request (no global variables needed).
# - `Query` validates query parameters (bounds on `limit`).
# - `Request` gives access to `app.state` where we store our service object.
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from gbfspulse.api.schemas import ErrorOut, HealthOut, SnapshotOut, SystemOut, SystemsOut
from gbfspulse.api.service import FETCH_FAILED, SnapshotOutcome, SnapshotService


logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    404: {"model": ErrorOut, "description": "Upstream reported no usable stations"},
    500: {"model": ErrorOut, "description": "Discovery or feed retrieval failed"},
}


# Dependency provider: the service is constructed once in `create_app` and stored on `app.state`.
def get_service(request: Request) -> SnapshotService:
    return request.app.state.snapshot_service  # type: ignore[attr-defined]


def _respond(outcome: SnapshotOutcome) -> Union[SnapshotOut, JSONResponse]:
    if outcome.ok and outcome.snapshot is not None:
        try:
            return SnapshotOut.from_snapshot(outcome.snapshot)
        except ValidationError as e:
            # A snapshot that violates the response schema still leaves through the JSON envelope.
            logger.exception("Snapshot for system=%s failed response validation", outcome.snapshot.system)
            body = ErrorOut(error=FETCH_FAILED, details=f"Invalid station data: {e.error_count()} validation error(s)")
            return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
    # Error envelope: stable `error` string, optional `details`, never a traceback.
    body = ErrorOut(error=outcome.error or "Unknown error", details=outcome.details)
    return JSONResponse(status_code=outcome.status_code, content=body.model_dump(exclude_none=True))


@router.get("/health", response_model=HealthOut)
def health(service: SnapshotService = Depends(get_service)) -> HealthOut:
    return HealthOut(status="ok", service=service.config.app.name)


# The dashboard uses this to populate its system selector.
@router.get("/api/systems", response_model=SystemsOut)
def list_systems(service: SnapshotService = Depends(get_service)) -> SystemsOut:
    registry = service.registry
    return SystemsOut(
        default_system=registry.default_system,
        systems=[SystemOut(system=key, gbfs_root=root) for key, root in sorted(registry.systems.items())],
    )


# Live snapshot: every matched station with its pain score, plus the map bounds.
@router.get("/api/gbfs", response_model=SnapshotOut, responses=_ERROR_RESPONSES)
def get_gbfs(
    system: Optional[str] = Query(default=None, description="Known system key, e.g. divvy or citibike."),
    service: SnapshotService = Depends(get_service),
) -> Union[SnapshotOut, JSONResponse]:
    return _respond(service.fetch_snapshot(system))


# Same snapshot, stations ordered by descending pain and truncated: the rebalancing worklist.
@router.get("/api/gbfs/priorities", response_model=SnapshotOut, responses=_ERROR_RESPONSES)
def get_priorities(
    system: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=1000),
    service: SnapshotService = Depends(get_service),
) -> Union[SnapshotOut, JSONResponse]:
    return _respond(service.fetch_snapshot(system, top=limit))
