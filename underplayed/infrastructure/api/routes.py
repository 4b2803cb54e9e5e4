"""Job lifecycle endpoints: start a playlist job and poll its status."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from underplayed.config import get_logger
from underplayed.infrastructure.api.state import get_context
from underplayed.infrastructure.factories import AppContext

logger = get_logger(__name__)

router = APIRouter()

NOT_FOUND_DETAIL = "Process ID not found or expired."


class ShuffleRequest(BaseModel):
    playlist_name: str | None = None


class ShuffleAccepted(BaseModel):
    process_id: str
    status_url: str
    message: str


class JobStatus(BaseModel):
    process_id: str
    state: str
    message: str
    progress_percent: int | None = None
    playlist_url: str | None = None
    error: str | None = None
    updated_at_ms: int
    details: dict[str, Any] = {}


@router.post(
    "/shuffle",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ShuffleAccepted,
)
async def start_shuffle(
    request: Request,
    body: ShuffleRequest | None = None,
    context: AppContext = Depends(get_context),
) -> ShuffleAccepted:
    """Start a playlist job in the background and return its process id."""
    process_id = await context.runner.start(body.playlist_name if body else None)
    return ShuffleAccepted(
        process_id=process_id,
        status_url=str(request.url_for("get_status", process_id=process_id)),
        message="Playlist generation started. Poll the status URL for progress.",
    )


@router.get("/status/{process_id}", response_model=JobStatus)
async def get_status(
    process_id: str,
    context: AppContext = Depends(get_context),
) -> JobStatus:
    """Return the latest snapshot of a job."""
    snapshot = await context.status_repository.get(process_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return JobStatus(**snapshot.to_dict())


@router.get("/health")
async def health(context: AppContext = Depends(get_context)) -> dict[str, Any]:
    return {"status": "ok", "running_jobs": context.runner.active_count}
