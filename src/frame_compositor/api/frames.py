"""Frame tool endpoints."""

from __future__ import annotations

import asyncio
import io
import logging
import zipfile
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, Response, status

from frame_compositor.api.frame_models import ApplyToAllRequest, PreviewRequest
from frame_compositor.domain.errors import FrameCompositorError
from frame_compositor.domain.jobs import BatchJob, FrameConfig
from frame_compositor.domain.messages import (
    ErrorMessage,
    ProgressMessage,
    StartMessage,
    is_terminal,
)
from frame_compositor.services.presets import (
    apply_to_all,
    default_frame_config,
    reset_crop,
    reset_frame,
)

if TYPE_CHECKING:
    from frame_compositor.containers import AppContainer

router = APIRouter(prefix="/frames", tags=["frames"])

_logger = logging.getLogger(__name__)


@router.post("/export")
async def export_frames(job: BatchJob, request: Request) -> Response:
    """Composite every photo and return the archive as a download."""
    container: AppContainer = request.app.state.container
    if not job.photos:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to process"
        )
    worker = container.worker_factory()
    worker.post_message(StartMessage(payload=job))
    try:
        messages = await asyncio.to_thread(
            worker.collect, container.settings.job_timeout_seconds
        )
    except TimeoutError as exc:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Frame export timed out",
        ) from exc
    finally:
        worker.terminate()

    for message in messages:
        if isinstance(message, ProgressMessage):
            _logger.info(
                "Export progress %s/%s",
                message.payload.current,
                message.payload.total,
            )
    if not messages or not is_terminal(messages[-1]):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Frame worker stopped unexpectedly",
        )
    terminal = messages[-1]
    if isinstance(terminal, ErrorMessage):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=terminal.payload
        )

    archive = terminal.payload
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        processed = len(zf.namelist())
    filename = container.settings.archive_filename
    return Response(
        content=archive,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Frames-Processed": f"{processed}/{len(job.photos)}",
        },
    )


@router.post("/preview")
async def preview_frame(payload: PreviewRequest, request: Request) -> Response:
    """Render a single photo with the frame."""
    container: AppContainer = request.app.state.container
    try:
        content = await container.preview_service.render(
            payload.frame_url, payload.photo
        )
    except FrameCompositorError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return Response(content=content, media_type="image/jpeg")


@router.post("/apply-to-all")
async def apply_config_to_all(payload: ApplyToAllRequest) -> dict[str, object]:
    """Return the photos with the given configuration copied onto each."""
    photos = apply_to_all(payload.photos, payload.config)
    return {
        "photos": [photo.model_dump(mode="json", by_alias=True) for photo in photos]
    }


@router.get("/default-config")
async def get_default_config() -> dict[str, object]:
    """Return the editor's starting configuration."""
    return default_frame_config().model_dump(mode="json", by_alias=True)


@router.post("/reset-crop")
async def reset_config_crop(config: FrameConfig) -> dict[str, object]:
    """Return `config` with the crop window covering the whole photo."""
    return reset_crop(config).model_dump(mode="json", by_alias=True)


@router.post("/reset-frame")
async def reset_config_frame(config: FrameConfig) -> dict[str, object]:
    """Return `config` with the overlay centered at 100%."""
    return reset_frame(config).model_dump(mode="json", by_alias=True)
