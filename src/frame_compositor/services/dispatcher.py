"""Batch job state machine.

A dispatcher consumes one START message and yields the engine's messages:
one PROGRESS per photo, in order, followed by a single COMPLETE or ERROR.
Only the shared frame and the archive finalization can fail the job. A photo
that cannot be fetched, decoded or rendered is logged and left out of the
archive.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from enum import Enum

from PIL import Image

from frame_compositor.adapters.image_source import ImageSource
from frame_compositor.domain.errors import ArchiveError
from frame_compositor.domain.jobs import PhotoJobItem
from frame_compositor.domain.messages import (
    CompleteMessage,
    ErrorMessage,
    ProgressMessage,
    StartMessage,
    progress,
)
from frame_compositor.domain.results import CompositeResult, PhotoFailure, PhotoOutcome
from frame_compositor.services.archive import ArchiveBuilder
from frame_compositor.services.canvas import canvas_size
from frame_compositor.services.renderer import Renderer, decode_image

_logger = logging.getLogger(__name__)


class JobState(str, Enum):
    """Lifecycle of a batch job."""

    IDLE = "idle"
    LOADING_FRAME = "loading_frame"
    PROCESSING = "processing"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class JobDispatcher:
    """Runs exactly one batch job, one photo at a time."""

    image_source: ImageSource
    renderer: Renderer
    archive_factory: Callable[[], ArchiveBuilder] = ArchiveBuilder
    state: JobState = JobState.IDLE
    current_index: int = 0

    async def run(
        self, start: StartMessage
    ) -> AsyncIterator[ProgressMessage | CompleteMessage | ErrorMessage]:
        """Process the job and yield progress plus one terminal message."""
        if self.state is not JobState.IDLE:
            raise RuntimeError("A dispatcher runs a single job")
        job = start.payload
        total = len(job.photos)

        self.state = JobState.LOADING_FRAME
        try:
            frame = await self._load_frame(job.frame_url)
        except Exception as exc:
            _logger.exception("Failed to load frame")
            self.state = JobState.FAILED
            yield ErrorMessage(payload=f"Failed to load frame: {exc}")
            return

        archive = self.archive_factory()
        self.state = JobState.PROCESSING
        _logger.info("Batch started: photos=%s", total)
        try:
            for index, item in enumerate(job.photos, start=1):
                self.current_index = index
                yield progress(index, total)
                outcome = await self._process_photo(index, item, frame)
                if isinstance(outcome, CompositeResult):
                    self._archive(archive, outcome)
                else:
                    _logger.warning(
                        "Skipping photo %s (%s): %s",
                        outcome.index,
                        outcome.name,
                        outcome.reason,
                    )
        finally:
            frame.close()

        self.state = JobState.FINALIZING
        try:
            content = await archive.finalize()
        except Exception as exc:
            _logger.exception("Failed to finalize archive")
            self.state = JobState.FAILED
            yield ErrorMessage(payload=f"Failed to generate archive: {exc}")
            return

        self.state = JobState.COMPLETED
        _logger.info(
            "Batch completed: archived=%s total=%s", archive.entry_count, total
        )
        yield CompleteMessage(payload=content)

    async def _load_frame(self, reference: str) -> Image.Image:
        data = await self.image_source.fetch_bytes(reference)
        decoded = await asyncio.to_thread(decode_image, data)
        if decoded.mode == "RGBA":
            return decoded
        frame = decoded.convert("RGBA")
        decoded.close()
        return frame

    async def _process_photo(
        self, index: int, item: PhotoJobItem, frame: Image.Image
    ) -> PhotoOutcome:
        photo: Image.Image | None = None
        try:
            data = await self.image_source.fetch_bytes(item.url)
            photo = await asyncio.to_thread(decode_image, data)
            encoded = await asyncio.to_thread(self._compose, photo, frame, item)
        except Exception as exc:
            return PhotoFailure(index=index, name=item.name, reason=str(exc))
        finally:
            if photo is not None:
                photo.close()
        return CompositeResult(index=index, name=item.name, data=encoded)

    def _compose(
        self, photo: Image.Image, frame: Image.Image, item: PhotoJobItem
    ) -> bytes:
        width, height = canvas_size(item.config.canvas_mode, photo.size)
        surface = self.renderer.render(width, height, photo, frame, item.config)
        try:
            return self.renderer.encode(surface)
        finally:
            surface.close()

    def _archive(self, archive: ArchiveBuilder, result: CompositeResult) -> None:
        try:
            archive.add(result.index, result.name, result.data)
        except ArchiveError:
            _logger.exception(
                "Failed to archive photo %s (%s)", result.index, result.name
            )
