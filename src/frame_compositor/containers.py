"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial

from frame_compositor.adapters.image_source import HttpxImageSource, ImageSource
from frame_compositor.config import Settings
from frame_compositor.services.archive import ArchiveBuilder
from frame_compositor.services.preview import PreviewService
from frame_compositor.services.renderer import Renderer
from frame_compositor.services.worker import FrameWorker


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    renderer: Renderer
    preview_service: PreviewService
    worker_factory: Callable[[], FrameWorker]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    renderer = Renderer(
        background_color=resolved_settings.background_color,
        jpeg_quality=resolved_settings.jpeg_quality,
    )

    def image_source_factory() -> ImageSource:
        return HttpxImageSource.create(
            timeout_seconds=resolved_settings.fetch_timeout_seconds,
            max_bytes=resolved_settings.max_image_bytes,
            allow_local_files=resolved_settings.allow_local_files,
        )

    # workers build their own source: httpx sessions are bound to one event loop
    preview_source = image_source_factory()
    preview_service = PreviewService(
        image_source=preview_source,
        renderer=renderer,
        max_dimension=resolved_settings.preview_max_dimension,
    )

    def worker_factory() -> FrameWorker:
        return FrameWorker(
            image_source_factory=image_source_factory,
            renderer=renderer,
            archive_factory=partial(
                ArchiveBuilder, folder=resolved_settings.archive_folder
            ),
        )

    async def close_resources() -> None:
        await preview_source.close()

    return AppContainer(
        settings=resolved_settings,
        renderer=renderer,
        preview_service=preview_service,
        worker_factory=worker_factory,
        close_resources=close_resources,
    )
