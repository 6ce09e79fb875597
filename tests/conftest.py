"""Shared test fixtures."""

import io
from dataclasses import dataclass, field

import pytest
from PIL import Image

from frame_compositor.adapters.image_source import ImageSource
from frame_compositor.config import Settings
from frame_compositor.containers import AppContainer
from frame_compositor.domain.errors import ArchiveError, ImageFetchError
from frame_compositor.domain.jobs import BatchJob, FrameConfig, PhotoJobItem
from frame_compositor.services.archive import ArchiveBuilder
from frame_compositor.services.preview import PreviewService
from frame_compositor.services.renderer import Renderer
from frame_compositor.services.worker import FrameWorker

FRAME_URL = "https://cdn.test/frame.png"


def make_image_bytes(
    size: tuple[int, int],
    color: tuple[int, ...] = (200, 30, 30),
    mode: str = "RGB",
    image_format: str = "PNG",
) -> bytes:
    """Encode a solid-color image."""
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=image_format)
    return buffer.getvalue()


def make_frame_bytes(size: tuple[int, int] = (1000, 500)) -> bytes:
    """Encode an opaque blue frame overlay."""
    return make_image_bytes(size, color=(0, 0, 255, 255), mode="RGBA")


def photo_url(index: int) -> str:
    return f"https://cdn.test/photo-{index}.jpg"


@dataclass
class InMemoryImageSource(ImageSource):
    """Image source serving bytes from a dict."""

    images: dict[str, bytes] = field(default_factory=dict)
    fetched: list[str] = field(default_factory=list)
    closed: bool = False

    async def fetch_bytes(self, reference: str) -> bytes:
        self.fetched.append(reference)
        if reference not in self.images:
            raise ImageFetchError(f"Not found: {reference}")
        return self.images[reference]

    async def close(self) -> None:
        self.closed = True


@dataclass
class FailingArchiveBuilder(ArchiveBuilder):
    """Archive whose serialization always fails."""

    async def finalize(self) -> bytes:
        raise ArchiveError("disk full")


def build_job(
    count: int, config: FrameConfig | None = None, names: list[str] | None = None
) -> BatchJob:
    resolved = config or FrameConfig()
    return BatchJob(
        frame_url=FRAME_URL,
        photos=[
            PhotoJobItem(
                url=photo_url(index),
                name=names[index - 1] if names else f"photo_{index}.jpg",
                config=resolved,
            )
            for index in range(1, count + 1)
        ],
    )


def build_source(
    count: int, photo_size: tuple[int, int] = (400, 300)
) -> InMemoryImageSource:
    images = {FRAME_URL: make_frame_bytes()}
    for index in range(1, count + 1):
        images[photo_url(index)] = make_image_bytes(photo_size, image_format="JPEG")
    return InMemoryImageSource(images=images)


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test")


@pytest.fixture
def renderer() -> Renderer:
    return Renderer()


@pytest.fixture
def image_source() -> InMemoryImageSource:
    return build_source(3)


@pytest.fixture
def container(
    settings: Settings, renderer: Renderer, image_source: InMemoryImageSource
) -> AppContainer:
    def worker_factory() -> FrameWorker:
        return FrameWorker(
            image_source_factory=lambda: image_source,
            renderer=renderer,
        )

    async def close_resources() -> None:
        await image_source.close()

    return AppContainer(
        settings=settings,
        renderer=renderer,
        preview_service=PreviewService(
            image_source=image_source,
            renderer=renderer,
            max_dimension=settings.preview_max_dimension,
        ),
        worker_factory=worker_factory,
        close_resources=close_resources,
    )
