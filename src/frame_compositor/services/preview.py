"""Single-photo preview rendering for the editor."""

import asyncio
from dataclasses import dataclass

from PIL import Image

from frame_compositor.adapters.image_source import ImageSource
from frame_compositor.domain.jobs import PhotoJobItem
from frame_compositor.services.canvas import preview_canvas_size
from frame_compositor.services.renderer import Renderer, decode_image


@dataclass
class PreviewService:
    """Renders one photo with its frame at preview size."""

    image_source: ImageSource
    renderer: Renderer
    max_dimension: int = 1920

    async def render(self, frame_url: str, item: PhotoJobItem) -> bytes:
        """Return the JPEG preview of a photo.

        Fetch and decode errors propagate to the caller.
        """
        frame_data = await self.image_source.fetch_bytes(frame_url)
        photo_data = await self.image_source.fetch_bytes(item.url)
        frame = await asyncio.to_thread(decode_image, frame_data)
        try:
            photo = await asyncio.to_thread(decode_image, photo_data)
            try:
                return await asyncio.to_thread(self._compose, photo, frame, item)
            finally:
                photo.close()
        finally:
            frame.close()

    def _compose(
        self, photo: Image.Image, frame: Image.Image, item: PhotoJobItem
    ) -> bytes:
        width, height = preview_canvas_size(
            item.config.canvas_mode, photo.size, self.max_dimension
        )
        surface = self.renderer.render(width, height, photo, frame, item.config)
        try:
            return self.renderer.encode(surface)
        finally:
            surface.close()
