"""Compositing and JPEG encoding of framed photos."""

import io
from dataclasses import dataclass

from PIL import Image, ImageColor, ImageOps, UnidentifiedImageError

from frame_compositor.domain.errors import ImageDecodeError
from frame_compositor.domain.geometry import CropDescriptor, PlacementDescriptor
from frame_compositor.domain.jobs import FrameConfig
from frame_compositor.services.geometry import resolve_crop, resolve_placement


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes, applying the EXIF orientation."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        ImageOps.exif_transpose(image, in_place=True)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as exc:
        raise ImageDecodeError(f"Could not decode image: {exc}") from exc
    return image


@dataclass
class Renderer:
    """Draws the background, the cropped photo and the frame overlay."""

    background_color: str = "#111111"
    jpeg_quality: int = 90
    resample: Image.Resampling = Image.Resampling.BICUBIC

    def render(
        self,
        width: int,
        height: int,
        photo: Image.Image | None,
        frame: Image.Image | None,
        config: FrameConfig,
    ) -> Image.Image:
        """Return a new RGB surface of exactly `width` x `height`."""
        if width <= 0 or height <= 0:
            raise ValueError("Canvas dimensions must be positive")
        surface = Image.new(
            "RGB", (width, height), ImageColor.getrgb(self.background_color)
        )
        if photo is not None:
            self._draw_photo(surface, photo, config.crop)
        if frame is not None:
            self._draw_frame(surface, frame, config.placement)
        return surface

    def encode(self, surface: Image.Image) -> bytes:
        """Encode a surface as JPEG."""
        buffer = io.BytesIO()
        rgb = surface if surface.mode == "RGB" else surface.convert("RGB")
        rgb.save(buffer, format="JPEG", quality=self.jpeg_quality)
        return buffer.getvalue()

    def _draw_photo(
        self, surface: Image.Image, photo: Image.Image, crop: CropDescriptor
    ) -> None:
        width, height = surface.size
        source = resolve_crop(photo.width, photo.height, width / height, crop)
        left, top, right, bottom = source.as_box()
        # absorb floating point drift past the source edges
        box = (
            max(0.0, left),
            max(0.0, top),
            min(photo.width, right),
            min(photo.height, bottom),
        )
        if _has_alpha(photo):
            layer = photo if photo.mode == "RGBA" else photo.convert("RGBA")
            try:
                scaled = layer.resize((width, height), self.resample, box=box)
            finally:
                if layer is not photo:
                    layer.close()
            surface.paste(scaled, (0, 0), scaled)
        else:
            scaled = photo.resize((width, height), self.resample, box=box)
            if scaled.mode != "RGB":
                rgb = scaled.convert("RGB")
                scaled.close()
                scaled = rgb
            surface.paste(scaled, (0, 0))
        scaled.close()

    def _draw_frame(
        self, surface: Image.Image, frame: Image.Image, placement: PlacementDescriptor
    ) -> None:
        width, height = surface.size
        target = resolve_placement(frame.width, frame.height, width, height, placement)
        size = (max(1, round(target.width)), max(1, round(target.height)))
        layer = frame if frame.mode == "RGBA" else frame.convert("RGBA")
        try:
            overlay = layer.resize(size, self.resample)
        finally:
            if layer is not frame:
                layer.close()
        # paste clips overlays that extend past the canvas edges
        surface.paste(overlay, (round(target.x), round(target.y)), overlay)
        overlay.close()


def _has_alpha(image: Image.Image) -> bool:
    return "A" in image.getbands() or "transparency" in image.info
