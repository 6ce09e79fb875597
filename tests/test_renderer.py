"""Tests for compositing and encoding."""

import io

import pytest
from PIL import Image, ImageOps

from frame_compositor.domain.errors import ImageDecodeError
from frame_compositor.domain.jobs import FrameConfig
from frame_compositor.services.renderer import Renderer, decode_image
from tests.conftest import make_image_bytes

RED = (200, 30, 30)
BLUE = (0, 0, 255)
BACKGROUND = (17, 17, 17)


def _close(
    pixel: tuple[int, ...], expected: tuple[int, ...], tolerance: int = 2
) -> bool:
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected, strict=True))


def test_render_background_only() -> None:
    surface = Renderer().render(1080, 1350, None, None, FrameConfig())

    assert surface.size == (1080, 1350)
    assert surface.getextrema() == ((17, 17), (17, 17), (17, 17))


@pytest.mark.parametrize("photo_size", [(400, 300), (300, 400), (50, 900)])
@pytest.mark.parametrize("size", [(1080, 1080), (1920, 1080), (1080, 1920)])
def test_render_photo_covers_canvas(
    photo_size: tuple[int, int], size: tuple[int, int]
) -> None:
    photo = Image.new("RGB", photo_size, RED)
    config = FrameConfig(crop_x=30, crop_y=70, crop_size=60)

    surface = Renderer().render(size[0], size[1], photo, None, config)

    width, height = size
    assert surface.size == size
    for point in [(0, 0), (width - 1, 0), (0, height - 1), (width - 1, height - 1)]:
        assert _close(surface.getpixel(point), RED)


def test_render_draws_frame_over_photo() -> None:
    photo = Image.new("RGB", (400, 300), RED)
    frame = Image.new("RGBA", (1000, 500), (*BLUE, 255))

    surface = Renderer().render(1080, 1080, photo, frame, FrameConfig())

    assert _close(surface.getpixel((540, 540)), BLUE)
    assert _close(surface.getpixel((540, 100)), RED)
    assert _close(surface.getpixel((540, 1000)), RED)


def test_render_transparent_frame_keeps_photo() -> None:
    photo = Image.new("RGB", (400, 300), RED)
    frame = Image.new("RGBA", (1000, 500), (*BLUE, 0))

    surface = Renderer().render(1080, 1080, photo, frame, FrameConfig())

    assert _close(surface.getpixel((540, 540)), RED)


def test_render_transparent_photo_shows_background() -> None:
    photo = Image.new("RGBA", (400, 300), (255, 0, 0, 0))

    surface = Renderer().render(1080, 1080, photo, None, FrameConfig())

    assert _close(surface.getpixel((540, 540)), BACKGROUND)


def test_render_clips_frame_outside_canvas() -> None:
    frame = Image.new("RGBA", (1000, 500), (*BLUE, 255))
    config = FrameConfig(frame_scale=2.0, frame_x=50, frame_y=-50)

    surface = Renderer().render(1080, 1080, None, frame, config)

    assert surface.size == (1080, 1080)
    assert _close(surface.getpixel((1079, 0)), BLUE)
    assert _close(surface.getpixel((0, 1079)), BACKGROUND)


def test_render_uses_configured_background() -> None:
    surface = Renderer(background_color="#ffffff").render(
        10, 10, None, None, FrameConfig()
    )

    assert surface.getpixel((5, 5)) == (255, 255, 255)


def test_render_ignores_fit_mode() -> None:
    photo = Image.new("RGB", (400, 300), RED)
    cover = Renderer().render(100, 100, photo, None, FrameConfig(fitMode="cover"))
    contain = Renderer().render(100, 100, photo, None, FrameConfig(fitMode="contain"))

    assert cover.tobytes() == contain.tobytes()


def test_encode_produces_jpeg_of_canvas_size() -> None:
    renderer = Renderer(jpeg_quality=75)
    surface = renderer.render(1080, 1350, None, None, FrameConfig())

    data = renderer.encode(surface)

    with Image.open(io.BytesIO(data)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.size == (1080, 1350)


def test_decode_image_rejects_garbage() -> None:
    with pytest.raises(ImageDecodeError):
        decode_image(b"not an image")


def test_decode_image_applies_exif_orientation() -> None:
    exif = Image.Exif()
    exif[0x0112] = 6
    buffer = io.BytesIO()
    Image.new("RGB", (200, 100), RED).save(buffer, format="JPEG", exif=exif)

    image = decode_image(buffer.getvalue())

    assert image.size == (100, 200)


def test_decode_image_reads_png() -> None:
    image = decode_image(make_image_bytes((30, 20)))

    assert image.size == (30, 20)


def test_render_rgb_photo_is_not_converted(monkeypatch: pytest.MonkeyPatch) -> None:
    photo = Image.new("RGB", (1200, 900), RED)
    converted: list[tuple[int, int]] = []
    original_convert = Image.Image.convert

    def recording_convert(self, *args, **kwargs):  # type: ignore[no-untyped-def]
        converted.append(self.size)
        return original_convert(self, *args, **kwargs)

    monkeypatch.setattr(Image.Image, "convert", recording_convert)

    surface = Renderer().render(1080, 1080, photo, None, FrameConfig())

    assert (1200, 900) not in converted
    assert _close(surface.getpixel((540, 540)), RED)


def test_render_grayscale_photo() -> None:
    photo = Image.new("L", (400, 300), 128)

    surface = Renderer().render(200, 200, photo, None, FrameConfig())

    assert _close(surface.getpixel((100, 100)), (128, 128, 128))


def test_render_palette_transparency_shows_background() -> None:
    photo = Image.new("P", (400, 300), 0)
    photo.putpalette([255, 0, 0] * 256)
    photo.info["transparency"] = 0

    surface = Renderer().render(200, 200, photo, None, FrameConfig())

    assert _close(surface.getpixel((100, 100)), BACKGROUND)


def test_decode_image_wraps_orientation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_transpose(image, in_place=False):  # type: ignore[no-untyped-def]
        raise SyntaxError("bad EXIF block")

    monkeypatch.setattr(ImageOps, "exif_transpose", broken_transpose)

    with pytest.raises(ImageDecodeError):
        decode_image(make_image_bytes((30, 20)))
