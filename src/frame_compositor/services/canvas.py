"""Output canvas sizing."""

from frame_compositor.domain.jobs import CanvasMode

CANVAS_PRESETS: dict[CanvasMode, tuple[int, int]] = {
    CanvasMode.SQUARE: (1080, 1080),
    CanvasMode.PORTRAIT: (1080, 1350),
    CanvasMode.LANDSCAPE: (1920, 1080),
    CanvasMode.STORY: (1080, 1920),
}


def canvas_size(
    mode: CanvasMode, photo_size: tuple[int, int] | None = None
) -> tuple[int, int]:
    """Return the output (width, height) for a canvas mode.

    `original` resolves to the decoded photo's native size.
    """
    if mode is CanvasMode.ORIGINAL:
        if photo_size is None:
            raise ValueError("Original canvas mode requires the photo size")
        return photo_size
    return CANVAS_PRESETS[mode]


def preview_canvas_size(
    mode: CanvasMode,
    photo_size: tuple[int, int] | None = None,
    max_dimension: int = 1920,
) -> tuple[int, int]:
    """Return the editor preview size, capping `original` to `max_dimension`."""
    if mode is not CanvasMode.ORIGINAL:
        return CANVAS_PRESETS[mode]
    if photo_size is None or photo_size[0] <= 0 or photo_size[1] <= 0:
        return CANVAS_PRESETS[CanvasMode.SQUARE]
    width, height = photo_size
    ratio = width / height
    if ratio > 1:
        return max_dimension, max(1, round(max_dimension / ratio))
    return max(1, round(max_dimension * ratio)), max_dimension
