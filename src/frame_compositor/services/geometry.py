"""Crop window and overlay placement math.

Both functions are pure and work in floating point pixel space. Rounding to
whole pixels happens only when the renderer draws the overlay.
"""

from frame_compositor.domain.geometry import CropDescriptor, PlacementDescriptor, Rect


def resolve_crop(
    source_width: float,
    source_height: float,
    canvas_aspect: float,
    crop: CropDescriptor,
) -> Rect:
    """Return the source rectangle that covers a canvas of the given aspect.

    The limiting dimension is chosen from the source and canvas aspect ratios,
    so stretching the result over the canvas never letterboxes. `crop_x` and
    `crop_y` place the window within the remaining slack: 0 is the top-left
    extreme, 100 the bottom-right one.
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError("Source dimensions must be positive")
    if canvas_aspect <= 0:
        raise ValueError("Canvas aspect ratio must be positive")

    image_aspect = source_width / source_height
    if image_aspect > canvas_aspect:
        crop_height = (crop.crop_size / 100) * source_height
        crop_width = crop_height * canvas_aspect
    else:
        crop_width = (crop.crop_size / 100) * source_width
        crop_height = crop_width / canvas_aspect

    crop_width = min(crop_width, source_width)
    crop_height = min(crop_height, source_height)

    max_offset_x = source_width - crop_width
    max_offset_y = source_height - crop_height
    return Rect(
        x=(crop.crop_x / 100) * max_offset_x,
        y=(crop.crop_y / 100) * max_offset_y,
        width=crop_width,
        height=crop_height,
    )


def resolve_placement(
    frame_width: float,
    frame_height: float,
    canvas_width: float,
    canvas_height: float,
    placement: PlacementDescriptor,
) -> Rect:
    """Return the destination rectangle of the overlay on the canvas.

    The overlay is fitted inside the canvas, zoomed by `frame_scale` and
    shifted from the center by a percentage of the canvas size. Width and
    height are scaled by the same factor.
    """
    if frame_width <= 0 or frame_height <= 0:
        raise ValueError("Frame dimensions must be positive")
    if canvas_width <= 0 or canvas_height <= 0:
        raise ValueError("Canvas dimensions must be positive")

    frame_aspect = frame_width / frame_height
    canvas_aspect = canvas_width / canvas_height
    if frame_aspect > canvas_aspect:
        base_width = canvas_width
        base_height = canvas_width / frame_aspect
    else:
        base_height = canvas_height
        base_width = canvas_height * frame_aspect

    width = base_width * placement.frame_scale
    height = base_height * placement.frame_scale
    return Rect(
        x=(canvas_width - width) / 2 + (placement.frame_x / 100) * canvas_width,
        y=(canvas_height - height) / 2 + (placement.frame_y / 100) * canvas_height,
        width=width,
        height=height,
    )
