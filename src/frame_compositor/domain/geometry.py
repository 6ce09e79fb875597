"""Geometry primitives for crop windows and overlay placement."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in pixel space."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def as_box(self) -> tuple[float, float, float, float]:
        """Return the rectangle as a Pillow (left, top, right, bottom) box."""
        return (self.x, self.y, self.right, self.bottom)


@dataclass(frozen=True)
class CropDescriptor:
    """Crop window position and size in percent of the source image."""

    crop_x: float
    crop_y: float
    crop_size: float


@dataclass(frozen=True)
class PlacementDescriptor:
    """Overlay zoom factor and offset from the canvas center in percent."""

    frame_scale: float
    frame_x: float
    frame_y: float
