"""Job description models sent by the host."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from frame_compositor.domain.geometry import CropDescriptor, PlacementDescriptor


class FitMode(str, Enum):
    """Fit mode chosen in the editor.

    Kept for compatibility with host payloads. Rendering does not consult it:
    the crop window always covers the canvas.
    """

    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"


class CanvasMode(str, Enum):
    """Named output canvas presets."""

    SQUARE = "square"
    ORIGINAL = "original"
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
    STORY = "story"


class FrameConfig(BaseModel):
    """Per-photo crop, overlay placement and canvas settings."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    crop_x: float = Field(default=0.0, ge=0.0, le=100.0, alias="cropX")
    crop_y: float = Field(default=0.0, ge=0.0, le=100.0, alias="cropY")
    crop_size: float = Field(default=100.0, gt=0.0, le=100.0, alias="cropSize")
    frame_scale: float = Field(default=1.0, ge=0.5, le=2.0, alias="frameScale")
    frame_x: float = Field(default=0.0, ge=-50.0, le=50.0, alias="frameX")
    frame_y: float = Field(default=0.0, ge=-50.0, le=50.0, alias="frameY")
    fit_mode: FitMode = Field(default=FitMode.COVER, alias="fitMode")
    canvas_mode: CanvasMode = Field(default=CanvasMode.SQUARE, alias="canvasMode")

    @property
    def crop(self) -> CropDescriptor:
        return CropDescriptor(
            crop_x=self.crop_x, crop_y=self.crop_y, crop_size=self.crop_size
        )

    @property
    def placement(self) -> PlacementDescriptor:
        return PlacementDescriptor(
            frame_scale=self.frame_scale, frame_x=self.frame_x, frame_y=self.frame_y
        )


class PhotoJobItem(BaseModel):
    """One source photo with its display name and configuration."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1)
    name: str
    config: FrameConfig = Field(default_factory=FrameConfig)


class BatchJob(BaseModel):
    """A frame overlay reference plus the ordered photos to composite."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    frame_url: str = Field(alias="frameURL", min_length=1)
    photos: list[PhotoJobItem] = Field(default_factory=list)
