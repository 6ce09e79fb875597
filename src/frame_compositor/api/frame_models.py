"""Pydantic models for frame tool requests."""

from pydantic import BaseModel, ConfigDict, Field

from frame_compositor.domain.jobs import FrameConfig, PhotoJobItem


class PreviewRequest(BaseModel):
    """Render one photo with the frame at preview size."""

    model_config = ConfigDict(populate_by_name=True)

    frame_url: str = Field(alias="frameURL", min_length=1)
    photo: PhotoJobItem


class ApplyToAllRequest(BaseModel):
    """Copy one configuration onto every photo."""

    config: FrameConfig
    photos: list[PhotoJobItem]
