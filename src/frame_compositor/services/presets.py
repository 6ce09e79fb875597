"""Editor helpers for per-photo frame configuration."""

from frame_compositor.domain.jobs import FrameConfig, PhotoJobItem


def default_frame_config() -> FrameConfig:
    """Full image, frame centered at 100%, square canvas."""
    return FrameConfig()


def reset_crop(config: FrameConfig) -> FrameConfig:
    """Return `config` with the crop window reset to the whole image."""
    return config.model_copy(update={"crop_x": 0.0, "crop_y": 0.0, "crop_size": 100.0})


def reset_frame(config: FrameConfig) -> FrameConfig:
    """Return `config` with the overlay back at 100% and centered."""
    return config.model_copy(
        update={"frame_scale": 1.0, "frame_x": 0.0, "frame_y": 0.0}
    )


def apply_to_all(
    photos: list[PhotoJobItem], config: FrameConfig
) -> list[PhotoJobItem]:
    """Copy one configuration onto every photo, keeping order and names."""
    return [photo.model_copy(update={"config": config}) for photo in photos]
