"""Errors raised by the compositing engine."""


class FrameCompositorError(Exception):
    """Base error for the compositing engine."""


class ImageFetchError(FrameCompositorError):
    """Raised when image bytes cannot be fetched for a reference."""


class ImageDecodeError(FrameCompositorError):
    """Raised when fetched bytes are not a decodable image."""


class ArchiveError(FrameCompositorError):
    """Raised when the output archive cannot be written or serialized."""
