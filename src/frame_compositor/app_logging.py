"""Logging configuration helpers."""

import logging


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure the `frame_compositor` logger with a single stream handler.

    Repeated calls only update the level.
    """
    logger = logging.getLogger("frame_compositor")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
