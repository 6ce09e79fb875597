"""Message protocol between the host and the compositing engine."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from frame_compositor.domain.jobs import BatchJob


class StartMessage(BaseModel):
    """Host request to run exactly one batch job."""

    type: Literal["START"] = "START"
    payload: BatchJob


class ProgressPayload(BaseModel):
    """Photo `current` of `total` has begun processing."""

    current: int = Field(ge=1)
    total: int = Field(ge=1)


class ProgressMessage(BaseModel):
    """Emitted before each photo attempt."""

    type: Literal["PROGRESS"] = "PROGRESS"
    payload: ProgressPayload


class CompleteMessage(BaseModel):
    """Terminal message carrying the finished archive."""

    type: Literal["COMPLETE"] = "COMPLETE"
    payload: bytes


class ErrorMessage(BaseModel):
    """Terminal message for a job aborted before producing an archive."""

    type: Literal["ERROR"] = "ERROR"
    payload: str


EngineMessage = Annotated[
    ProgressMessage | CompleteMessage | ErrorMessage,
    Field(discriminator="type"),
]


def progress(current: int, total: int) -> ProgressMessage:
    """Build a progress message."""
    return ProgressMessage(payload=ProgressPayload(current=current, total=total))


def is_terminal(message: ProgressMessage | CompleteMessage | ErrorMessage) -> bool:
    """Return True for messages that end a job."""
    return isinstance(message, CompleteMessage | ErrorMessage)
