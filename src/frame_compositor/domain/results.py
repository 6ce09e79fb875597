"""Per-photo outcomes of a batch job."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CompositeResult:
    """Encoded output for one successfully processed photo."""

    index: int
    name: str
    data: bytes


@dataclass(frozen=True)
class PhotoFailure:
    """A photo that was attempted but could not be processed."""

    index: int
    name: str
    reason: str


PhotoOutcome = CompositeResult | PhotoFailure
