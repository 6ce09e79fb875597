"""ZIP archive of encoded composites."""

import asyncio
import io
import zipfile
from dataclasses import dataclass, field

from frame_compositor.domain.errors import ArchiveError


def entry_name(index: int, name: str) -> str:
    """Return the archive file name for a photo.

    `name` is used verbatim, so `photo.png` becomes `frame_1_photo.png.jpg`.
    Downstream consumers rely on this exact format.
    """
    return f"frame_{index}_{name}.jpg"


@dataclass
class ArchiveBuilder:
    """Accumulates encoded images into an in-memory ZIP archive."""

    folder: str = "frames"
    _buffer: io.BytesIO = field(init=False, default_factory=io.BytesIO)
    _zip: zipfile.ZipFile = field(init=False)
    _entries: list[str] = field(init=False, default_factory=list)
    _finalized: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.folder = self.folder.strip("/")
        self._zip = zipfile.ZipFile(self._buffer, "w", zipfile.ZIP_STORED)

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    def add(self, index: int, name: str, data: bytes) -> str:
        """Write one encoded image and return its path inside the archive."""
        if self._finalized:
            raise ArchiveError("Archive is already finalized")
        filename = entry_name(index, name)
        path = f"{self.folder}/{filename}" if self.folder else filename
        try:
            self._zip.writestr(path, data)
        except (OSError, ValueError) as exc:
            raise ArchiveError(f"Failed to add {path}: {exc}") from exc
        self._entries.append(path)
        return path

    async def finalize(self) -> bytes:
        """Close the archive and return its bytes."""
        if self._finalized:
            raise ArchiveError("Archive is already finalized")
        self._finalized = True
        try:
            return await asyncio.to_thread(self._close)
        except (OSError, ValueError) as exc:
            raise ArchiveError(f"Failed to serialize archive: {exc}") from exc

    def _close(self) -> bytes:
        self._zip.close()
        return self._buffer.getvalue()
