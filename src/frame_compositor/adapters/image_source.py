"""Byte sources for frame and photo references."""

import asyncio
import base64
import binascii
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote_to_bytes

import httpx

from frame_compositor.domain.errors import ImageFetchError


class ImageSource(Protocol):
    """Interface for resolving an image reference to raw bytes."""

    async def fetch_bytes(self, reference: str) -> bytes:
        """Fetch the bytes behind a frame or photo reference."""

    async def close(self) -> None:
        """Release any underlying resources."""


@dataclass
class HttpxImageSource(ImageSource):
    """Image source for http(s) URLs, data URLs and optionally local files."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 20.0
    max_bytes: int = 5 * 1024 * 1024
    allow_local_files: bool = False

    @classmethod
    def create(
        cls,
        timeout_seconds: float = 20.0,
        max_bytes: int = 5 * 1024 * 1024,
        allow_local_files: bool = False,
    ) -> "HttpxImageSource":
        """Create an image source with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True),
            timeout_seconds=timeout_seconds,
            max_bytes=max_bytes,
            allow_local_files=allow_local_files,
        )

    async def fetch_bytes(self, reference: str) -> bytes:
        """Fetch bytes for a reference. Failures are never retried."""
        if reference.startswith(("http://", "https://")):
            data = await self._fetch_http(reference)
        elif reference.startswith("data:"):
            data = _decode_data_url(reference)
        elif self.allow_local_files:
            data = await asyncio.to_thread(_read_file, reference)
        else:
            raise ImageFetchError(f"Unsupported image reference: {reference[:64]}")
        if len(data) > self.max_bytes:
            raise _too_large(self.max_bytes, reference)
        return data

    async def _fetch_http(self, url: str) -> bytes:
        chunks: list[bytes] = []
        received = 0
        try:
            async with self.http_client.stream(
                "GET", url, timeout=self.timeout_seconds
            ) as response:
                response.raise_for_status()
                declared = response.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > self.max_bytes:
                    raise _too_large(self.max_bytes, url)
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    if received > self.max_bytes:
                        raise _too_large(self.max_bytes, url)
                    chunks.append(chunk)
        except httpx.HTTPError as exc:
            raise ImageFetchError(f"Failed to fetch {url}: {exc}") from exc
        return b"".join(chunks)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _too_large(max_bytes: int, reference: str) -> ImageFetchError:
    return ImageFetchError(f"Image exceeds {max_bytes} bytes: {reference[:64]}")


def _decode_data_url(reference: str) -> bytes:
    """Decode an RFC 2397 data URL."""
    header, separator, payload = reference.partition(",")
    if not separator:
        raise ImageFetchError("Malformed data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ImageFetchError("Invalid base64 in data URL") from exc
    return unquote_to_bytes(payload)


def _read_file(reference: str) -> bytes:
    path = Path(reference.removeprefix("file://"))
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ImageFetchError(f"Failed to read {path}: {exc}") from exc
