"""HTTP push image sink.

Ships the image to a SQL service's persistence endpoint and reads it back from
the service's static image route::

    POST {base_url}/api/save-db          (raw body, overwrites the image)
    GET  {base_url}/db/dashboard.sqlite  (404 when nothing stored yet)
"""

from __future__ import annotations

import httpx

SAVE_PATH = "/api/save-db"
IMAGE_PATH = "/db/dashboard.sqlite"


class ImagePushError(RuntimeError):
    """Raised when the persistence endpoint rejects an image."""


class HttpImageSink:
    """HTTP implementation of the ImageSink protocol."""

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def read_image(self) -> bytes | None:
        resp = await self._client.get(f"{self._base_url}{IMAGE_PATH}")
        if resp.status_code == httpx.codes.NOT_FOUND:
            return None
        resp.raise_for_status()
        return resp.content or None

    async def write_image(self, data: bytes) -> None:
        resp = await self._client.post(
            f"{self._base_url}{SAVE_PATH}",
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        if not resp.is_success:
            msg = f"Failed to save database image: {resp.status_code} {resp.text}"
            raise ImagePushError(msg)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
