"""Image sink interface for embedded-database durability.

The embedded engine lives entirely in memory.  After every mutation its full
image is serialised and handed to a sink, which overwrites whatever it held
before; the sink is read exactly once, when the engine starts.  There is no
incremental persistence, so the image is opaque to every sink.

The interface is async to support local filesystem, HTTP push and S3
backends behind the same calls.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ImageSink(Protocol):
    """Async protocol for reading and writing the serialised database image."""

    async def read_image(self) -> bytes | None:
        """Return the stored image, or ``None`` if nothing was stored yet."""
        ...

    async def write_image(self, data: bytes) -> None:
        """Overwrite the stored image.  Raises on failure."""
        ...
