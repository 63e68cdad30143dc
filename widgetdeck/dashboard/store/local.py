"""Local filesystem image sink.

Stores the database image as a single file, by default::

    {data_root}/db/dashboard.sqlite

Uses ``anyio.to_thread.run_sync`` for non-blocking file I/O.

Writes are atomic: data is written to a temporary file in the same directory,
then renamed to the target path, so a crash mid-flush leaves the previous
image intact.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from functools import partial
from pathlib import Path

from anyio import to_thread


class LocalImageSink:
    """Local filesystem implementation of the ImageSink protocol."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def read_image(self) -> bytes | None:
        return await to_thread.run_sync(partial(_read_file, self._path))

    async def write_image(self, data: bytes) -> None:
        await to_thread.run_sync(partial(atomic_write, self._path, data))


# -- Sync helpers (run in thread pool) -----------------------------------------


def atomic_write(path: Path, data: bytes) -> None:
    """Write data atomically: temp file + rename.

    The temp file is created in the same directory so ``os.replace`` is atomic
    on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _read_file(path: Path) -> bytes | None:
    """Read file contents.  ``None`` when the file is missing or empty."""
    if not path.is_file():
        return None
    data = path.read_bytes()
    return data or None
