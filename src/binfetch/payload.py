"""Downloaded asset storage: in memory or in an owned temporary file."""
import io
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional

from binfetch.logging import get_logger

logger = get_logger(__name__)

TEMP_PREFIX = "binfetch-"


class DownloadedPayload:
    """Complete asset bytes, readable and seekable through ``open()``.

    Payloads are context managers; leaving the block releases the
    backing store.
    """

    kind = "payload"

    @property
    def size(self) -> int:
        raise NotImplementedError

    def open(self) -> BinaryIO:
        """Return a fresh binary stream positioned at the start."""
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "DownloadedPayload":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class InMemoryPayload(DownloadedPayload):
    kind = "memory"

    def __init__(self, data: bytes):
        self.data = data

    @property
    def size(self) -> int:
        return len(self.data)

    def open(self) -> BinaryIO:
        return io.BytesIO(self.data)


class OnDiskPayload(DownloadedPayload):
    """Payload stored in a temporary file that this object owns."""

    kind = "disk"

    def __init__(self, path: Path):
        self.path = path

    @property
    def size(self) -> int:
        return self.path.stat().st_size

    def open(self) -> BinaryIO:
        return open(self.path, "rb")

    def close(self) -> None:
        try:
            self.path.unlink()
            logger.debug("temp_file_removed", path=str(self.path))
        except FileNotFoundError:
            pass


class MemorySink:
    """Accumulates chunks into a buffer."""

    def __init__(self):
        self._buffer = io.BytesIO()

    def write(self, chunk: bytes) -> None:
        self._buffer.write(chunk)

    def finish(self) -> InMemoryPayload:
        # getvalue() hands over the buffer itself when nothing else references it
        data = self._buffer.getvalue()
        self._buffer.close()
        return InMemoryPayload(data)

    def discard(self) -> None:
        self._buffer.close()


class DiskSink:
    """Streams chunks into a new temporary file."""

    def __init__(self, dir: Optional[Path] = None):
        handle = tempfile.NamedTemporaryFile(prefix=TEMP_PREFIX, dir=dir, delete=False)
        self.path = Path(handle.name)
        self._file: Optional[BinaryIO] = handle
        logger.debug("temp_file_created", path=str(self.path))

    def write(self, chunk: bytes) -> None:
        self._file.write(chunk)

    def finish(self) -> OnDiskPayload:
        self._close_file()
        return OnDiskPayload(self.path)

    def discard(self) -> None:
        self._close_file()
        if self.path.exists():
            os.unlink(self.path)

    def _close_file(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
