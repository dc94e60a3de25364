"""Size-adaptive asset download."""
import asyncio
from typing import Callable, Optional, Union

import aiohttp

from binfetch.client import create_session
from binfetch.constants import CHUNK_SIZE, DOWNLOAD_CONNECT_TIMEOUT, DOWNLOAD_READ_TIMEOUT
from binfetch.errors import DownloadFailedError
from binfetch.logging import get_logger
from binfetch.payload import DiskSink, DownloadedPayload, MemorySink
from binfetch.types import Asset

logger = get_logger(__name__)

ProgressCallback = Callable[[int], None]
Sink = Union[MemorySink, DiskSink]

DOWNLOAD_TIMEOUT = aiohttp.ClientTimeout(
    total=None,
    sock_connect=DOWNLOAD_CONNECT_TIMEOUT,
    sock_read=DOWNLOAD_READ_TIMEOUT,
)


def uses_disk(asset: Asset, memory_limit: int) -> bool:
    """Whether an asset of this declared size is streamed to a temp file."""
    return asset.size > memory_limit


def create_download_session() -> aiohttp.ClientSession:
    """Session for asset bodies: raw bytes, no overall time limit."""
    return create_session(auto_decompress=False, timeout=DOWNLOAD_TIMEOUT)


def create_sink(asset: Asset, memory_limit: int) -> Sink:
    if uses_disk(asset, memory_limit):
        try:
            return DiskSink()
        except OSError as e:
            raise DownloadFailedError(
                f"Failed to create temporary file: {e}", asset.download_url
            ) from e
    return MemorySink()


async def stream_to_sink(
    session: aiohttp.ClientSession,
    asset: Asset,
    sink: Sink,
    progress: Optional[ProgressCallback] = None,
) -> int:
    """Stream the asset body into ``sink`` chunk by chunk; return bytes received."""
    received = 0
    async with session.get(asset.download_url) as response:
        if not 200 <= response.status < 300:
            logger.error(
                "download_request_failed",
                url=asset.download_url,
                status=response.status,
                reason=response.reason,
            )
            raise DownloadFailedError(
                f"Download failed with status {response.status}",
                asset.download_url,
                status=response.status,
            )

        async for chunk in response.content.iter_chunked(CHUNK_SIZE):
            sink.write(chunk)
            received += len(chunk)
            if progress is not None:
                progress(len(chunk))

        logger.debug(
            "download_stream_complete",
            url=asset.download_url,
            received=received,
            content_length=response.headers.get("Content-Length"),
        )
    return received


async def download_asset(
    asset: Asset,
    memory_limit: int,
    session: Optional[aiohttp.ClientSession] = None,
    progress: Optional[ProgressCallback] = None,
) -> DownloadedPayload:
    """Download an asset into memory or a temp file depending on its declared size.

    Args:
        asset: Asset to download
        memory_limit: Largest declared size kept in memory
        session: Session to reuse; a private one is opened otherwise
        progress: Called with the length of every chunk written

    Returns:
        Payload holding every byte of the asset

    Raises:
        DownloadFailedError: On non-success status, transport or I/O error,
            or when the byte count differs from the declared size
    """
    sink = create_sink(asset, memory_limit)
    logger.info(
        "download_started",
        asset=asset.name,
        url=asset.download_url,
        size=asset.size,
        memory_limit=memory_limit,
        storage="disk" if isinstance(sink, DiskSink) else "memory",
    )

    try:
        if session is None:
            async with create_download_session() as own_session:
                received = await stream_to_sink(own_session, asset, sink, progress)
        else:
            received = await stream_to_sink(session, asset, sink, progress)

        if asset.size and received != asset.size:
            raise DownloadFailedError(
                f"Incomplete download of {asset.name}: "
                f"received {received} of {asset.size} bytes",
                asset.download_url,
                received=received,
                expected=asset.size,
            )
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        sink.discard()
        logger.error("download_failed", url=asset.download_url, error=str(e))
        raise DownloadFailedError(
            f"Failed to download {asset.name}: {e}", asset.download_url
        ) from e
    except BaseException:
        sink.discard()
        raise

    payload = sink.finish()
    logger.info("download_complete", asset=asset.name, size=received, storage=payload.kind)
    return payload
