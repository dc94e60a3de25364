"""End-to-end install: release lookup, asset selection, download, extraction."""
from typing import Optional

import aiohttp

from binfetch.client import create_session
from binfetch.download import ProgressCallback, download_asset, uses_disk
from binfetch.extract import extract_and_save
from binfetch.logging import get_logger
from binfetch.platforms import executable_name
from binfetch.releases import fetch_release
from binfetch.selection import select_asset
from binfetch.types import Asset, InstallConfig, InstallResult, Release

logger = get_logger(__name__)


class Reporter:
    """User-facing hooks for each pipeline stage. The base class is silent."""

    def release_selected(self, release: Release) -> None:
        pass

    def asset_selected(self, asset: Asset) -> None:
        pass

    def download_started(self, asset: Asset, on_disk: bool) -> Optional[ProgressCallback]:
        return None

    def download_finished(self, asset: Asset) -> None:
        pass

    def read(self, prompt: str) -> str:
        raise EOFError

    def write(self, line: str) -> None:
        pass


async def install(
    config: InstallConfig,
    reporter: Optional[Reporter] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> InstallResult:
    """Install the executable from a release asset.

    Stages run strictly in order: metadata fetch, selection, download,
    extraction. Any failure ends the run with a BinfetchError.

    Args:
        config: Install run configuration
        reporter: Receives progress and answers the selection prompt
        session: Session for API calls; a private one is opened otherwise

    Returns:
        Release tag, chosen asset and path written
    """
    reporter = reporter or Reporter()

    if session is None:
        async with create_session() as own_session:
            release = await fetch_release(own_session, config.repo, config.tag, config.api_base)
    else:
        release = await fetch_release(session, config.repo, config.tag, config.api_base)
    reporter.release_selected(release)

    asset = select_asset(
        release.assets,
        config.platform,
        exclude=config.exclude,
        auto_first=config.auto_first,
        read=reporter.read,
        write=reporter.write,
    )
    logger.info("asset_selected", asset=asset.name, size=asset.size, platform=str(config.platform))
    reporter.asset_selected(asset)

    progress = reporter.download_started(asset, uses_disk(asset, config.memory_limit))
    try:
        payload = await download_asset(asset, config.memory_limit, progress=progress)
    finally:
        reporter.download_finished(asset)

    path = extract_and_save(
        payload,
        asset.name,
        executable_name(config.binary_name, config.platform),
        config.destination,
        no_decompress=config.no_decompress,
    )
    logger.info("install_complete", repo=config.repo, tag=release.tag, path=str(path))
    return InstallResult(tag=release.tag, asset=asset, path=path, raw=config.no_decompress)
