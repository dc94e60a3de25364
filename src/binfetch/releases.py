"""Release metadata lookup against the GitHub REST API."""
from typing import Any, List, Optional

import aiohttp

from binfetch.constants import (
    GITHUB_ACCEPT,
    GITHUB_API_BASE,
    GITHUB_REPOS_PATH,
    LATEST_PATH,
    RELEASES_PATH,
    TAGS_PATH,
)
from binfetch.errors import MetadataFetchError
from binfetch.logging import get_logger
from binfetch.types import Release

logger = get_logger(__name__)


def releases_url(repo: str, api_base: str = GITHUB_API_BASE) -> str:
    return f"{api_base.rstrip('/')}/{GITHUB_REPOS_PATH}/{repo}/{RELEASES_PATH}"


def release_url(repo: str, tag: Optional[str] = None, api_base: str = GITHUB_API_BASE) -> str:
    """URL of the release for ``tag``, or of the latest release."""
    base = releases_url(repo, api_base)
    if tag:
        return f"{base}/{TAGS_PATH}/{tag}"
    return f"{base}/{LATEST_PATH}"


async def get_json(session: aiohttp.ClientSession, url: str) -> Any:
    """GET a JSON document, mapping every failure to MetadataFetchError."""
    logger.debug("metadata_request", url=url)
    try:
        async with session.get(url, headers={"Accept": GITHUB_ACCEPT}) as response:
            if not 200 <= response.status < 300:
                logger.error("metadata_request_failed", url=url, status=response.status)
                raise MetadataFetchError(
                    f"Failed to fetch release info: {response.status} {response.reason or ''}".rstrip(),
                    url,
                    status=response.status,
                )
            return await response.json(content_type=None)
    except aiohttp.ClientError as e:
        logger.error("metadata_request_failed", url=url, error=str(e))
        raise MetadataFetchError(f"Failed to fetch release info: {e}", url) from e
    except ValueError as e:
        raise MetadataFetchError(f"Invalid release metadata from {url}: {e}", url) from e


def parse_release(data: Any, url: str) -> Release:
    try:
        return Release.from_api(data)
    except (KeyError, TypeError, ValueError) as e:
        raise MetadataFetchError(f"Invalid release metadata from {url}: {e}", url) from e


async def fetch_release(
    session: aiohttp.ClientSession,
    repo: str,
    tag: Optional[str] = None,
    api_base: str = GITHUB_API_BASE,
) -> Release:
    """Fetch one release by tag, or the latest release."""
    url = release_url(repo, tag, api_base)
    release = parse_release(await get_json(session, url), url)
    logger.info("release_fetched", repo=repo, tag=release.tag, assets=len(release.assets))
    return release


async def list_releases(
    session: aiohttp.ClientSession,
    repo: str,
    api_base: str = GITHUB_API_BASE,
) -> List[Release]:
    """Fetch the repository's releases, newest first as returned by the API."""
    url = releases_url(repo, api_base)
    data = await get_json(session, url)
    if not isinstance(data, list):
        raise MetadataFetchError(f"Invalid release list from {url}", url)
    return [parse_release(item, url) for item in data]
