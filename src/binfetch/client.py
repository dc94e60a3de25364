"""HTTP session factory."""
import aiohttp

from binfetch.constants import USER_AGENT


def create_session(**kwargs) -> aiohttp.ClientSession:
    """Create a client session carrying the binfetch User-Agent."""
    headers = {"User-Agent": USER_AGENT, **kwargs.pop("headers", {})}
    return aiohttp.ClientSession(headers=headers, **kwargs)
