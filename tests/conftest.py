import io
import logging
import tarfile
import zipfile
from typing import Dict, Tuple, Union

import pytest
import pytest_asyncio
import structlog
from aiohttp import web
from aiohttp.test_utils import TestServer

from binfetch.types import Architecture, OperatingSystem, PlatformSpec

Route = Tuple[int, Union[bytes, dict, list]]


def make_zip(entries: Dict[str, bytes]) -> bytes:
    """Build a zip archive in memory"""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


def make_tar_gz(entries: Dict[str, bytes], mode: int = 0o644) -> bytes:
    """Build a gzip-compressed tar archive in memory"""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class ReleaseServer:
    """Local stand-in for the GitHub API and asset host"""

    def __init__(self):
        self.routes: Dict[str, Route] = {}
        self.requests = []
        self.server: TestServer = None

    def add(self, path: str, body: Union[bytes, dict, list], status: int = 200) -> str:
        self.routes[path] = (status, body)
        return self.url(path)

    def url(self, path: str = "") -> str:
        return str(self.server.make_url(path))

    async def handle(self, request: web.Request) -> web.StreamResponse:
        self.requests.append(request)
        if request.path not in self.routes:
            return web.Response(status=404, text="Not Found")
        status, body = self.routes[request.path]
        if isinstance(body, (dict, list)):
            return web.json_response(body, status=status)
        return web.Response(body=body, status=status, content_type="application/octet-stream")


@pytest_asyncio.fixture
async def release_server():
    """Serve canned API responses and asset bodies over real HTTP"""
    rs = ReleaseServer()
    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", rs.handle)
    rs.server = TestServer(app)
    await rs.server.start_server()
    try:
        yield rs
    finally:
        await rs.server.close()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI attaches to captured streams"""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)


@pytest.fixture
def linux_x64() -> PlatformSpec:
    return PlatformSpec(os=OperatingSystem.LINUX, arch=Architecture.X86_64)


@pytest.fixture
def windows_x64() -> PlatformSpec:
    return PlatformSpec(os=OperatingSystem.WINDOWS, arch=Architecture.X86_64)


@pytest.fixture
def macos_arm() -> PlatformSpec:
    return PlatformSpec(os=OperatingSystem.MACOS, arch=Architecture.AARCH64)
