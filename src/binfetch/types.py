"""Core type definitions"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from binfetch.constants import DEFAULT_MEMORY_LIMIT, GITHUB_API_BASE


class OperatingSystem(Enum):
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"


class Architecture(Enum):
    X86_64 = "x86_64"
    AARCH64 = "aarch64"


@dataclass(frozen=True)
class PlatformSpec:
    """Target platform for asset matching"""
    os: OperatingSystem
    arch: Architecture

    def __str__(self) -> str:
        return f"{self.os.value}-{self.arch.value}"


@dataclass(frozen=True)
class Asset:
    """One downloadable file attached to a release"""
    name: str
    download_url: str
    size: int

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Asset":
        return cls(
            name=data["name"],
            download_url=data["browser_download_url"],
            size=int(data.get("size") or 0),
        )


@dataclass(frozen=True)
class Release:
    """Tagged release and its assets, in API order"""
    tag: str
    assets: Tuple[Asset, ...] = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Release":
        return cls(
            tag=data["tag_name"],
            assets=tuple(Asset.from_api(a) for a in data.get("assets") or []),
        )


@dataclass(frozen=True)
class InstallConfig:
    """Install run configuration"""
    repo: str
    platform: PlatformSpec
    destination: Path = Path(".")
    tag: Optional[str] = None
    bin_name: Optional[str] = None
    auto_first: bool = False
    exclude: Tuple[str, ...] = ()
    memory_limit: int = DEFAULT_MEMORY_LIMIT
    no_decompress: bool = False
    api_base: str = GITHUB_API_BASE

    @property
    def binary_name(self) -> str:
        """Explicit binary name, or the repository name."""
        if self.bin_name:
            return self.bin_name
        return self.repo.rstrip("/").split("/")[-1] or "app"


@dataclass(frozen=True)
class InstallResult:
    """Outcome of a successful install"""
    tag: str
    asset: Asset
    path: Path
    raw: bool = False
