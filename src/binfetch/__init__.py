"""Install prebuilt executables from GitHub release assets."""

__version__ = "0.1.0"

from binfetch.types import (  # noqa: E402
    Architecture,
    Asset,
    InstallConfig,
    InstallResult,
    OperatingSystem,
    PlatformSpec,
    Release,
)
from binfetch.errors import (  # noqa: E402
    BinfetchError,
    MissingInputError,
    UnsupportedPlatformError,
    MetadataFetchError,
    NoMatchingAssetError,
    InvalidSelectionError,
    DownloadFailedError,
    ArchiveReadError,
    ExecutableNotFoundError,
    InstallFilesystemError,
)
from binfetch.installer import Reporter, install  # noqa: E402

__all__ = [
    # Types
    "Architecture",
    "Asset",
    "InstallConfig",
    "InstallResult",
    "OperatingSystem",
    "PlatformSpec",
    "Release",

    # Pipeline
    "Reporter",
    "install",

    # Error types
    "BinfetchError",
    "MissingInputError",
    "UnsupportedPlatformError",
    "MetadataFetchError",
    "NoMatchingAssetError",
    "InvalidSelectionError",
    "DownloadFailedError",
    "ArchiveReadError",
    "ExecutableNotFoundError",
    "InstallFilesystemError",
]
