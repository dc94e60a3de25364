"""Error types for the release installer."""
from typing import Any, Dict, Optional

import structlog


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[structlog.stdlib.BoundLogger] = None
) -> None:
    """Log an error with context."""
    logger = logger or structlog.get_logger(__name__)

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error)
    }
    if context:
        error_info["context"] = context
    if isinstance(error, BinfetchError):
        error_info["details"] = error.details

    logger.error("install_failed", **error_info)


class BinfetchError(Exception):
    """Base error class for binfetch."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class MissingInputError(BinfetchError):
    """A required input (repository, interactive choice) was not given."""


class UnsupportedPlatformError(BinfetchError):
    """OS or architecture token outside the supported table."""
    def __init__(self, message: str, value: str):
        super().__init__(message, details={"value": value})


class MetadataFetchError(BinfetchError):
    """Release metadata could not be fetched or parsed."""
    def __init__(self, message: str, url: str, status: Optional[int] = None):
        super().__init__(message, details={"url": url, "status": status})


class NoMatchingAssetError(BinfetchError):
    """No release asset survived platform and exclusion filtering."""
    def __init__(self, os_name: str, arch: str):
        super().__init__(
            f"No matching asset found for {os_name}-{arch}",
            details={"os": os_name, "arch": arch}
        )


class InvalidSelectionError(BinfetchError):
    """Interactive choice was not a number within range."""
    def __init__(self, raw: str, count: int):
        super().__init__(
            f"Invalid choice. Enter a number between 1 and {count}.",
            details={"input": raw, "count": count}
        )


class DownloadFailedError(BinfetchError):
    """Asset transfer failed or came back incomplete."""
    def __init__(self, message: str, url: str, **details: Any):
        super().__init__(message, details={"url": url, **details})


class ArchiveReadError(BinfetchError):
    """Archive structure could not be read."""
    def __init__(self, message: str, archive: str):
        super().__init__(message, details={"archive": archive})


class ExecutableNotFoundError(BinfetchError):
    """No archive entry ends with the target executable name."""
    def __init__(self, binary_name: str, archive: str):
        super().__init__(
            f"Executable '{binary_name}' not found in archive",
            details={"binary_name": binary_name, "archive": archive}
        )


class InstallFilesystemError(BinfetchError):
    """Directory creation, file write or permission change failed."""
    def __init__(self, message: str, path: str):
        super().__init__(message, details={"path": path})
