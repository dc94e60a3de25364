"""Executable extraction from zip, tar.gz and raw payloads."""
import gzip
import os
import tarfile
import tempfile
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Callable, Dict

from binfetch.constants import CHUNK_SIZE, EXECUTABLE_MODE
from binfetch.errors import ArchiveReadError, ExecutableNotFoundError, InstallFilesystemError
from binfetch.logging import get_logger
from binfetch.payload import TEMP_PREFIX, DownloadedPayload

logger = get_logger(__name__)

ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    tarfile.TarError,
    gzip.BadGzipFile,
    zlib.error,
    EOFError,
    NotImplementedError,  # unsupported zip compression
)


def archive_format(filename: str) -> str:
    """Archive format from the asset file name: 'zip', 'tar.gz' or 'raw'."""
    lowered = filename.lower()
    if lowered.endswith(".zip"):
        return "zip"
    if lowered.endswith((".tar.gz", ".tgz")):
        return "tar.gz"
    return "raw"


def ensure_directory(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InstallFilesystemError(f"Failed to create directory {path}: {e}", str(path)) from e


def set_executable(path: Path) -> None:
    """Normalize the installed file to mode 0755 on POSIX hosts."""
    if os.name == "nt":
        return
    try:
        path.chmod(EXECUTABLE_MODE)
    except OSError as e:
        raise InstallFilesystemError(f"Failed to set permissions on {path}: {e}", str(path)) from e


def write_entry(source: BinaryIO, out_path: Path, archive: str) -> None:
    """Copy ``source`` to ``out_path`` and mark it executable.

    Bytes go to a temporary file beside ``out_path`` that replaces it only
    once fully written, so a failed read never clobbers an existing file.
    Read failures are archive errors; write failures are filesystem errors.
    """
    try:
        out = tempfile.NamedTemporaryFile(prefix=TEMP_PREFIX, dir=out_path.parent, delete=False)
    except OSError as e:
        raise InstallFilesystemError(f"Failed to create {out_path}: {e}", str(out_path)) from e

    tmp_path = Path(out.name)
    try:
        with out:
            while True:
                try:
                    chunk = source.read(CHUNK_SIZE)
                except ARCHIVE_ERRORS as e:
                    raise ArchiveReadError(f"Failed to read {archive}: {e}", archive) from e
                if not chunk:
                    break
                try:
                    out.write(chunk)
                except OSError as e:
                    raise InstallFilesystemError(
                        f"Failed to write {out_path}: {e}", str(out_path)
                    ) from e
        set_executable(tmp_path)
        try:
            os.replace(tmp_path, out_path)
        except OSError as e:
            raise InstallFilesystemError(f"Failed to write {out_path}: {e}", str(out_path)) from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def save_raw(payload: DownloadedPayload, file_name: str, dest_dir: Path) -> Path:
    """Write the payload verbatim to ``dest_dir/file_name``."""
    out_path = dest_dir / file_name
    try:
        with payload.open() as source:
            write_entry(source, out_path, file_name)
    except OSError as e:
        raise InstallFilesystemError(f"Failed to read payload for {file_name}: {e}", file_name) from e
    return out_path


def extract_zip(payload: DownloadedPayload, target: str, dest_dir: Path, archive: str) -> Path:
    """Extract the first zip entry whose path ends with ``target``."""
    out_path = dest_dir / target
    try:
        with payload.open() as stream, zipfile.ZipFile(stream) as zf:
            for info in zf.infolist():
                if info.is_dir() or not info.filename.endswith(target):
                    continue
                logger.debug("archive_entry_matched", archive=archive, entry=info.filename)
                try:
                    member = zf.open(info)
                except RuntimeError as e:
                    # zipfile refuses encrypted entries without a password
                    raise ArchiveReadError(
                        f"Cannot extract encrypted entry {info.filename} from {archive}", archive
                    ) from e
                with member:
                    write_entry(member, out_path, archive)
                return out_path
            names = zf.namelist()
    except ARCHIVE_ERRORS as e:
        raise ArchiveReadError(f"Failed to read {archive}: {e}", archive) from e
    except OSError as e:
        raise InstallFilesystemError(f"Failed to read payload for {archive}: {e}", archive) from e

    logger.error("binary_not_found", archive=archive, binary_name=target, available_files=names)
    raise ExecutableNotFoundError(target, archive)


def extract_tar_gz(payload: DownloadedPayload, target: str, dest_dir: Path, archive: str) -> Path:
    """Extract the first regular tar member whose path ends with ``target``.

    The archive is read as a gzip stream, so no seeking is needed.
    """
    out_path = dest_dir / target
    seen = []
    try:
        with payload.open() as stream, tarfile.open(fileobj=stream, mode="r|gz") as tf:
            for member in tf:
                seen.append(member.name)
                if not member.isfile() or not member.name.endswith(target):
                    continue
                logger.debug("archive_entry_matched", archive=archive, entry=member.name)
                source = tf.extractfile(member)
                write_entry(source, out_path, archive)
                return out_path
    except ARCHIVE_ERRORS as e:
        raise ArchiveReadError(f"Failed to read {archive}: {e}", archive) from e
    except OSError as e:
        raise InstallFilesystemError(f"Failed to read payload for {archive}: {e}", archive) from e

    logger.error("binary_not_found", archive=archive, binary_name=target, available_files=seen)
    raise ExecutableNotFoundError(target, archive)


EXTRACTORS: Dict[str, Callable[[DownloadedPayload, str, Path, str], Path]] = {
    "zip": extract_zip,
    "tar.gz": extract_tar_gz,
}


def extract_and_save(
    payload: DownloadedPayload,
    asset_name: str,
    target: str,
    dest_dir: Path,
    no_decompress: bool = False,
) -> Path:
    """Install the executable contained in ``payload`` into ``dest_dir``.

    The payload is consumed: it is closed, and any temporary file removed,
    whether extraction succeeds or fails.

    Args:
        payload: Downloaded asset bytes
        asset_name: Asset file name, used to pick the archive format
        target: Platform-adjusted executable name to look for and write
        dest_dir: Destination directory, created if missing
        no_decompress: Save the asset as-is under ``asset_name``

    Returns:
        Path of the written file
    """
    with payload:
        ensure_directory(dest_dir)

        if no_decompress:
            path = save_raw(payload, Path(asset_name).name, dest_dir)
            logger.info("raw_asset_saved", asset=asset_name, path=str(path))
            return path

        fmt = archive_format(asset_name)
        extractor = EXTRACTORS.get(fmt)
        if extractor is None:
            path = save_raw(payload, target, dest_dir)
        else:
            path = extractor(payload, target, dest_dir, asset_name)

        logger.info(
            "binary_extracted",
            archive=asset_name,
            format=fmt,
            binary=target,
            extracted_to=str(path),
        )
        return path
