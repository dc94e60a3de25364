"""Command-line entry point."""
import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from binfetch import __version__
from binfetch.client import create_session
from binfetch.constants import API_URL_ENV, DEFAULT_MEMORY_LIMIT, GITHUB_API_BASE
from binfetch.download import ProgressCallback
from binfetch.errors import BinfetchError, MissingInputError, log_error
from binfetch.installer import Reporter, install
from binfetch.logging import configure_logging, get_logger
from binfetch.platforms import ARCH_ALIASES, resolve_platform, supported_platforms
from binfetch.releases import list_releases
from binfetch.selection import parse_exclude
from binfetch.types import Asset, InstallConfig, Release

app = typer.Typer(add_completion=False, help="GitHub Release Downloader")
logger = get_logger(__name__)


class ConsoleReporter(Reporter):
    """Prints pipeline progress and asks for choices on the terminal."""

    def __init__(self, console: Console, memory_limit: int):
        self.console = console
        self.memory_limit = memory_limit
        self._progress: Optional[Progress] = None

    def release_selected(self, release: Release) -> None:
        self.console.print(f"Selected version: {release.tag}", markup=False)

    def asset_selected(self, asset: Asset) -> None:
        self.console.print(f"Selected asset: {asset.name}", markup=False)

    def download_started(self, asset: Asset, on_disk: bool) -> Optional[ProgressCallback]:
        self.console.print("Downloading...")
        if on_disk:
            self.console.print(f"Using temp file due to size > {self.memory_limit} bytes")
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            transient=True,
            console=self.console,
        )
        self._progress.start()
        task = self._progress.add_task(asset.name, total=asset.size or None)
        return lambda n: self._progress.advance(task, n)

    def download_finished(self, asset: Asset) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None

    def read(self, prompt: str) -> str:
        return self.console.input(prompt)

    def write(self, line: str) -> None:
        self.console.print(line, markup=False, highlight=False)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"binfetch {__version__}")
        raise typer.Exit()


def print_platforms(console: Console) -> None:
    console.print("Supported platforms:")
    for spec in supported_platforms():
        console.print(f"  - {spec}")
    aliases = ", ".join(f"{alias}={arch.value}" for alias, arch in ARCH_ALIASES.items())
    console.print(f"Architecture aliases: {aliases}", highlight=False)


async def print_releases(console: Console, repo: str, api_base: str) -> None:
    async with create_session() as session:
        releases = await list_releases(session, repo, api_base)
    console.print(f"Available releases for {repo}:", markup=False)
    for release in releases:
        console.print(f"  - {release.tag}", markup=False)


@app.command()
def main(
    repo: Optional[str] = typer.Argument(None, help="GitHub repository (e.g., owner/repo)"),
    tag: Optional[str] = typer.Option(
        None, "--tag", "-t", help="Version to download (e.g., v1.2.3). If omitted, uses latest"
    ),
    list_: bool = typer.Option(False, "--list", "-l", help="List available release versions"),
    destination: Path = typer.Option(Path("."), "--destination", "-d", help="Destination directory"),
    bin_name: Optional[str] = typer.Option(
        None, "--bin-name", "-b",
        help="Executable file name (defaults to repository name if not specified)",
    ),
    first: bool = typer.Option(
        False, "--first", help="Always select the first matching asset without prompting"
    ),
    exclude: Optional[str] = typer.Option(
        None, "--exclude", help="Comma-separated list of words to exclude from asset matching"
    ),
    no_decompress: bool = typer.Option(
        False, "--no-decompress", help="Save downloaded file without decompressing/extracting it"
    ),
    memory_limit: int = typer.Option(
        DEFAULT_MEMORY_LIMIT, "--memory-limit", "-m", min=0,
        help="Memory limit in bytes; downloads larger than this use temp files",
    ),
    os_name: Optional[str] = typer.Option(
        None, "--os", help="Target OS (windows, macos, linux, auto-detect if omitted)"
    ),
    arch: Optional[str] = typer.Option(
        None, "--arch", help="Target architecture (x86_64, aarch64, auto-detect if omitted)"
    ),
    list_platforms: bool = typer.Option(
        False, "--list-platforms", help="List supported platform combinations"
    ),
    api_url: str = typer.Option(
        GITHUB_API_BASE, "--api-url", envvar=API_URL_ENV, help="GitHub API base URL"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Download a release asset and install its executable."""
    configure_logging("DEBUG" if verbose else "WARNING")
    console = Console(soft_wrap=True)
    err_console = Console(stderr=True, soft_wrap=True)

    try:
        if list_platforms:
            print_platforms(console)
            return

        if list_:
            if not repo:
                raise MissingInputError("--list requires a repository")
            asyncio.run(print_releases(console, repo, api_url))
            return

        if not repo:
            raise MissingInputError("Repository is required")

        platform_spec = resolve_platform(os_name, arch)
        config = InstallConfig(
            repo=repo,
            platform=platform_spec,
            destination=destination,
            tag=tag,
            bin_name=bin_name,
            auto_first=first,
            exclude=parse_exclude(exclude),
            memory_limit=memory_limit,
            no_decompress=no_decompress,
            api_base=api_url,
        )
        if os_name is None and arch is None:
            console.print(f"Detected platform: {platform_spec}")
        else:
            console.print(f"Using platform: {platform_spec}")

        result = asyncio.run(install(config, ConsoleReporter(console, memory_limit)))

    except BinfetchError as e:
        log_error(e, {"repo": repo, "tag": tag}, logger)
        err_console.print(f"Error: {e}", markup=False, highlight=False)
        raise typer.Exit(code=1)

    if result.raw:
        console.print(f"Saved raw asset to {result.path}", markup=False)
    else:
        console.print(
            f"Successfully installed '{result.path.name}' to {result.path}",
            markup=False,
        )
