"""Tests for the command-line interface."""

import io
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from rich.console import Console
from typer.testing import CliRunner

from binfetch import __version__
from binfetch.cli import ConsoleReporter, app
from binfetch.errors import MetadataFetchError, NoMatchingAssetError
from binfetch.types import Architecture, Asset, InstallResult, OperatingSystem, Release

runner = CliRunner()

ASSET = Asset("tool-x86_64-unknown-linux-gnu.tar.gz", "https://example.invalid/t.tar.gz", 500)


@pytest.fixture
def mock_install():
    result = InstallResult(tag="v2.0.0", asset=ASSET, path=Path("bin/tool"))
    with patch("binfetch.cli.install", new_callable=AsyncMock, return_value=result) as m:
        yield m


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"binfetch {__version__}" in result.output


def test_list_platforms():
    result = runner.invoke(app, ["--list-platforms"])
    assert result.exit_code == 0
    assert "linux-x86_64" in result.output
    assert "windows-aarch64" in result.output
    assert "amd64=x86_64" in result.output


def test_repository_required():
    result = runner.invoke(app, [])
    assert result.exit_code == 1
    assert "Repository is required" in result.output


def test_list_requires_repository():
    result = runner.invoke(app, ["--list"])
    assert result.exit_code == 1
    assert "--list requires a repository" in result.output


def test_list_releases():
    releases = [Release("v2.0.0"), Release("v1.0.0")]
    with patch("binfetch.cli.list_releases", new_callable=AsyncMock, return_value=releases) as m:
        result = runner.invoke(app, ["acme/tool", "--list", "--api-url", "http://ghe.example"])

    assert result.exit_code == 0
    assert "Available releases for acme/tool:" in result.output
    assert "  - v2.0.0" in result.output
    assert "  - v1.0.0" in result.output
    assert m.await_args.args[1:] == ("acme/tool", "http://ghe.example")


def test_install_builds_config(mock_install, tmp_path):
    result = runner.invoke(app, [
        "acme/tool",
        "--tag", "v2.0.0",
        "--destination", str(tmp_path),
        "--os", "Linux",
        "--arch", "amd64",
        "--exclude", "musl, Debug",
        "--first",
        "-m", "1000",
    ])

    assert result.exit_code == 0, result.output
    config = mock_install.await_args.args[0]
    assert config.repo == "acme/tool"
    assert config.tag == "v2.0.0"
    assert config.destination == tmp_path
    assert config.platform.os == OperatingSystem.LINUX
    assert config.platform.arch == Architecture.X86_64
    assert config.exclude == ("musl", "debug")
    assert config.auto_first
    assert config.memory_limit == 1000
    assert not config.no_decompress
    assert config.binary_name == "tool"
    assert "Using platform: linux-x86_64" in result.output
    assert f"Successfully installed 'tool' to {Path('bin/tool')}" in result.output


def test_windows_success_names_written_file(tmp_path):
    written = tmp_path / "tool.exe"
    result_value = InstallResult(tag="v2.0.0", asset=ASSET, path=written)
    with patch("binfetch.cli.install", new_callable=AsyncMock, return_value=result_value):
        result = runner.invoke(app, ["acme/tool", "--os", "windows", "--arch", "x64"])

    assert result.exit_code == 0, result.output
    assert f"Successfully installed 'tool.exe' to {written}" in result.output


def test_install_defaults(mock_install):
    with patch("binfetch.platforms.platform.system", return_value="Darwin"), \
         patch("binfetch.platforms.platform.machine", return_value="arm64"):
        result = runner.invoke(app, ["acme/tool", "-b", "tl"])

    assert result.exit_code == 0, result.output
    config = mock_install.await_args.args[0]
    assert config.tag is None
    assert config.memory_limit == 104857600
    assert config.destination == Path(".")
    assert config.api_base == "https://api.github.com"
    assert config.binary_name == "tl"
    assert "Detected platform: macos-aarch64" in result.output


def test_api_url_from_environment(mock_install):
    result = runner.invoke(
        app, ["acme/tool", "--os", "linux", "--arch", "x64"],
        env={"BINFETCH_API_URL": "https://ghe.example/api/v3"},
    )
    assert result.exit_code == 0, result.output
    assert mock_install.await_args.args[0].api_base == "https://ghe.example/api/v3"


def test_raw_mode_message(tmp_path):
    saved = tmp_path / ASSET.name
    result_value = InstallResult(tag="v2.0.0", asset=ASSET, path=saved, raw=True)
    with patch("binfetch.cli.install", new_callable=AsyncMock, return_value=result_value) as m:
        result = runner.invoke(app, ["acme/tool", "--no-decompress", "--os", "linux", "--arch", "x64"])

    assert result.exit_code == 0, result.output
    assert m.await_args.args[0].no_decompress
    assert f"Saved raw asset to {saved}" in result.output


def test_invalid_os():
    result = runner.invoke(app, ["acme/tool", "--os", "beos"])
    assert result.exit_code == 1
    assert "Invalid OS 'beos'" in result.output


def test_invalid_arch():
    result = runner.invoke(app, ["acme/tool", "--os", "linux", "--arch", "mips"])
    assert result.exit_code == 1
    assert "Invalid architecture 'mips'" in result.output


@pytest.mark.parametrize(
    "error",
    [
        NoMatchingAssetError("linux", "x86_64"),
        MetadataFetchError("Failed to fetch release info: 404 Not Found", "https://x", 404),
    ],
)
def test_install_failure_exits_nonzero(error):
    with patch("binfetch.cli.install", new_callable=AsyncMock, side_effect=error):
        result = runner.invoke(app, ["acme/tool", "--os", "linux", "--arch", "x64"])

    assert result.exit_code == 1
    assert f"Error: {error}" in result.output


def test_negative_memory_limit_rejected():
    result = runner.invoke(app, ["acme/tool", "-m", "-1"])
    assert result.exit_code != 0


def test_console_reporter_output():
    stream = io.StringIO()
    reporter = ConsoleReporter(Console(file=stream, soft_wrap=True), memory_limit=10)

    reporter.release_selected(Release("v2.0.0"))
    reporter.asset_selected(ASSET)
    advance = reporter.download_started(ASSET, on_disk=True)
    advance(250)
    advance(250)
    reporter.download_finished(ASSET)
    reporter.write("1. [odd] name")

    output = stream.getvalue()
    assert "Selected version: v2.0.0" in output
    assert f"Selected asset: {ASSET.name}" in output
    assert "Using temp file due to size > 10 bytes" in output
    assert "1. [odd] name" in output
