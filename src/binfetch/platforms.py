"""Platform detection, normalization and asset-name matching."""
import platform
from typing import Dict, List, Optional, Tuple

from binfetch.errors import UnsupportedPlatformError
from binfetch.types import Architecture, OperatingSystem, PlatformSpec

# Accepted user tokens
OS_ALIASES: Dict[str, OperatingSystem] = {
    "windows": OperatingSystem.WINDOWS,
    "macos": OperatingSystem.MACOS,
    "linux": OperatingSystem.LINUX,
}

ARCH_ALIASES: Dict[str, Architecture] = {
    "x86_64": Architecture.X86_64,
    "amd64": Architecture.X86_64,
    "x64": Architecture.X86_64,
    "aarch64": Architecture.AARCH64,
    "arm64": Architecture.AARCH64,
}

# platform.system() values
HOST_SYSTEMS: Dict[str, OperatingSystem] = {
    "Windows": OperatingSystem.WINDOWS,
    "Darwin": OperatingSystem.MACOS,
    "Linux": OperatingSystem.LINUX,
}

# Substrings that mark an asset name as built for a platform
OS_MARKERS: Dict[OperatingSystem, Tuple[str, ...]] = {
    OperatingSystem.LINUX: ("linux", "unknown-linux"),
    OperatingSystem.MACOS: ("apple-darwin", "macos", "darwin"),
    OperatingSystem.WINDOWS: ("windows", "win64", "pc-windows"),
}

ARCH_MARKERS: Dict[Architecture, Tuple[str, ...]] = {
    Architecture.X86_64: ("x86_64", "amd64", "x64"),
    Architecture.AARCH64: ("aarch64", "arm64"),
}


def normalize_os(value: str) -> OperatingSystem:
    """Map an OS token to its canonical value."""
    try:
        return OS_ALIASES[value.strip().lower()]
    except KeyError:
        raise UnsupportedPlatformError(
            f"Invalid OS '{value}'. Supported: windows, macos, linux", value
        ) from None


def normalize_arch(value: str) -> Architecture:
    """Map an architecture token (or alias) to its canonical value."""
    try:
        return ARCH_ALIASES[value.strip().lower()]
    except KeyError:
        raise UnsupportedPlatformError(
            f"Invalid architecture '{value}'. "
            "Supported: x86_64 (aliases: amd64, x64), aarch64 (alias: arm64)",
            value,
        ) from None


def detect_os(system: Optional[str] = None) -> OperatingSystem:
    if system is None:
        system = platform.system()
    if system not in HOST_SYSTEMS:
        raise UnsupportedPlatformError(f"Unsupported operating system: {system}", system)
    return HOST_SYSTEMS[system]


def detect_arch(machine: Optional[str] = None) -> Architecture:
    if machine is None:
        machine = platform.machine()
    if machine.lower() not in ARCH_ALIASES:
        raise UnsupportedPlatformError(f"Unsupported architecture: {machine}", machine)
    return ARCH_ALIASES[machine.lower()]


def resolve_platform(os_name: Optional[str] = None, arch: Optional[str] = None) -> PlatformSpec:
    """Build the target platform from explicit tokens, falling back to the host.

    Each half is resolved on its own, so ``--os windows`` alone keeps the
    host architecture.
    """
    return PlatformSpec(
        os=normalize_os(os_name) if os_name is not None else detect_os(),
        arch=normalize_arch(arch) if arch is not None else detect_arch(),
    )


def matches_os(name: str, os_name: OperatingSystem) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in OS_MARKERS[os_name])


def matches_arch(name: str, arch: Architecture) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in ARCH_MARKERS[arch])


def matches_platform(name: str, spec: PlatformSpec) -> bool:
    """Check if an asset name is built for the given platform."""
    return matches_os(name, spec.os) and matches_arch(name, spec.arch)


def executable_name(bin_name: str, spec: PlatformSpec) -> str:
    """Platform-adjusted executable file name."""
    if spec.os is OperatingSystem.WINDOWS:
        return f"{bin_name}.exe"
    return bin_name


def supported_platforms() -> List[PlatformSpec]:
    """All supported os/arch combinations."""
    return [PlatformSpec(os=o, arch=a) for o in OperatingSystem for a in Architecture]
