"""Platform-specific runtime locations."""

from __future__ import annotations

import platform as _platform
from pathlib import Path

from n8n_bootstrap.contracts.exceptions import UnsupportedPlatformError

_MACHINE_ALIASES = {
    "arm64": "arm64",
    "aarch64": "arm64",
    "x86_64": "x64",
    "amd64": "x64",
}

# (system, arch) -> (node dist platform, archive suffix)
_NODE_BUILDS: dict[tuple[str, str], tuple[str, str]] = {
    ("darwin", "arm64"): ("darwin-arm64", "tar.gz"),
    ("darwin", "x64"): ("darwin-x64", "tar.gz"),
    ("linux", "x64"): ("linux-x64", "tar.gz"),
    ("linux", "arm64"): ("linux-arm64", "tar.gz"),
    ("windows", "x64"): ("win-x64", "zip"),
}


def current_system() -> str:
    return _platform.system().lower()


def current_machine() -> str:
    return _platform.machine().lower()


def package_platform(system: str | None = None) -> str:
    """Name of the n8n-core release asset platform for *system*."""
    system = (system or current_system()).lower()
    return "windows" if system == "windows" else "macos"


def node_download_url(version: str, mirror: str, *, system: str | None = None, machine: str | None = None) -> str:
    system = (system or current_system()).lower()
    raw_machine = (machine or current_machine()).lower()
    arch = _MACHINE_ALIASES.get(raw_machine, raw_machine)

    build = _NODE_BUILDS.get((system, arch))
    if build is None:
        raise UnsupportedPlatformError(f"Unsupported platform: {system} {raw_machine}")

    dist, suffix = build
    return f"{mirror.rstrip('/')}/{version}/node-{version}-{dist}.{suffix}"


def find_node_binary(runtime_dir: Path, *, system: str | None = None) -> Path:
    """Locate the node executable, searching nested folders left by un-flattened archives.

    Returns the expected direct path when nothing is found so callers can
    test ``.exists()``.
    """
    windows = (system or current_system()).lower() == "windows"
    direct = runtime_dir / ("node.exe" if windows else "bin/node")
    if direct.exists():
        return direct
    if not runtime_dir.is_dir():
        return direct

    names = {"node.exe"} if windows else {"node"}
    for candidate in sorted(runtime_dir.rglob("*")):
        if candidate.is_file() and candidate.name in names:
            return candidate
    return direct
