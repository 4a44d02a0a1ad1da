"""Archive extraction helpers.

These are blocking filesystem operations; async callers run them through
``asyncio.to_thread``.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path

from n8n_bootstrap.contracts.exceptions import ExtractionError

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".tar.gz", ".tgz", ".zip")


def archive_suffix(url: str) -> str | None:
    """Return the archive suffix of *url* (query string ignored), or ``None``."""
    path = url.split("?", 1)[0].lower()
    for suffix in ARCHIVE_SUFFIXES:
        if path.endswith(suffix):
            return suffix
    return None


def _ensure_inside(root: Path, member: str) -> Path:
    target = (root / member).resolve()
    if target != root and root not in target.parents:
        raise ExtractionError(f"archive member escapes target directory: {member}")
    return target


def extract_zip(source: bytes | Path, dest: Path) -> None:
    root = dest.resolve()
    handle = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        with zipfile.ZipFile(handle) as archive:
            for info in archive.infolist():
                target = _ensure_inside(root, info.filename)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as src, target.open("wb") as out:
                    shutil.copyfileobj(src, out)
                mode = info.external_attr >> 16
                if mode & 0o777:
                    target.chmod(mode & 0o777)
    except zipfile.BadZipFile as exc:
        raise ExtractionError(f"invalid zip archive: {exc}") from exc
    except OSError as exc:
        raise ExtractionError(f"zip extraction failed: {exc}") from exc


def extract_tgz(source: bytes | Path, dest: Path) -> None:
    root = dest.resolve()
    try:
        if isinstance(source, bytes):
            archive = tarfile.open(fileobj=io.BytesIO(source), mode="r:gz")
        else:
            archive = tarfile.open(source, mode="r:gz")
        with archive:
            members = archive.getmembers()
            for member in members:
                _ensure_inside(root, member.name)
            archive.extractall(root, members=members, filter="tar")
    except tarfile.TarError as exc:
        raise ExtractionError(f"tar.gz extraction failed: {exc}") from exc
    except OSError as exc:
        raise ExtractionError(f"tar.gz extraction failed: {exc}") from exc


def extract_archive(source: bytes | Path, dest: Path, *, suffix: str) -> None:
    if suffix in (".tar.gz", ".tgz"):
        extract_tgz(source, dest)
    elif suffix == ".zip":
        extract_zip(source, dest)
    else:
        raise ExtractionError(f"unsupported archive type: {suffix}")


def flatten_directory(dest: Path) -> None:
    """Hoist the contents of a single wrapping directory (e.g. ``node-v20-darwin-x64/``) into *dest*."""
    subdirs = [entry for entry in dest.iterdir() if entry.is_dir() and not entry.name.startswith(".")]
    if len(subdirs) != 1:
        return

    wrapper = subdirs[0]
    logger.debug("Flattening %s into %s", wrapper, dest)
    for child in wrapper.iterdir():
        target = dest / child.name
        if target.exists():
            raise ExtractionError(f"cannot flatten archive, {target} already exists")
        child.rename(target)
    wrapper.rmdir()


def fix_permissions(root: Path) -> None:
    """Mark every regular file under *root* ``0o755`` so bundled binaries can run."""
    if os.name != "posix":
        return
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            path = Path(dirpath) / name
            if path.is_symlink():
                continue
            path.chmod(stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH)
