"""Streaming artifact downloader with progress events."""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from collections.abc import Callable
from pathlib import Path

import httpx

from n8n_bootstrap.contracts.events import DOWNLOAD_PROGRESS, EXTRACTION_START, ExtractionStartEvent, ProgressEvent
from n8n_bootstrap.contracts.exceptions import DownloadError
from n8n_bootstrap.contracts.state import DownloadKind
from n8n_bootstrap.events import EventBus
from n8n_bootstrap.runtime.archive import archive_suffix, extract_archive, fix_permissions, flatten_directory

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"

# Emit when progress moved this many percent, or this long since the last event.
_EMIT_STEP = 0.5
_EMIT_INTERVAL = 0.15


class Downloader:
    """Fetches artifacts over HTTP and reports progress on the event bus.

    A URL ending in an archive suffix and a destination without a file
    extension means "unpack into this directory"; anything else is written
    to *dest* as a file.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        events: EventBus,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._events = events
        self._clock = clock

    async def download(self, url: str, dest: Path, kind: DownloadKind) -> None:
        logger.info("Downloading %s -> %s", url, dest)
        buffer = await self._fetch(url, kind)

        suffix = archive_suffix(url)
        if suffix is not None and not dest.suffix:
            if dest.exists():
                await asyncio.to_thread(shutil.rmtree, dest)
            dest.mkdir(parents=True, exist_ok=True)

            self._events.emit(EXTRACTION_START, ExtractionStartEvent(kind=kind))
            await asyncio.to_thread(self._unpack, buffer, dest, suffix)
        else:
            dest.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(dest.write_bytes, buffer)

        self._emit_progress(100.0, kind)

    async def _fetch(self, url: str, kind: DownloadKind) -> bytes:
        chunks: list[bytes] = []
        try:
            async with self._client.stream("GET", url, headers={"User-Agent": USER_AGENT}) as response:
                if not response.is_success:
                    raise DownloadError(f"Download failed: HTTP {response.status_code} for {url}")

                total = int(response.headers.get("Content-Length") or 0)
                downloaded = 0
                last_percent = -1.0
                last_emit = self._clock()
                async for chunk in response.aiter_bytes():
                    chunks.append(chunk)
                    downloaded += len(chunk)
                    if total <= 0:
                        continue
                    percent = downloaded / total * 100.0
                    now = self._clock()
                    if percent - last_percent >= _EMIT_STEP or now - last_emit >= _EMIT_INTERVAL:
                        self._emit_progress(percent, kind)
                        last_percent = percent
                        last_emit = now
        except httpx.HTTPError as exc:
            raise DownloadError(f"Download failed for {url}: {exc}") from exc

        return b"".join(chunks)

    @staticmethod
    def _unpack(buffer: bytes, dest: Path, suffix: str) -> None:
        extract_archive(buffer, dest, suffix=suffix)
        flatten_directory(dest)
        fix_permissions(dest)

    def _emit_progress(self, percent: float, kind: DownloadKind) -> None:
        self._events.emit(DOWNLOAD_PROGRESS, ProgressEvent(percent=percent, kind=kind))
