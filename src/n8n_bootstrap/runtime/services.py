"""Filesystem/network-backed implementation of the collaborator contract."""

from __future__ import annotations

import asyncio
import logging
import shutil
from types import TracebackType

import httpx

from n8n_bootstrap.contracts.config import BootstrapConfig, package_asset_name
from n8n_bootstrap.contracts.events import EXTRACTION_START, ExtractionStartEvent
from n8n_bootstrap.contracts.exceptions import LaunchError
from n8n_bootstrap.contracts.services import BootstrapServices
from n8n_bootstrap.contracts.state import DownloadKind
from n8n_bootstrap.events import EventBus
from n8n_bootstrap.runtime._retrying_transport import RetryingTransport
from n8n_bootstrap.runtime.archive import extract_zip
from n8n_bootstrap.runtime.downloader import Downloader
from n8n_bootstrap.runtime.health import HealthProbe
from n8n_bootstrap.runtime.integrity import fetch_release_sha256, sha256_file
from n8n_bootstrap.runtime.platform import find_node_binary, node_download_url, package_platform
from n8n_bootstrap.runtime.process import ProcessManager, n8n_environment

logger = logging.getLogger(__name__)


class LocalServices(BootstrapServices):
    """Installs into ``config.data_dir`` and runs n8n as a child process.

    Use as an async context manager so the HTTP client is closed::

        async with LocalServices(config, events) as services:
            ...
    """

    def __init__(
        self,
        config: BootstrapConfig,
        events: EventBus,
        *,
        client: httpx.AsyncClient | None = None,
        health_client: httpx.AsyncClient | None = None,
        processes: ProcessManager | None = None,
        system: str | None = None,
        machine: str | None = None,
    ) -> None:
        self._config = config
        self._events = events
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=RetryingTransport(max_retries=config.timings.download_retries),
            timeout=config.timings.http_timeout,
            follow_redirects=True,
        )
        # Health checks hit each endpoint exactly once per call.
        self._owns_health_client = health_client is None
        self._health_client = health_client or httpx.AsyncClient(transport=httpx.AsyncHTTPTransport(), timeout=5.0)
        self._downloader = Downloader(self._client, events)
        self._probe = HealthProbe(self._health_client, config.health_endpoints)
        self._processes = processes or ProcessManager()
        self._system = system
        self._machine = machine

    async def __aenter__(self) -> LocalServices:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
        if self._owns_health_client:
            await self._health_client.aclose()

    @property
    def processes(self) -> ProcessManager:
        return self._processes

    # -- BootstrapServices ------------------------------------------------

    async def setup_runtime(self) -> None:
        runtime_dir = self._config.runtime_dir
        if find_node_binary(runtime_dir, system=self._system).exists():
            logger.info("Node runtime already present in %s", runtime_dir)
            return

        url = node_download_url(
            self._config.node_version,
            self._config.node_mirror,
            system=self._system,
            machine=self._machine,
        )
        await self._downloader.download(url, runtime_dir, DownloadKind.RUNTIME)

    def is_installed(self) -> bool:
        return self._config.n8n_bin.exists()

    async def setup_n8n(self) -> None:
        platform = package_platform(self._system)
        archive = self._config.package_archive(platform)
        package_dir = self._config.package_dir

        if await self._needs_download(platform):
            await self._downloader.download(self._config.package_url(platform), archive, DownloadKind.CORE)

        if package_dir.exists():
            await asyncio.to_thread(shutil.rmtree, package_dir)
        package_dir.mkdir(parents=True, exist_ok=True)

        logger.info("Extracting %s into %s", archive, package_dir)
        self._events.emit(EXTRACTION_START, ExtractionStartEvent(kind=DownloadKind.CORE))
        await asyncio.to_thread(extract_zip, archive, package_dir)
        # The archive is kept so the next run can verify it instead of re-downloading.

    async def launch_n8n(self) -> None:
        node_path = find_node_binary(self._config.runtime_dir, system=self._system)
        if not node_path.exists():
            raise LaunchError("NODE_NOT_FOUND: run setup_runtime first")

        n8n_bin = self._config.n8n_bin
        if not n8n_bin.exists():
            raise LaunchError("N8N_CORE_NOT_FOUND: run setup_n8n first")

        user_data = self._config.user_data_dir
        user_data.mkdir(parents=True, exist_ok=True)

        env = n8n_environment(user_folder=user_data, host=self._config.host, port=self._config.port)
        await self._processes.start(node_path, n8n_bin, env=env)

    async def proxy_health_check(self) -> str:
        return await self._probe.check()

    # -- helpers ----------------------------------------------------------

    async def _needs_download(self, platform: str) -> bool:
        archive = self._config.package_archive(platform)
        remote = await fetch_release_sha256(self._client, self._config.release_api_url, package_asset_name(platform))

        if not archive.exists():
            logger.info("No cached package archive; downloading")
            return True

        if remote is None:
            logger.info("Using cached package archive %s without verification", archive)
            return False

        try:
            local = await asyncio.to_thread(sha256_file, archive)
        except OSError as exc:
            logger.warning("Could not hash cached archive (%s); downloading again", exc)
            return True

        if local == remote:
            logger.info("Cached package archive verified; skipping download")
            return False

        logger.warning("Cached archive digest mismatch (local %s, remote %s); downloading again", local, remote)
        archive.unlink()
        return True
