"""Child process supervision for the n8n service."""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import sys
from collections.abc import Mapping
from pathlib import Path

from n8n_bootstrap.contracts.exceptions import LaunchError

logger = logging.getLogger(__name__)

# CREATE_NO_WINDOW: keep the service from opening a console window on Windows.
_WINDOWS_CREATION_FLAGS = 0x08000000


def n8n_environment(*, user_folder: Path, host: str, port: int) -> dict[str, str]:
    return {
        "N8N_USER_FOLDER": str(user_folder),
        "N8N_DISABLE_INTERACTIVE_REPL": "true",
        "N8N_BLOCK_IFRAME_EMBEDS": "false",
        "N8N_USE_SAMESITE_COOKIE_STRICT": "false",
        "N8N_CORS_ALLOWED_ORIGINS": "*",
        "N8N_SECURE_COOKIE": "false",
        "N8N_USER_MANAGEMENT_DISABLED": "true",
        "SKIP_SETUP": "true",
        "N8N_PORT": str(port),
        "N8N_HOST": host,
    }


class ProcessManager:
    """Owns at most one running service process."""

    def __init__(self) -> None:
        self._process: asyncio.subprocess.Process | None = None

    @property
    def process(self) -> asyncio.subprocess.Process | None:
        return self._process

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self, node_path: Path, script: Path, *, env: Mapping[str, str]) -> None:
        if self.running:
            raise LaunchError("n8n process is already running")

        kwargs: dict[str, object] = {}
        if sys.platform == "win32":
            kwargs["creationflags"] = _WINDOWS_CREATION_FLAGS

        try:
            self._process = await asyncio.create_subprocess_exec(
                str(node_path),
                str(script),
                "start",
                env={**os.environ, **env},
                stdin=subprocess.DEVNULL,
                **kwargs,  # type: ignore[arg-type]
            )
        except OSError as exc:
            raise LaunchError(f"Failed to start process: {exc}") from exc
        logger.info("Started n8n (pid %s)", self._process.pid)

    async def wait(self) -> int | None:
        if self._process is None:
            return None
        return await self._process.wait()

    async def terminate(self, timeout: float = 5.0) -> None:
        process, self._process = self._process, None
        if process is None or process.returncode is not None:
            return
        logger.info("Stopping n8n (pid %s)", process.pid)
        try:
            process.terminate()
            await asyncio.wait_for(process.wait(), timeout=timeout)
        except ProcessLookupError:
            return
        except TimeoutError:
            logger.warning("n8n did not exit within %.1fs; killing it", timeout)
            process.kill()
            await process.wait()
