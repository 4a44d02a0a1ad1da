"""Host-side owner of bootstrap attempts."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from n8n_bootstrap.contracts.state import BootstrapStatus
from n8n_bootstrap.engine.controller import BootstrapController

logger = logging.getLogger(__name__)

ControllerFactory = Callable[[], BootstrapController]


class BootstrapSession:
    """Keeps the current controller and replaces it on restart.

    The host (CLI, UI) only reads :attr:`status` and calls :meth:`restart`;
    it never mutates controller state directly.
    """

    def __init__(self, factory: ControllerFactory) -> None:
        self._factory = factory
        self._controller: BootstrapController | None = None
        self._task: asyncio.Task[BootstrapStatus] | None = None

    @property
    def controller(self) -> BootstrapController | None:
        return self._controller

    @property
    def status(self) -> BootstrapStatus:
        if self._controller is None:
            return BootstrapStatus()
        return self._controller.status

    def start(self) -> asyncio.Task[BootstrapStatus]:
        if self._task is not None and not self._task.done():
            raise RuntimeError("a bootstrap attempt is already running; use restart()")
        self._controller = self._factory()
        self._task = asyncio.get_running_loop().create_task(self._controller.run())
        return self._task

    async def restart(self) -> asyncio.Task[BootstrapStatus]:
        """Discard the current attempt and begin a fresh one from ``checking``."""
        logger.info("Restarting bootstrap")
        await self._discard()
        return self.start()

    async def wait(self) -> BootstrapStatus:
        if self._task is None:
            raise RuntimeError("no bootstrap attempt was started")
        return await self._task

    async def close(self) -> None:
        await self._discard()

    async def _discard(self) -> None:
        controller, task = self._controller, self._task
        self._controller = None
        self._task = None
        if controller is not None:
            controller.teardown()
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
