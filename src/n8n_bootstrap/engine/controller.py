"""Bootstrap state machine."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from n8n_bootstrap.contracts.config import BootstrapConfig
from n8n_bootstrap.contracts.events import DOWNLOAD_PROGRESS, EXTRACTION_START, ExtractionStartEvent, ProgressEvent
from n8n_bootstrap.contracts.exceptions import (
    EngineSetupFailed,
    HealthRetryExhausted,
    InstallVerificationFailed,
    LaunchFailed,
    OverallDeadlineExceeded,
    PackageSetupFailed,
    StageError,
)
from n8n_bootstrap.contracts.services import BootstrapServices
from n8n_bootstrap.contracts.state import BootstrapState, BootstrapStatus, DownloadKind
from n8n_bootstrap.engine.attribution import ProgressAttribution
from n8n_bootstrap.engine.health import is_healthy
from n8n_bootstrap.engine.observer import BootstrapObserver, NullBootstrapObserver
from n8n_bootstrap.events import EventBus, Unlisten
from n8n_bootstrap.messages import translate

logger = logging.getLogger(__name__)


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class BootstrapController:
    """Drives one bootstrap attempt from ``checking`` to ``ready`` or ``error``.

    All state lives on the instance and is only mutated from the event loop
    the controller runs on: stage coroutines, event listeners and timer
    callbacks never overlap mid-handler. One instance serves exactly one
    attempt; restarting means building a new controller.
    """

    def __init__(
        self,
        services: BootstrapServices,
        events: EventBus,
        config: BootstrapConfig | None = None,
        *,
        observer: BootstrapObserver | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._services = services
        self._events = events
        self._config = config or BootstrapConfig()
        self._timings = self._config.timings
        self._observer: BootstrapObserver = observer or NullBootstrapObserver()
        self._attribution = ProgressAttribution(debounce=self._timings.progress_debounce, clock=clock)

        self._state = BootstrapState.CHECKING
        self._error: StageError | None = None
        self._retry_count = 0

        self._loop: asyncio.AbstractEventLoop | None = None
        self._poll_timer: asyncio.TimerHandle | None = None
        self._deadline_timer: asyncio.TimerHandle | None = None
        self._grace_timer: asyncio.TimerHandle | None = None
        self._probes: set[asyncio.Task[None]] = set()
        self._unlisteners: list[Unlisten] = []
        self._finished: asyncio.Future[BootstrapStatus] | None = None
        self._task: asyncio.Task[BootstrapStatus] | None = None
        self._torn_down = False

    # -- observation ------------------------------------------------------

    @property
    def state(self) -> BootstrapState:
        """Internal state, including ``polling``."""
        return self._state

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def error(self) -> StageError | None:
        return self._error

    @property
    def status(self) -> BootstrapStatus:
        return BootstrapStatus(
            state=self._state.observable,
            progress=self._attribution.snapshot(),
            error_message=self._error.message if self._error is not None else "",
            error_kind=self._error.kind if self._error is not None else None,
            retry_count=self._retry_count,
        )

    @property
    def _inert(self) -> bool:
        return self._torn_down or self._state.is_terminal

    # -- lifecycle --------------------------------------------------------

    async def run(self) -> BootstrapStatus:
        """Run the attempt and return the terminal status."""
        if self._task is not None or self._torn_down:
            raise RuntimeError("a BootstrapController runs a single attempt")

        self._loop = asyncio.get_running_loop()
        self._task = asyncio.current_task()  # type: ignore[assignment]
        self._finished = self._loop.create_future()
        self._subscribe()

        try:
            try:
                await self._bootstrap()
            except StageError as exc:
                self._fail(exc)
            return await self._finished
        except asyncio.CancelledError:
            self.teardown()
            raise

    def teardown(self) -> None:
        """Release listeners, timers and in-flight work. Safe to call repeatedly and from any state."""
        if self._torn_down:
            return
        self._torn_down = True
        self._cancel_timers()
        self._cancel_probes()
        self._release_listeners()

        if self._finished is not None and not self._finished.done():
            self._finished.cancel()
        task = self._task
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

    # -- stages -----------------------------------------------------------

    async def _bootstrap(self) -> None:
        self._set_state(BootstrapState.PREPARING_ENGINE)
        await self._download_stage(DownloadKind.RUNTIME, self._services.setup_runtime, EngineSetupFailed)

        try:
            installed = self._services.is_installed()
        except Exception as exc:
            raise PackageSetupFailed(_describe(exc)) from exc

        if installed:
            logger.info("n8n package already installed; skipping download")
        else:
            self._set_state(BootstrapState.DOWNLOADING_CORE)
            await self._download_stage(DownloadKind.CORE, self._services.setup_n8n, PackageSetupFailed)
            self._attribution.complete()
            self._notify_progress()
            await self._verify_install()

        self._set_state(BootstrapState.STARTING)
        try:
            await self._services.launch_n8n()
        except Exception as exc:
            raise LaunchFailed(_describe(exc)) from exc

        self._start_polling()

    async def _download_stage(
        self,
        kind: DownloadKind,
        call: Callable[[], Awaitable[None]],
        error_cls: type[StageError],
    ) -> None:
        self._attribution.begin(kind)
        self._notify_progress()
        try:
            await call()
        except Exception as exc:
            logger.debug("%s stage failed", kind, exc_info=True)
            raise error_cls(_describe(exc)) from exc
        finally:
            self._attribution.end()

    async def _verify_install(self) -> None:
        attempts = self._timings.verify_attempts
        for attempt in range(1, attempts + 1):
            try:
                installed = self._services.is_installed()
            except Exception as exc:
                raise InstallVerificationFailed(_describe(exc)) from exc
            if installed:
                logger.debug("Install verified on attempt %d", attempt)
                return
            logger.info("n8n package not visible yet (attempt %d/%d)", attempt, attempts)
            if attempt < attempts:
                await asyncio.sleep(self._timings.verify_delay)

        raise InstallVerificationFailed(translate("errors.verification", self._config.locale))

    # -- health polling ---------------------------------------------------

    def _start_polling(self) -> None:
        assert self._loop is not None
        self._retry_count = 0
        self._state = BootstrapState.POLLING
        self._poll_timer = self._loop.call_later(self._timings.poll_interval, self._on_poll_tick)
        self._deadline_timer = self._loop.call_later(self._timings.startup_deadline, self._on_deadline)

    def _on_poll_tick(self) -> None:
        if self._inert or self._state is not BootstrapState.POLLING or self._grace_timer is not None:
            return
        assert self._loop is not None
        self._poll_timer = self._loop.call_later(self._timings.poll_interval, self._on_poll_tick)
        probe = self._loop.create_task(self._probe())
        self._probes.add(probe)
        probe.add_done_callback(self._probes.discard)

    async def _probe(self) -> None:
        try:
            result = await self._services.proxy_health_check()
        except Exception as exc:
            logger.warning("Health check polling error: %s", exc)
            healthy = False
        else:
            healthy = is_healthy(result)
        self._on_probe_result(healthy)

    def _on_probe_result(self, healthy: bool) -> None:
        if self._inert or self._grace_timer is not None:
            return
        assert self._loop is not None

        if healthy:
            logger.info("Health check passed; waiting %.1fs before handing off", self._timings.grace_period)
            self._cancel(self._poll_timer)
            self._poll_timer = None
            self._grace_timer = self._loop.call_later(self._timings.grace_period, self._on_grace_elapsed)
            return

        self._retry_count += 1
        logger.debug("Health check failed (%d/%d)", self._retry_count, self._timings.max_health_retries)
        if self._retry_count >= self._timings.max_health_retries:
            self._fail(HealthRetryExhausted(translate("errors.timeout", self._config.locale)))

    def _on_grace_elapsed(self) -> None:
        self._grace_timer = None
        if self._inert:
            return
        self._set_state(BootstrapState.READY)
        self._finish()

    def _on_deadline(self) -> None:
        self._deadline_timer = None
        if self._inert:
            return
        self._fail(OverallDeadlineExceeded(translate("errors.startup_timeout", self._config.locale)))

    # -- events -----------------------------------------------------------

    def _subscribe(self) -> None:
        self._unlisteners.append(self._events.listen(DOWNLOAD_PROGRESS, self._on_progress))
        self._unlisteners.append(self._events.listen(EXTRACTION_START, self._on_extraction_start))

    def _on_progress(self, event: ProgressEvent) -> None:
        if self._inert:
            return
        if self._attribution.accept_progress(event):
            self._notify_progress()

    def _on_extraction_start(self, event: ExtractionStartEvent) -> None:
        if self._inert or not self._attribution.accept_extraction(event):
            return
        if event.kind is DownloadKind.CORE:
            self._set_state(BootstrapState.EXTRACTING)

    # -- transitions ------------------------------------------------------

    def _set_state(self, state: BootstrapState) -> None:
        previous = self._state.observable
        self._state = state
        if state.observable is not previous:
            logger.debug("Bootstrap state: %s -> %s", previous, state.observable)
            self._observer.state_changed(self.status)

    def _notify_progress(self) -> None:
        self._observer.progress_changed(self.status)

    def _fail(self, error: StageError) -> None:
        if self._inert:
            return
        logger.error("Bootstrap failed (%s): %s", error.kind, error.message)
        self._error = error
        self._cancel_timers()
        self._set_state(BootstrapState.ERROR)
        self._finish()

    def _finish(self) -> None:
        self._cancel_timers()
        self._cancel_probes()
        self._release_listeners()
        if self._finished is not None and not self._finished.done():
            self._finished.set_result(self.status)

    # -- resource release -------------------------------------------------

    @staticmethod
    def _cancel(handle: asyncio.TimerHandle | None) -> None:
        if handle is not None:
            handle.cancel()

    def _cancel_timers(self) -> None:
        for handle in (self._poll_timer, self._deadline_timer, self._grace_timer):
            self._cancel(handle)
        self._poll_timer = None
        self._deadline_timer = None
        self._grace_timer = None

    def _cancel_probes(self) -> None:
        current = _current_task()
        for probe in list(self._probes):
            if probe is not current and not probe.done():
                probe.cancel()

    def _release_listeners(self) -> None:
        unlisteners, self._unlisteners = self._unlisteners, []
        for unlisten in unlisteners:
            unlisten()


def _current_task() -> asyncio.Task[object] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
