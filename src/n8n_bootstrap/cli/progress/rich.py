"""Rich-based bootstrap status display."""

from __future__ import annotations

from types import TracebackType

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn

from n8n_bootstrap.contracts.state import BootstrapState, BootstrapStatus
from n8n_bootstrap.engine.observer import BootstrapObserver
from n8n_bootstrap.messages import translate


def describe_status(status: BootstrapStatus, locale: str = "en", *, url: str = "") -> str:
    """Human-readable one-line description of *status*."""
    state = status.state
    if state in (BootstrapState.PREPARING_ENGINE, BootstrapState.DOWNLOADING_CORE):
        return translate(f"status.{state}", locale, progress=status.progress.percent)
    if state is BootstrapState.ERROR:
        return translate("status.error", locale, error=status.error_message)
    if state is BootstrapState.READY:
        return translate("status.ready", locale, url=url)
    if state in (BootstrapState.CHECKING, BootstrapState.EXTRACTING, BootstrapState.STARTING):
        return translate(f"status.{state}", locale)
    return translate("status.loading", locale)


class RichBootstrapObserver(BootstrapObserver):
    """Live terminal progress bar powered by Rich.

    Use as a context manager so the live display is properly started/stopped::

        with RichBootstrapObserver() as observer:
            controller = BootstrapController(services, events, config, observer=observer)
    """

    def __init__(self, locale: str = "en", *, console: Console | None = None) -> None:
        self._locale = locale
        self._console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description}"),
            BarColumn(bar_width=30),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=False,
        )
        self._task_id = self._progress.add_task(translate("status.checking", locale), total=100)

    def __enter__(self) -> RichBootstrapObserver:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def state_changed(self, status: BootstrapStatus) -> None:
        description = describe_status(status, self._locale)
        if status.state is BootstrapState.ERROR:
            description = f"[red]✗[/red] {description}"
        if status.state in (BootstrapState.STARTING, BootstrapState.READY):
            self._progress.update(self._task_id, description=description, completed=100)
        else:
            self._progress.update(self._task_id, description=description, completed=status.progress.percent)

    def progress_changed(self, status: BootstrapStatus) -> None:
        self._progress.update(
            self._task_id,
            description=describe_status(status, self._locale),
            completed=status.progress.percent,
        )
