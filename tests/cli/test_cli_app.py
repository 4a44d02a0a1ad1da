"""Tests for the n8n-bootstrap CLI."""

from __future__ import annotations

import argparse
import io
from pathlib import Path
from types import TracebackType
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from rich.console import Console

import n8n_bootstrap.cli as cli
from n8n_bootstrap.cli.parser import build_parser
from n8n_bootstrap.cli.progress.rich import RichBootstrapObserver, describe_status
from n8n_bootstrap.contracts.config import BootstrapConfig
from n8n_bootstrap.contracts.exceptions import ConfigError, DownloadError
from n8n_bootstrap.contracts.state import BootstrapState, BootstrapStatus, DownloadKind, ProgressSnapshot
from n8n_bootstrap.events import EventBus
from n8n_bootstrap.runtime.process import ProcessManager
from tests.fakes.services import FakeServices, fast_timings

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _args(**overrides: object) -> argparse.Namespace:
    values: dict[str, object] = {
        "command": "run",
        "config": None,
        "locale": None,
        "open": False,
        "no_input": True,
        "verbose": True,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class FakeLocalServices(FakeServices):
    """FakeServices shaped like LocalServices for the run command."""

    instances: list[FakeLocalServices] = []
    script: dict[str, object] = {}

    def __init__(self, config: BootstrapConfig, events: EventBus) -> None:
        super().__init__(events, **self.script)  # type: ignore[arg-type]
        self.config = config
        self.processes = AsyncMock(spec=ProcessManager)
        self.closed = False
        FakeLocalServices.instances.append(self)

    async def __aenter__(self) -> FakeLocalServices:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.closed = True


@pytest.fixture
def fake_services(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> type[FakeLocalServices]:
    FakeLocalServices.instances = []
    FakeLocalServices.script = {}
    monkeypatch.setattr(cli, "LocalServices", FakeLocalServices)
    monkeypatch.setattr(
        cli,
        "load_config",
        lambda path: BootstrapConfig(data_dir=tmp_path / "data", timings=fast_timings()),
    )
    return FakeLocalServices


class _Tty(io.StringIO):
    def isatty(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParser:
    def test_run_defaults(self) -> None:
        args = build_parser().parse_args(["run"])

        assert args.command == "run"
        assert args.config is None
        assert args.locale is None
        assert args.open is False
        assert args.no_input is False
        assert args.verbose is False

    def test_run_options(self) -> None:
        args = build_parser().parse_args(["run", "--config", "c.json", "--locale", "zh", "--open", "--no-input", "-v"])

        assert args.config == "c.json"
        assert args.locale == "zh"
        assert args.open is True
        assert args.no_input is True
        assert args.verbose is True

    def test_rejects_unknown_locale(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["run", "--locale", "fr"])

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


# ---------------------------------------------------------------------------
# main() exit codes
# ---------------------------------------------------------------------------


class TestMainExitCodes:
    @patch("n8n_bootstrap.cli._run_bootstrap", new_callable=AsyncMock)
    def test_ready_exits_zero(self, mock_run: AsyncMock) -> None:
        mock_run.return_value = BootstrapStatus(state=BootstrapState.READY)
        assert cli.main(["run"]) == 0
        mock_run.assert_awaited_once()

    @patch("n8n_bootstrap.cli._run_bootstrap", new_callable=AsyncMock)
    def test_error_status_exits_four(self, mock_run: AsyncMock) -> None:
        mock_run.return_value = BootstrapStatus(state=BootstrapState.ERROR, error_kind="LaunchFailed")
        assert cli.main(["run"]) == 4

    @patch("n8n_bootstrap.cli._run_bootstrap", new_callable=AsyncMock)
    def test_config_error_exits_three(self, mock_run: AsyncMock, capsys: pytest.CaptureFixture[str]) -> None:
        mock_run.side_effect = ConfigError("invalid JSON in config file: c.json")

        assert cli.main(["run", "--config", "c.json"]) == 3
        assert "error: invalid JSON in config file" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_130(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def interrupted(coro: object) -> None:
            coro.close()  # type: ignore[attr-defined]
            raise KeyboardInterrupt

        monkeypatch.setattr(cli.asyncio, "run", interrupted)
        assert cli.main(["run"]) == 130

    @patch("n8n_bootstrap.cli._run_bootstrap", new_callable=AsyncMock)
    def test_verbose_enables_debug_logging(self, mock_run: AsyncMock, monkeypatch: pytest.MonkeyPatch) -> None:
        mock_run.return_value = BootstrapStatus(state=BootstrapState.READY)
        basic_config = MagicMock()
        monkeypatch.setattr(cli.logging, "basicConfig", basic_config)

        cli.main(["run", "--verbose"])

        basic_config.assert_called_once()
        assert basic_config.call_args.kwargs["level"] == cli.logging.DEBUG


# ---------------------------------------------------------------------------
# run_bootstrap
# ---------------------------------------------------------------------------


class TestRunBootstrap:
    @pytest.mark.asyncio
    async def test_ready_hands_off_and_supervises(
        self, fake_services: type[FakeLocalServices], capsys: pytest.CaptureFixture[str]
    ) -> None:
        status = await cli._run_bootstrap(_args())

        services = fake_services.instances[0]
        assert status.state is BootstrapState.READY
        assert "n8n is ready at http://localhost:5678" in capsys.readouterr().out
        services.processes.wait.assert_awaited_once()
        services.processes.terminate.assert_awaited()
        assert services.closed

    @pytest.mark.asyncio
    async def test_open_announces_redirect_and_launches_browser(
        self, fake_services: type[FakeLocalServices], capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("n8n_bootstrap.cli.commands.run.webbrowser.open") as mock_open:
            await cli._run_bootstrap(_args(open=True))

        mock_open.assert_called_once_with("http://localhost:5678")
        assert "Redirecting to n8n..." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_without_open_no_redirect(
        self, fake_services: type[FakeLocalServices], capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("n8n_bootstrap.cli.commands.run.webbrowser.open") as mock_open:
            await cli._run_bootstrap(_args())

        mock_open.assert_not_called()
        assert "Redirecting" not in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_locale_override(
        self, fake_services: type[FakeLocalServices], capsys: pytest.CaptureFixture[str]
    ) -> None:
        await cli._run_bootstrap(_args(locale="zh"))

        assert fake_services.instances[0].config.locale == "zh"
        assert "n8n 已就绪" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_failure_without_input_returns_error(
        self, fake_services: type[FakeLocalServices], capsys: pytest.CaptureFixture[str]
    ) -> None:
        fake_services.script = {"runtime_error": DownloadError("Download failed: HTTP 404")}

        status = await cli._run_bootstrap(_args())

        services = fake_services.instances[0]
        assert status.state is BootstrapState.ERROR
        assert status.error_kind == "EngineSetupFailed"
        assert "Startup failed: Download failed: HTTP 404" in capsys.readouterr().err
        services.processes.wait.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_interactive_failure_offers_retry(
        self, fake_services: type[FakeLocalServices], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake_services.script = {"runtime_error": DownloadError("mirror offline")}
        monkeypatch.setattr("sys.stdin", _Tty())
        confirm = AsyncMock(side_effect=[True, False])
        monkeypatch.setattr("n8n_bootstrap.cli.commands.run.confirm_retry", confirm)

        status = await cli._run_bootstrap(_args(no_input=False))

        assert status.state is BootstrapState.ERROR
        assert confirm.await_count == 2
        assert fake_services.instances[0].count("setup_runtime") == 2

    @pytest.mark.asyncio
    async def test_retry_that_succeeds_reaches_ready(
        self, fake_services: type[FakeLocalServices], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake_services.script = {"installed": [False, False, True], "core_error": DownloadError("reset")}
        monkeypatch.setattr("sys.stdin", _Tty())

        async def confirm_and_heal(locale: str) -> bool:
            fake_services.instances[0]._core_error = None
            return True

        monkeypatch.setattr("n8n_bootstrap.cli.commands.run.confirm_retry", confirm_and_heal)

        status = await cli._run_bootstrap(_args(no_input=False))

        assert status.state is BootstrapState.READY
        assert fake_services.instances[0].count("setup_n8n") == 2


# ---------------------------------------------------------------------------
# Rich display
# ---------------------------------------------------------------------------


class TestDescribeStatus:
    def test_download_states_include_percent(self) -> None:
        status = BootstrapStatus(
            state=BootstrapState.DOWNLOADING_CORE,
            progress=ProgressSnapshot(percent=37, active_kind=DownloadKind.CORE),
        )
        assert describe_status(status) == "Downloading n8n resources... 37%"

    def test_error_includes_message(self) -> None:
        status = BootstrapStatus(state=BootstrapState.ERROR, error_message="boom", error_kind="LaunchFailed")
        assert describe_status(status, "zh") == "启动失败：boom"

    def test_ready_includes_url(self) -> None:
        status = BootstrapStatus(state=BootstrapState.READY)
        assert describe_status(status, url="http://localhost:5678") == "n8n is ready at http://localhost:5678"

    @pytest.mark.parametrize(
        ("state", "expected"),
        [
            (BootstrapState.CHECKING, "Checking system environment..."),
            (BootstrapState.EXTRACTING, "Extracting resource package..."),
            (BootstrapState.STARTING, "Starting n8n service..."),
        ],
    )
    def test_plain_states(self, state: BootstrapState, expected: str) -> None:
        assert describe_status(BootstrapStatus(state=state)) == expected


class TestRichBootstrapObserver:
    def _observer(self) -> RichBootstrapObserver:
        return RichBootstrapObserver(console=Console(file=io.StringIO(), force_terminal=False))

    def test_tracks_progress_and_completion(self) -> None:
        with self._observer() as observer:
            observer.progress_changed(
                BootstrapStatus(
                    state=BootstrapState.PREPARING_ENGINE,
                    progress=ProgressSnapshot(percent=45, active_kind=DownloadKind.RUNTIME),
                )
            )
            task = observer._progress.tasks[0]
            assert task.completed == 45
            assert task.description == "Preparing Node engine... 45%"

            observer.state_changed(BootstrapStatus(state=BootstrapState.STARTING))
            assert observer._progress.tasks[0].completed == 100

    def test_error_is_marked(self) -> None:
        with self._observer() as observer:
            observer.state_changed(BootstrapStatus(state=BootstrapState.ERROR, error_message="boom"))
            assert observer._progress.tasks[0].description == "[red]✗[/red] Startup failed: boom"
