"""Run command: bootstrap, hand off, supervise."""

from __future__ import annotations

import argparse
import sys
import webbrowser
from contextlib import nullcontext

from n8n_bootstrap.cli.progress.rich import RichBootstrapObserver, describe_status
from n8n_bootstrap.contracts.config import BootstrapConfig
from n8n_bootstrap.contracts.state import BootstrapState, BootstrapStatus
from n8n_bootstrap.engine.controller import BootstrapController
from n8n_bootstrap.events import EventBus
from n8n_bootstrap.messages import translate
from n8n_bootstrap.runtime.services import LocalServices
from n8n_bootstrap.session import BootstrapSession


def resolve_config(args: argparse.Namespace) -> BootstrapConfig:
    import n8n_bootstrap.cli as cli

    config = cli.load_config(args.config)
    if args.locale:
        config = config.model_copy(update={"locale": args.locale})
    return config


async def confirm_retry(locale: str) -> bool:
    import questionary

    answer = await questionary.confirm(f"{translate('app.retry', locale)}?", default=True).ask_async()
    return bool(answer)


async def run_bootstrap(args: argparse.Namespace) -> BootstrapStatus:
    """Bootstrap n8n and, once ready, keep supervising it until interrupted."""
    import n8n_bootstrap.cli as cli

    config = resolve_config(args)
    events = EventBus()
    interactive = not args.no_input and sys.stdin.isatty()

    async with cli.LocalServices(config, events) as services:
        try:
            status = await _bootstrap_until_settled(args, config, events, services, interactive=interactive)
            if status.state is not BootstrapState.READY:
                return status

            print(translate("status.ready", config.locale, url=config.service_url))
            if args.open:
                print(translate("app.redirecting", config.locale))
                webbrowser.open(config.service_url)
            await services.processes.wait()
            return status
        finally:
            await services.processes.terminate()


async def _bootstrap_until_settled(
    args: argparse.Namespace,
    config: BootstrapConfig,
    events: EventBus,
    services: LocalServices,
    *,
    interactive: bool,
) -> BootstrapStatus:
    display = nullcontext(None) if args.verbose else RichBootstrapObserver(config.locale)
    with display as observer:

        def factory() -> BootstrapController:
            return BootstrapController(services, events, config, observer=observer)

        session = BootstrapSession(factory)
        session.start()
        try:
            while True:
                status = await session.wait()
                if status.state is BootstrapState.READY:
                    return status

                print(describe_status(status, config.locale), file=sys.stderr)
                await services.processes.terminate()
                if not interactive or not await confirm_retry(config.locale):
                    return status
                await session.restart()
        finally:
            await session.close()


__all__ = ["confirm_retry", "resolve_config", "run_bootstrap"]
