"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from n8n_bootstrap import BootstrapState, ConfigError


def main(argv: list[str] | None = None) -> int:
    import n8n_bootstrap.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        status = cli.asyncio.run(cli._run_bootstrap(args))
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if status.state is BootstrapState.ERROR:
        return 4
    return 0


__all__ = ["main"]
