"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version

from n8n_bootstrap.messages import LOCALES


def _package_version() -> str:
    try:
        return version("n8n-bootstrap")
    except PackageNotFoundError:
        return "0.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="n8n-bootstrap")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Install (if needed), start and hand off to n8n")
    run_parser.add_argument("--config", default=None, help="Path to a JSON config file (default: built-in defaults)")
    run_parser.add_argument("--locale", choices=LOCALES, default=None, help="Message language")
    run_parser.add_argument("--open", action="store_true", help="Open n8n in the browser once it is ready")
    run_parser.add_argument(
        "--no-input",
        action="store_true",
        help="Never prompt; exit immediately when the bootstrap fails",
    )
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    return parser


__all__ = ["build_parser"]
