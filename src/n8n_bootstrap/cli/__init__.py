"""Command-line interface for n8n-bootstrap."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from n8n_bootstrap import load_config as load_config
from n8n_bootstrap.cli.app import main as main
from n8n_bootstrap.cli.commands import run as run_command
from n8n_bootstrap.cli.parser import build_parser as build_parser
from n8n_bootstrap.runtime.services import LocalServices as LocalServices

_run_bootstrap = run_command.run_bootstrap

__all__ = ["build_parser", "main"]
