"""CLI progress displays."""

from n8n_bootstrap.cli.progress.rich import RichBootstrapObserver, describe_status

__all__ = ["RichBootstrapObserver", "describe_status"]
