"""Bootstrap engine: state machine, progress attribution and health classification."""

from n8n_bootstrap.engine.attribution import ProgressAttribution, round_percent
from n8n_bootstrap.engine.controller import BootstrapController
from n8n_bootstrap.engine.health import is_healthy
from n8n_bootstrap.engine.observer import BootstrapObserver, NullBootstrapObserver

__all__ = [
    "BootstrapController",
    "BootstrapObserver",
    "NullBootstrapObserver",
    "ProgressAttribution",
    "is_healthy",
    "round_percent",
]
