"""Concrete collaborators: downloads, archives, process launch and health probing."""

from n8n_bootstrap.runtime.downloader import Downloader
from n8n_bootstrap.runtime.health import HealthProbe
from n8n_bootstrap.runtime.process import ProcessManager
from n8n_bootstrap.runtime.services import LocalServices

__all__ = ["Downloader", "HealthProbe", "LocalServices", "ProcessManager"]
