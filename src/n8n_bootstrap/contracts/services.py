"""Collaborator contract consumed by the bootstrap controller."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BootstrapServices(ABC):
    """Everything the controller needs from the outside world.

    Download-type calls report progress through the event bus rather than
    through return values; the controller only sees success or a raised error.
    """

    @abstractmethod
    async def setup_runtime(self) -> None:
        """Make the Node.js runtime available, emitting ``runtime`` progress."""

    @abstractmethod
    def is_installed(self) -> bool:
        """Return whether the n8n package is usable on disk."""

    @abstractmethod
    async def setup_n8n(self) -> None:
        """Download and extract the n8n package, emitting ``n8n-core`` events."""

    @abstractmethod
    async def launch_n8n(self) -> None:
        """Start the service process without waiting for readiness."""

    @abstractmethod
    async def proxy_health_check(self) -> str:
        """Probe the service once and return a status string."""
