"""Observer protocol for bootstrap status changes.

The controller emits a fresh :class:`BootstrapStatus` whenever the visible
state or progress changes; consumers (e.g. the CLI's Rich display) implement
``BootstrapObserver`` to render feedback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from n8n_bootstrap.contracts.state import BootstrapStatus


class BootstrapObserver(ABC):
    @abstractmethod
    def state_changed(self, status: BootstrapStatus) -> None:
        """The observable state moved to ``status.state``."""
        ...  # pragma: no cover

    @abstractmethod
    def progress_changed(self, status: BootstrapStatus) -> None:
        """The percent of the active download changed."""
        ...  # pragma: no cover


class NullBootstrapObserver(BootstrapObserver):
    """No-op implementation used when nothing renders the status."""

    def state_changed(self, status: BootstrapStatus) -> None:
        pass

    def progress_changed(self, status: BootstrapStatus) -> None:
        pass
