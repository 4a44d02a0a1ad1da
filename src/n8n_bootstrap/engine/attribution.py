"""Attribution of out-of-band download events to the active stage.

Two downloads run one after the other, but their event streams may overlap
in time: a late event from the runtime download can arrive after the package
download started. Events are therefore tagged with a kind and only accepted
while that kind owns the attribution window.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable

from n8n_bootstrap.contracts.events import ExtractionStartEvent, ProgressEvent
from n8n_bootstrap.contracts.state import DownloadKind, ProgressSnapshot


def round_percent(value: float) -> int:
    """Round half-up and clamp to ``0..100``."""
    if math.isnan(value):
        return 0
    return max(0, min(100, math.floor(value + 0.5)))


class ProgressAttribution:
    """Owns the progress percent and the kind of the active download window."""

    def __init__(self, *, debounce: float = 0.1, clock: Callable[[], float] = time.monotonic) -> None:
        self._debounce = debounce
        self._clock = clock
        self._percent = 0
        self._active_kind = DownloadKind.NONE
        self._last_accepted: float | None = None

    @property
    def percent(self) -> int:
        return self._percent

    @property
    def active_kind(self) -> DownloadKind:
        return self._active_kind

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(percent=self._percent, active_kind=self._active_kind)

    def begin(self, kind: DownloadKind) -> None:
        self._active_kind = kind
        self._percent = 0
        self._last_accepted = None

    def end(self) -> None:
        self._active_kind = DownloadKind.NONE

    def complete(self) -> None:
        self._percent = 100

    def accept_progress(self, event: ProgressEvent) -> bool:
        """Apply *event* and return whether the visible percent changed."""
        if self._active_kind is DownloadKind.NONE or event.kind != self._active_kind:
            return False

        rounded = round_percent(event.percent)
        now = self._clock()
        if rounded != 100 and self._last_accepted is not None and now - self._last_accepted < self._debounce:
            return False
        self._last_accepted = now

        if rounded >= self._percent or rounded == 100:
            changed = rounded != self._percent
            self._percent = rounded
            return changed
        return False

    def accept_extraction(self, event: ExtractionStartEvent) -> bool:
        return self._active_kind is not DownloadKind.NONE and event.kind == self._active_kind
