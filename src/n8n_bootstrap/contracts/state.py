"""Bootstrap state contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class BootstrapState(StrEnum):
    CHECKING = "checking"
    PREPARING_ENGINE = "preparing_engine"
    DOWNLOADING_CORE = "downloading_core"
    EXTRACTING = "extracting"
    STARTING = "starting"
    POLLING = "polling"
    READY = "ready"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (BootstrapState.READY, BootstrapState.ERROR)

    @property
    def observable(self) -> BootstrapState:
        """Polling is internal and is reported to observers as ``starting``."""
        if self is BootstrapState.POLLING:
            return BootstrapState.STARTING
        return self


class DownloadKind(StrEnum):
    RUNTIME = "runtime"
    CORE = "n8n-core"
    NONE = ""


class ProgressSnapshot(BaseModel):
    percent: int = Field(default=0, ge=0, le=100)
    active_kind: DownloadKind = DownloadKind.NONE

    model_config = {"frozen": True}


class BootstrapStatus(BaseModel):
    """Read-only view of one bootstrap attempt, as handed to the UI."""

    state: BootstrapState = BootstrapState.CHECKING
    progress: ProgressSnapshot = Field(default_factory=ProgressSnapshot)
    error_message: str = ""
    error_kind: str | None = None
    retry_count: int = 0

    model_config = {"frozen": True}
