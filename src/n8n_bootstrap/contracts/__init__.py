"""Contracts-domain exports."""

from n8n_bootstrap.contracts.config import BootstrapConfig, TimingConfig
from n8n_bootstrap.contracts.events import DOWNLOAD_PROGRESS, EXTRACTION_START, ExtractionStartEvent, ProgressEvent
from n8n_bootstrap.contracts.exceptions import (
    BootstrapError,
    ConfigError,
    DownloadError,
    EngineSetupFailed,
    ExtractionError,
    HealthCheckError,
    HealthRetryExhausted,
    InstallVerificationFailed,
    LaunchError,
    LaunchFailed,
    OverallDeadlineExceeded,
    PackageSetupFailed,
    StageError,
    UnsupportedPlatformError,
)
from n8n_bootstrap.contracts.services import BootstrapServices
from n8n_bootstrap.contracts.state import BootstrapState, BootstrapStatus, DownloadKind, ProgressSnapshot

__all__ = [
    "DOWNLOAD_PROGRESS",
    "EXTRACTION_START",
    "BootstrapConfig",
    "BootstrapError",
    "BootstrapServices",
    "BootstrapState",
    "BootstrapStatus",
    "ConfigError",
    "DownloadError",
    "DownloadKind",
    "EngineSetupFailed",
    "ExtractionError",
    "ExtractionStartEvent",
    "HealthCheckError",
    "HealthRetryExhausted",
    "InstallVerificationFailed",
    "LaunchError",
    "LaunchFailed",
    "OverallDeadlineExceeded",
    "PackageSetupFailed",
    "ProgressEvent",
    "ProgressSnapshot",
    "StageError",
    "TimingConfig",
    "UnsupportedPlatformError",
]
