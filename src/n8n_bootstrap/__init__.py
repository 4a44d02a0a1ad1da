"""Public API surface for n8n-bootstrap."""

__version__ = "0.1.0"

from n8n_bootstrap.config import load_config
from n8n_bootstrap.contracts.config import BootstrapConfig, TimingConfig
from n8n_bootstrap.contracts.events import ExtractionStartEvent, ProgressEvent
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
from n8n_bootstrap.engine import BootstrapController, BootstrapObserver, NullBootstrapObserver
from n8n_bootstrap.events import EventBus
from n8n_bootstrap.session import BootstrapSession

__all__ = [
    "BootstrapConfig",
    "BootstrapController",
    "BootstrapError",
    "BootstrapObserver",
    "BootstrapServices",
    "BootstrapSession",
    "BootstrapState",
    "BootstrapStatus",
    "ConfigError",
    "DownloadError",
    "DownloadKind",
    "EngineSetupFailed",
    "EventBus",
    "ExtractionError",
    "ExtractionStartEvent",
    "HealthCheckError",
    "HealthRetryExhausted",
    "InstallVerificationFailed",
    "LaunchError",
    "LaunchFailed",
    "NullBootstrapObserver",
    "OverallDeadlineExceeded",
    "PackageSetupFailed",
    "ProgressEvent",
    "ProgressSnapshot",
    "StageError",
    "TimingConfig",
    "UnsupportedPlatformError",
    "__version__",
    "load_config",
]
