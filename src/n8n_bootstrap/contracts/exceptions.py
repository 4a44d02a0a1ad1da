"""Exception hierarchy for n8n-bootstrap.

All errors inherit from :class:`BootstrapError`. Collaborators raise the
specific subclasses below; the controller wraps whatever a stage raised into
one of the terminal :class:`StageError` kinds before surfacing it.
"""

from __future__ import annotations

from typing import ClassVar


class BootstrapError(Exception):
    """Base exception for all n8n-bootstrap errors."""


class ConfigError(BootstrapError):
    """Configuration loading or validation failure."""


class UnsupportedPlatformError(BootstrapError):
    """No runtime build exists for the current OS/architecture."""


class DownloadError(BootstrapError):
    """An artifact could not be fetched."""


class ExtractionError(BootstrapError):
    """A downloaded archive could not be unpacked."""


class LaunchError(BootstrapError):
    """The service process could not be started."""


class HealthCheckError(BootstrapError):
    """No health endpoint answered successfully."""


class StageError(BootstrapError):
    """Terminal failure of one bootstrap stage.

    Attributes:
        kind: Stable name of the failure, shown to the UI next to the message.
    """

    kind: ClassVar[str] = "StageError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EngineSetupFailed(StageError):
    kind = "EngineSetupFailed"


class PackageSetupFailed(StageError):
    kind = "PackageSetupFailed"


class InstallVerificationFailed(StageError):
    kind = "InstallVerificationFailed"


class LaunchFailed(StageError):
    kind = "LaunchFailed"


class HealthRetryExhausted(StageError):
    kind = "HealthRetryExhausted"


class OverallDeadlineExceeded(StageError):
    kind = "OverallDeadlineExceeded"
