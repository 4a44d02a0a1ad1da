"""Out-of-band events emitted by download and extraction collaborators."""

from __future__ import annotations

from pydantic import BaseModel

from n8n_bootstrap.contracts.state import DownloadKind

DOWNLOAD_PROGRESS = "download-progress"
EXTRACTION_START = "extraction-start"


class ProgressEvent(BaseModel):
    percent: float
    kind: DownloadKind

    model_config = {"frozen": True}


class ExtractionStartEvent(BaseModel):
    kind: DownloadKind

    model_config = {"frozen": True}
