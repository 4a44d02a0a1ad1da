"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


def _default_data_dir() -> Path:
    return Path.home() / ".n8n-desktop"


class TimingConfig(BaseModel):
    """Durations are in seconds."""

    progress_debounce: float = Field(default=0.1, ge=0)
    verify_attempts: int = Field(default=5, ge=1)
    verify_delay: float = Field(default=1.0, ge=0)
    poll_interval: float = Field(default=2.0, gt=0)
    max_health_retries: int = Field(default=5, ge=1)
    grace_period: float = Field(default=2.0, ge=0)
    startup_deadline: float = Field(default=60.0, gt=0)
    http_timeout: float = Field(default=30.0, gt=0)
    download_retries: int = Field(default=3, ge=0, le=10)

    model_config = {"frozen": True}


class BootstrapConfig(BaseModel):
    data_dir: Path = Field(default_factory=_default_data_dir)
    node_version: str = "v20.19.0"
    node_mirror: str = "https://mirrors.huaweicloud.com/nodejs"
    package_base_url: str = "https://github.com/tangtao646/n8n-core-builder/releases/latest/download"
    package_proxy_prefix: str = "https://gh-proxy.com/"
    release_api_url: str = "https://api.github.com/repos/tangtao646/n8n-core-builder/releases/latest"
    host: str = "127.0.0.1"
    port: int = Field(default=5678, ge=1, le=65535)
    locale: str = "en"
    timings: TimingConfig = Field(default_factory=TimingConfig)

    model_config = {"frozen": True}

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, value: str) -> str:
        if value not in {"en", "zh"}:
            raise ValueError("locale must be one of: en, zh")
        return value

    @property
    def runtime_dir(self) -> Path:
        return self.data_dir / "runtime"

    @property
    def package_dir(self) -> Path:
        return self.data_dir / "n8n-core"

    @property
    def user_data_dir(self) -> Path:
        return self.data_dir / "n8n-data"

    @property
    def n8n_bin(self) -> Path:
        return self.package_dir / "node_modules" / "n8n" / "bin" / "n8n"

    @property
    def service_url(self) -> str:
        return f"http://localhost:{self.port}"

    @property
    def health_endpoints(self) -> tuple[str, ...]:
        return (
            f"http://localhost:{self.port}/healthz",
            f"http://{self.host}:{self.port}/healthz",
            f"http://localhost:{self.port}/",
            f"http://{self.host}:{self.port}/",
        )

    def package_archive(self, platform: str) -> Path:
        return self.data_dir / package_asset_name(platform)

    def package_url(self, platform: str) -> str:
        return f"{self.package_proxy_prefix}{self.package_base_url}/{package_asset_name(platform)}"


def package_asset_name(platform: str) -> str:
    return f"n8n-core-{platform}.zip"
