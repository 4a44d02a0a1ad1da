"""Config loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from n8n_bootstrap.contracts.config import BootstrapConfig
from n8n_bootstrap.contracts.exceptions import ConfigError


def _resolve_path(value: Path, *, base_dir: Path) -> Path:
    value = value.expanduser()
    if value.is_absolute():
        return value
    return (base_dir / value).resolve()


def load_config(path: str | Path | None = None) -> BootstrapConfig:
    """Load and validate config from JSON, resolving ``data_dir`` against the config directory.

    Without a path the built-in defaults are returned.
    """
    if path is None:
        return BootstrapConfig()

    config_path = Path(path).expanduser().resolve()

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = BootstrapConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    return parsed.model_copy(update={"data_dir": _resolve_path(parsed.data_dir, base_dir=config_path.parent)})
