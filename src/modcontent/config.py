"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MODCONTENT_"


class Settings(BaseModel):
    app_name:      str = "modcontent"
    db_url:        Optional[str] = Field(default=None, description="Database URL; sqlite:///modcontent.db when unset")
    audit_limit:   int = Field(default=20, ge=1, le=50, description="Default number of audit events listed")
    registry_file: Optional[str] = Field(default=None, description="YAML module catalogue; built-in catalogue if unset")
    actor_id:      str = Field(default="cli", description="Actor id recorded on audit events written by the CLI")
    actor_email:   Optional[str] = Field(default=None, description="Actor email recorded on audit events")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def _file_values(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping of settings")
    return data


def _env_values() -> dict[str, str]:
    """Non-empty MODCONTENT_<FIELD> variables, keyed by field name."""
    return {
        name: val for name in Settings.model_fields
        if (val := os.getenv(f"{ENV_PREFIX}{name.upper()}"))
    }


def load_config(overrides: dict[str, Any] = None, path: str | Path = CONFIG_FILE) -> Settings:
    """Merge config.yaml, then env vars, then non-None CLI overrides (later wins)."""
    data = {**_file_values(Path(path)), **_env_values()}
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
