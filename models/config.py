"""Configuration enums and settings for the Stack Overflow MCP server."""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

CONFIG_FILE = Path(__file__).resolve().parent.parent / "config.json"


class ResponseFormat(str, Enum):
    """Output format for tool responses."""

    JSON = "json"  # Full records, machine-readable
    MARKDOWN = "markdown"  # Human-readable report


class RateLimitSettings(BaseModel):
    """Admission gate and retry tuning."""

    model_config = ConfigDict(extra="forbid")

    max_requests: int = Field(default=30, ge=1)
    window_seconds: float = Field(default=60.0, gt=0)
    retry_after_seconds: float = Field(default=2.0, ge=0)
    max_retries: int = Field(default=3, ge=0)
    max_admission_waits: Optional[int] = Field(default=None, ge=0)


class FilterSettings(BaseModel):
    """Stack Exchange response-shaping filter tokens."""

    model_config = ConfigDict(extra="forbid")

    search: str = "!*MZqiDl8Y0c)yVzXS"
    answers: str = "!*MZqiDl8Y0c)yVzXS"
    comments: str = "!*Mg-gxeRLu"
    tagged: str = "!nKzQUR30W7"


class ServerConfig(BaseModel):
    """Validated server configuration."""

    model_config = ConfigDict(extra="forbid")

    api_url: str = "https://api.stackexchange.com/2.3"
    site: str = "stackoverflow"
    api_key: Optional[str] = None
    access_token: Optional[str] = None
    api_timeout: float = Field(default=30.0, gt=0)
    log_level: str = "WARNING"
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    filters: FilterSettings = Field(default_factory=FilterSettings)


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read config.json if present; a broken file falls back to defaults."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load {path.name}, using defaults: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"{path.name} must contain a JSON object, using defaults")
        return {}
    return data


def load_config(path: Optional[Path] = None) -> ServerConfig:
    """
    Load configuration from config.json with environment overrides.

    Environment variables win over the file so secrets never need to be
    written to disk.
    """
    data = _read_config_file(path or CONFIG_FILE)

    env_overrides = {
        "api_url": os.getenv("STACKEXCHANGE_API_URL"),
        "site": os.getenv("STACKEXCHANGE_SITE"),
        "api_key": os.getenv("STACKEXCHANGE_API_KEY"),
        "access_token": os.getenv("STACKEXCHANGE_ACCESS_TOKEN"),
        "log_level": os.getenv("LOG_LEVEL"),
    }
    for key, value in env_overrides.items():
        if value:
            data[key] = value

    return ServerConfig.model_validate(data)
