"""Configuration loader - parses config.yaml with env var expansion and Pydantic validation."""

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

_ENV_RE = re.compile(r"\$\{([^}]+)\}")

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _expand_env(value: str) -> str:
    """Replace ${VAR} patterns with environment variable values."""
    def _replace(match: re.Match) -> str:
        var = match.group(1)
        return os.environ.get(var, "")
    return _ENV_RE.sub(_replace, value)


def _walk_expand(obj: Any) -> Any:
    """Recursively expand env vars in strings throughout a dict/list."""
    if isinstance(obj, str):
        return _expand_env(obj)
    if isinstance(obj, dict):
        return {k: _walk_expand(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_expand(i) for i in obj]
    return obj


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base recursively. Non-dict values in override win."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# --- Pydantic models ---


def _empty_str_to_none(v: Any) -> Optional[str]:
    """Convert empty strings to None for optional string fields."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


class SSHConfig(BaseModel):
    """Remote host and execution policy. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = 22
    username: str
    password: SecretStr
    disable_sudo: bool = True
    disable_rm: bool = True
    allowed_users: list[str] = Field(default_factory=list)
    max_output_length: int = 2000
    timeout: int = 30

    @field_validator("host", "username")
    @classmethod
    def _check_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("host and username must not be empty")
        return v.strip()

    @field_validator("password")
    @classmethod
    def _check_password(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("password must not be empty")
        return v

    @field_validator("port")
    @classmethod
    def _check_port(cls, v: int) -> int:
        if not (0 < v < 65536):
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("allowed_users", mode="before")
    @classmethod
    def _coerce_to_str(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]
        return v

    @field_validator("max_output_length")
    @classmethod
    def _check_max_output_length(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_output_length must be >= 1")
        return v

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("timeout must be >= 1")
        return v


class GatewayConfig(BaseModel):
    """HTTP command surface. With url set, the bot forwards commands there instead of running SSH itself."""
    url: Optional[str] = None
    port: int = 9842
    token: Optional[str] = None
    # Client-side HTTP timeout; keep it above the server's ssh.timeout
    request_timeout: int = 45

    @field_validator("request_timeout")
    @classmethod
    def _check_request_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("request_timeout must be >= 1")
        return v

    @field_validator("url", "token", mode="before")
    @classmethod
    def _empty_to_none(cls, v: Any) -> Optional[str]:
        return _empty_str_to_none(v)


class TelegramChannelConfig(BaseModel):
    enabled: bool = False
    token: str = ""


class ChannelsConfig(BaseModel):
    telegram: TelegramChannelConfig = Field(default_factory=TelegramChannelConfig)


class LoggingConfig(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def _check_level(cls, v: str) -> str:
        v = v.upper()
        if v not in _VALID_LOG_LEVELS:
            raise ValueError(f"logging level must be one of {_VALID_LOG_LEVELS}")
        return v


class AppConfig(BaseModel):
    ssh: Optional[SSHConfig] = None
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    channels: ChannelsConfig = Field(default_factory=ChannelsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_yaml(path: Path) -> dict:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(path: str = "config.yaml") -> AppConfig:
    """Load and validate config from YAML file.

    A ``config.local.yaml`` next to the main file, if present, is merged on top.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = _read_yaml(config_path)
    local_path = config_path.with_name(f"{config_path.stem}.local{config_path.suffix}")
    if local_path.exists():
        raw = _deep_merge(raw, _read_yaml(local_path))

    expanded = _walk_expand(raw)
    return AppConfig.model_validate(expanded)
