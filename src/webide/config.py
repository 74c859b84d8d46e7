from __future__ import annotations

"""Configuration models and the YAML loader for ``webide.yaml``."""

import logging
import os
from pathlib import Path
from typing import Dict, List, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from webide.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "webide.yaml"
TOKEN_ENV = "WEBIDE_GITHUB_TOKEN"
REPO_URL_ENV = "WEBIDE_REPO_URL"


class RunnerSpec(BaseModel):
    """Interpreter used for one file extension."""

    model_config = ConfigDict(extra="forbid")

    command: List[str]
    language: str

    @field_validator("command")
    @classmethod
    def _command_non_empty(cls, v: List[str]) -> List[str]:
        if not v or not all(part.strip() for part in v):
            raise ValueError("command must list the interpreter and its arguments")
        return v


def _default_runners() -> Dict[str, RunnerSpec]:
    return {".js": RunnerSpec(command=["node"], language="JavaScript")}


class SandboxSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: Optional[float] = Field(default=10.0, gt=0)
    runners: Dict[str, RunnerSpec] = Field(default_factory=_default_runners)

    @field_validator("runners")
    @classmethod
    def _normalize_extensions(cls, v: Dict[str, RunnerSpec]) -> Dict[str, RunnerSpec]:
        normalized: Dict[str, RunnerSpec] = {}
        for ext, spec in v.items():
            key = ext.strip().lower()
            if not key.startswith("."):
                key = f".{key}"
            if key == ".":
                raise ValueError("extension must not be empty")
            normalized[key] = spec
        return normalized


class RemoteSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    provider: Literal["github", "memory"] = "github"
    repo_url: Optional[str] = None
    token: Optional[SecretStr] = None
    branch: Optional[str] = None
    api_url: str = "https://api.github.com"
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("repo_url", "branch")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("token")
    @classmethod
    def _blank_token_is_none(cls, v: Optional[SecretStr]) -> Optional[SecretStr]:
        if v is None or not v.get_secret_value().strip():
            return None
        return v


class IDEConfig(BaseModel):
    """Top-level configuration; every section has working defaults."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = "WARNING"
    workspace: str = "project.json"
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    sandbox: SandboxSettings = Field(default_factory=SandboxSettings)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


def _read_yaml_file(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigurationError("Cannot read config file", file_path=str(path), cause=exc) from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError("Config file is not valid YAML", file_path=str(path), cause=exc) from exc
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", file_path=str(path))
    return data


def _apply_env(config: IDEConfig, env: Mapping[str, str]) -> IDEConfig:
    updates: dict = {}
    token = env.get(TOKEN_ENV, "").strip()
    if token:
        updates["token"] = SecretStr(token)
    repo_url = env.get(REPO_URL_ENV, "").strip()
    if repo_url:
        updates["repo_url"] = repo_url
    if not updates:
        return config
    return config.model_copy(update={"remote": config.remote.model_copy(update=updates)})


def load_config(path: str | None = None, *, env: Mapping[str, str] | None = None) -> IDEConfig:
    """Load configuration from ``path`` (default ``./webide.yaml``) plus environment overrides.

    A missing default file means defaults; a missing explicit file is an
    error. Validation problems raise ConfigurationError.
    """
    env = os.environ if env is None else env
    explicit = path is not None
    config_path = Path(path) if explicit else Path.cwd() / DEFAULT_CONFIG_FILE

    if not config_path.exists():
        if explicit:
            raise ConfigurationError("Config file not found", file_path=str(config_path))
        return _apply_env(IDEConfig(), env)

    data = _read_yaml_file(config_path)
    try:
        config = IDEConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError("Invalid configuration", file_path=str(config_path), cause=exc) from exc
    logger.debug("Loaded configuration from %s", config_path)
    return _apply_env(config, env)


__all__ = [
    "IDEConfig",
    "RemoteSettings",
    "SandboxSettings",
    "RunnerSpec",
    "load_config",
    "DEFAULT_CONFIG_FILE",
    "TOKEN_ENV",
    "REPO_URL_ENV",
]
