"""Configuration loading utilities."""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from ai_agent.config.schema import AgentConfig
from ai_agent.errors import ConfigError

ENV_PREFIX = "AIAGENT_"


def get_config_path() -> Path:
    """Get the default configuration file path (~/.ai-agent/config.json)."""
    return Path.home() / ".ai-agent" / "config.json"


def find_env_file() -> Path | None:
    """
    Find .env file in priority order:
    1. Current working directory
    2. Project root (where pyproject.toml exists)
    3. User home directory (~/.ai-agent/.env)

    Returns:
        Path to .env file or None if not found.
    """
    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        return cwd_env

    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            project_env = parent / ".env"
            if project_env.exists():
                return project_env
            break

    home_env = Path.home() / ".ai-agent" / ".env"
    if home_env.exists():
        return home_env

    return None


def load_env_file(env_path: Path | None = None) -> dict[str, str]:
    """
    Load environment variables from a .env file.

    Variables already present in the environment win.

    Returns:
        Dictionary of variables this call added to the environment.
    """
    path = env_path or find_env_file()
    if not path or not path.exists():
        return {}

    env_vars = {}
    try:
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip("'\"")
                if key not in os.environ:
                    os.environ[key] = value
                    env_vars[key] = value
    except OSError as e:
        logger.warning(f"Failed to load .env from {path}: {e}")

    return env_vars


def _flatten_dict_to_env(data: dict, prefix: str = ENV_PREFIX) -> dict[str, str]:
    """
    Flatten a nested dict to AIAGENT_-style env vars.

    E.g. {"http": {"timeout": 10}} -> {"AIAGENT_HTTP__TIMEOUT": "10"}
    Lists are JSON-encoded, which pydantic-settings decodes for complex fields.
    """
    result = {}

    def _flatten(obj: Any, path: str):
        if isinstance(obj, dict):
            for k, v in obj.items():
                _flatten(v, f"{path}__{k.upper()}" if path else f"{prefix}{k.upper()}")
        elif isinstance(obj, list):
            result[path] = json.dumps(obj)
        elif isinstance(obj, bool):
            result[path] = "true" if obj else "false"
        elif obj is not None and str(obj):
            result[path] = str(obj)

    _flatten(data, "")
    return result


def load_config(config_path: Path | None = None, env_path: Path | None = None) -> AgentConfig:
    """
    Load configuration from environment, .env and config.json.

    Priority (highest first):
    1. Real environment variables (set by shell)
    2. .env file variables
    3. config.json values (set as env defaults)
    4. Pydantic defaults

    Raises:
        ConfigError: if the file is unreadable or the merged values are invalid.
    """
    loaded_env = load_env_file(env_path)
    if loaded_env:
        logger.debug(f"Loaded {len(loaded_env)} variables from .env")

    path = config_path or get_config_path()
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e

        # Only fill gaps left by the environment and .env
        for key, value in _flatten_dict_to_env(convert_keys(data)).items():
            if key not in os.environ:
                os.environ[key] = value

    try:
        return AgentConfig()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)
