"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr, ValidationError

from codeassist.config.models import CodeAssistConfig, ConfigError
from codeassist.config.paths import get_config_path

ACCESS_TOKEN_ENV_VAR = "CODE_ASSIST_ACCESS_TOKEN"  # noqa: S105
PROJECT_ENV_VAR = "GOOGLE_CLOUD_PROJECT"


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("codeassist.toml"),  # Current directory
        get_config_path(),  # ~/.codeassist/config.toml (or CODEASSIST_HOME)
    ]


def _resolve_env(config: dict[str, Any]) -> dict[str, Any]:
    """Fill the access token and project from the environment where unset."""
    if config.get("access_token") is None:
        if token := os.environ.get(ACCESS_TOKEN_ENV_VAR):
            config["access_token"] = SecretStr(token)

    if config.get("project_id") is None:
        if project := os.environ.get(PROJECT_ENV_VAR):
            config["project_id"] = project

    return config


def load_config(path: Path | None = None) -> CodeAssistConfig:
    """Load configuration from a TOML file.

    Unlike an explicit path, a missing default file is not an error: the
    defaults (plus environment values) are used instead.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated CodeAssistConfig instance.

    Raises:
        FileNotFoundError: If an explicit config path does not exist.
        ConfigError: If the config file is invalid.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in _get_default_config_paths():
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        try:
            with config_path.open("rb") as f:
                raw_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    raw_config = _resolve_env(raw_config)

    try:
        return CodeAssistConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
