"""Configuration module."""

from codeassist.config.loader import load_config
from codeassist.config.models import CodeAssistConfig, ConfigError, HttpOptions
from codeassist.config.paths import (
    get_codeassist_home,
    get_config_path,
    get_logs_path,
    get_session_logs_path,
)

__all__ = [
    "CodeAssistConfig",
    "ConfigError",
    "HttpOptions",
    "get_codeassist_home",
    "get_config_path",
    "get_logs_path",
    "get_session_logs_path",
    "load_config",
]
