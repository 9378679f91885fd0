"""Centralized path management for codeassist.

All local state (config, logs, session transcripts) lives under a single base
directory. The base directory can be overridden with the CODEASSIST_HOME
environment variable.

Default locations:
- Linux/macOS: ~/.codeassist
- Windows: %USERPROFILE%\\.codeassist
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "CODEASSIST_HOME"


@lru_cache(maxsize=1)
def get_codeassist_home() -> Path:
    """Get the base directory for all codeassist data.

    Resolution order:
    1. CODEASSIST_HOME environment variable (if set)
    2. Platform default (~/.codeassist)

    Returns:
        Path to the codeassist home directory.
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".codeassist"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_codeassist_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the process log directory path (daily JSONL files)."""
    return get_codeassist_home() / "logs"


def get_session_logs_path() -> Path:
    """Get the directory holding per-session request/response transcripts."""
    return get_codeassist_home() / "sessions"


def get_all_paths() -> dict[str, Path]:
    """Get all standard paths for debugging/display."""
    return {
        "home": get_codeassist_home(),
        "config": get_config_path(),
        "logs": get_logs_path(),
        "sessions": get_session_logs_path(),
    }
