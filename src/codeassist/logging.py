"""Centralized logging configuration for codeassist.

Entry points (the CLI) call configure_logging() once, early.

Logging Levels:
- DEBUG: HTTP request timings, stream bookkeeping, audit logger failures
- INFO: User-facing operations
- WARNING: Recoverable issues (e.g. the policy-rejection tier fallback)
- ERROR: Failures that affect operation

Session transcripts (request/response payloads) are not process logs; they
go through ``codeassist.sessions``.
"""

import json
import logging
import os
import re
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TextIO

DEFAULT_LOG_RETENTION_DAYS = 7

LOG_LEVEL_ENV_VAR = "CODEASSIST_LOG_LEVEL"

DEFAULT_REDACT_PATTERNS: list[str] = [
    # Google OAuth access tokens
    r"\b(ya29\.[A-Za-z0-9._\-]{20,})",
    # Google OAuth refresh tokens
    r"\b(1//[A-Za-z0-9._\-]{20,})",
    # Google API keys
    r"\b(AIza[0-9A-Za-z\-_]{20,})\b",
    # ENV-style assignments: ACCESS_TOKEN=secret or API_KEY: secret
    r"\b[A-Z0-9_]+(?:KEY|TOKEN|SECRET|PASSWORD)\s*[=:]\s*([^\s\"']{8,})",
    # Bearer tokens in headers
    r"\bBearer\s+([A-Za-z0-9._\-+=/]{20,})",
    # PEM private key blocks (service account keys)
    r"-----BEGIN [A-Z ]*PRIVATE KEY-----[\s\S]+?-----END [A-Z ]*PRIVATE KEY-----",
]

_log_session_id: ContextVar[str | None] = ContextVar("log_session_id", default=None)


@dataclass
class SecretRedactor:
    """Redacts credentials from log messages.

    Matches are replaced with a partially masked form so entries stay
    correlatable.
    """

    patterns: list[re.Pattern[str]] = field(default_factory=list)
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.patterns:
            self.patterns = [
                re.compile(p, re.IGNORECASE) for p in DEFAULT_REDACT_PATTERNS
            ]

    def redact(self, text: str) -> str:
        """Redact secrets from text, preserving partial info for debugging."""
        if not self.enabled or not text:
            return text
        result = text
        for pattern in self.patterns:
            result = pattern.sub(self._mask_match, result)
        return result

    def _mask_match(self, match: re.Match[str]) -> str:
        full = match.group(0)

        if "PRIVATE KEY" in full:
            lines = full.strip().split("\n")
            if len(lines) >= 2:
                return f"{lines[0]}\n...redacted...\n{lines[-1]}"
            return "***PRIVATE KEY***"

        token = match.group(1) if match.lastindex else full

        # Already masked by an earlier pattern
        if "..." in token:
            return full

        if len(token) < 12:
            return full.replace(token, "***") if token != full else "***"

        masked = f"{token[:4]}...{token[-4:]}"
        return full.replace(token, masked) if token != full else masked


_redactor = SecretRedactor()


@contextmanager
def log_context(session_id: str | None = None) -> Iterator[None]:
    """Tag log records emitted inside the block with a session id."""
    token = _log_session_id.set(session_id)
    try:
        yield
    finally:
        _log_session_id.reset(token)


def _short_id(value: str | None, max_len: int = 8) -> str:
    if not value:
        return ""
    return value[:max_len]


def prune_old_logs(
    logs_dir: Path,
    retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    suffix: str = ".jsonl",
) -> int:
    """Delete log files older than retention period.

    Returns:
        Number of files deleted.
    """
    if not logs_dir.exists():
        return 0

    cutoff = datetime.now(UTC) - timedelta(days=retention_days)
    deleted = 0

    for entry in logs_dir.iterdir():
        if not entry.is_file() or not entry.name.endswith(suffix):
            continue
        try:
            mtime = datetime.fromtimestamp(entry.stat().st_mtime, UTC)
            if mtime < cutoff:
                entry.unlink()
                deleted += 1
        except OSError:
            pass  # Ignore errors on individual files

    return deleted


def _component(name: str) -> str:
    parts = name.split(".")
    if len(parts) >= 2 and parts[0] == "codeassist":
        return parts[1]
    return parts[0]


class JSONLHandler(logging.Handler):
    """Handler that writes structured log entries to daily JSONL files.

    Files are named YYYY-MM-DD.jsonl; messages and exceptions are redacted,
    and files older than the retention period are pruned on rotation.
    """

    def __init__(
        self,
        logs_dir: Path,
        retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    ):
        super().__init__()
        self._logs_dir = logs_dir
        self._logs_dir.mkdir(parents=True, exist_ok=True)
        self._retention_days = retention_days
        self._current_date: str | None = None
        self._file: TextIO | None = None

    def _get_log_file(self) -> TextIO:
        today = datetime.now(UTC).strftime("%Y-%m-%d")
        if self._current_date != today or self._file is None:
            if self._file:
                self._file.close()
            self._current_date = today
            log_path = self._logs_dir / f"{today}.jsonl"
            self._file = log_path.open("a", encoding="utf-8")
            prune_old_logs(self._logs_dir, self._retention_days)

        return self._file

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry: dict[str, object] = {
                "ts": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "component": _component(record.name),
                "logger": record.name,
                "message": _redactor.redact(record.getMessage()),
            }

            if session_id := _log_session_id.get():
                entry["session_id"] = session_id

            if record.exc_info:
                formatter = self.formatter or logging.Formatter()
                exception_text = formatter.formatException(record.exc_info)
                entry["exception"] = _redactor.redact(exception_text)

            log_file = self._get_log_file()
            log_file.write(json.dumps(entry) + "\n")
            log_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self._file:
            self._file.close()
            self._file = None
        super().close()


class ComponentFormatter(logging.Formatter):
    """Formatter that adds ``component`` and ``context`` to records.

    - codeassist.api.server -> api
    - codeassist.sessions.writer -> sessions
    """

    def format(self, record: logging.LogRecord) -> str:
        record.component = _component(record.name)
        session_id = _short_id(_log_session_id.get())
        record.context = f"[s:{session_id}] " if session_id else ""
        return _redactor.redact(super().format(record))


# Third-party loggers that are too noisy at INFO level
NOISY_LOGGERS = [
    "httpx",
    "httpcore",
]


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    log_to_file: bool = False,
) -> None:
    """Configure logging for codeassist.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses CODEASSIST_LOG_LEVEL env var or WARNING.
        use_rich: Use Rich handler for colorful output.
        log_to_file: Also write logs to JSONL files in the logs directory.
    """
    from codeassist.config.paths import get_logs_path

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING")
    level = level.upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        level = "WARNING"

    log_level = getattr(logging, level)

    handlers: list[logging.Handler] = []

    if use_rich:
        from rich.logging import RichHandler

        console_handler: logging.Handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        console_handler.setFormatter(
            ComponentFormatter("%(context)s%(component)s | %(message)s")
        )
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            ComponentFormatter(
                "%(asctime)s | %(levelname)-8s | %(context)s%(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    handlers.append(console_handler)

    if log_to_file:
        file_handler = JSONLHandler(get_logs_path())
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True,
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
