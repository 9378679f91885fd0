"""Session audit loggers.

The server records every request and response through an ``AuditLogger``.
``NullAuditLogger`` is the default; ``SessionLogger`` appends entries to
``<logs_dir>/<session_id>.log.jsonl``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable
from pathlib import Path
from typing import Any, Protocol

import aiofiles

from codeassist.sessions.types import LogObjectType, SessionLogEntry, to_jsonable

logger = logging.getLogger(__name__)


class AuditLogger(Protocol):
    """Sink for request/response records.

    ``log`` may be synchronous or return an awaitable; callers treat it as
    fire-and-forget either way.
    """

    def log(self, type: LogObjectType, data: Any) -> Awaitable[None] | None: ...


class NullAuditLogger:
    """Audit logger that records nothing."""

    def log(self, type: LogObjectType, data: Any) -> None:
        return None


class SessionLogger:
    """Writes session entries to a JSONL file, one object per line.

    Logging before ``initialize()`` succeeds is a silent no-op, and write
    failures are only reported at DEBUG.
    """

    def __init__(self, session_id: str, logs_dir: Path | None = None) -> None:
        """Initialize session logger.

        Args:
            session_id: Session identifier, used as the file name.
            logs_dir: Directory for session logs (defaults to the sessions path).
        """
        if logs_dir is None:
            from codeassist.config.paths import get_session_logs_path

            logs_dir = get_session_logs_path()
        self.session_id = session_id
        self.logs_dir = logs_dir
        self.log_file = logs_dir / f"{session_id}.log.jsonl"
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Create the log directory; leaves the logger inert on failure."""
        if self._initialized:
            return
        try:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.exception("Failed to initialize session logger")
            return
        self._initialized = True

    async def log(self, type: LogObjectType, data: Any) -> None:
        """Append an entry to the session log."""
        if not self._initialized:
            return

        entry = SessionLogEntry(type=type, data=to_jsonable(data))
        line = json.dumps(entry.to_dict(), ensure_ascii=False, separators=(",", ":"))
        try:
            async with self._lock:
                async with aiofiles.open(self.log_file, "a", encoding="utf-8") as f:
                    await f.write(line + "\n")
        except OSError as e:
            logger.debug("Error writing to session log file: %s", e)

    async def read_entries(self) -> list[SessionLogEntry]:
        """Read back all entries."""
        if not self.log_file.exists():
            return []
        entries: list[SessionLogEntry] = []
        async with aiofiles.open(self.log_file, encoding="utf-8") as f:
            async for line in f:
                if line.strip():
                    entries.append(SessionLogEntry.from_dict(json.loads(line)))
        return entries
