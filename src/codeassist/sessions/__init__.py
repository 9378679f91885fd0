"""Session request/response logging."""

from codeassist.sessions.types import LogObjectType, SessionLogEntry
from codeassist.sessions.writer import AuditLogger, NullAuditLogger, SessionLogger

__all__ = [
    "AuditLogger",
    "LogObjectType",
    "NullAuditLogger",
    "SessionLogEntry",
    "SessionLogger",
]
