"""Entry types for JSONL session logs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class LogObjectType(str, Enum):
    """Kind of object recorded in a session log."""

    MODEL_REQUEST = "model_request"
    MODEL_RESPONSE = "model_response"
    TOOL_CALL_SCHEDULE = "tool_call_schedule"
    TOOL_CALL_RESULT = "tool_call_result"


def now_utc() -> datetime:
    return datetime.now(UTC)


@dataclass
class SessionLogEntry:
    type: LogObjectType
    data: Any
    timestamp: datetime = field(default_factory=now_utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionLogEntry:
        return cls(
            type=LogObjectType(data["type"]),
            data=data.get("data"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


def to_jsonable(value: Any, _path: tuple[int, ...] = ()) -> Any:
    """Convert ``value`` into something ``json.dumps`` accepts.

    Containers already on the current path are replaced with ``"[Circular]"``;
    objects json cannot encode fall back to ``str``.
    """
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict | list | tuple | set):
        if id(value) in _path:
            return "[Circular]"
        path = (*_path, id(value))
        if isinstance(value, dict):
            return {str(k): to_jsonable(v, path) for k, v in value.items()}
        return [to_jsonable(item, path) for item in value]
    return str(value)
