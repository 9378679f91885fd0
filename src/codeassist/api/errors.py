"""Code Assist errors and failure classification."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

SECURITY_POLICY_VIOLATED = "SECURITY_POLICY_VIOLATED"


class CodeAssistError(Exception):
    """Base class for errors raised by the Code Assist client."""


class TransportError(CodeAssistError):
    """Non-2xx response from the backend.

    ``response_data`` holds the parsed error body when it was JSON (normally a
    ``google.rpc.Status`` wrapped as ``{"error": {...}}``), else the raw text.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        url: str,
        response_data: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.response_data = response_data


class RequestCancelledError(CodeAssistError):
    """The cancellation signal fired before the request completed."""


class StreamDecodeError(CodeAssistError):
    """A streamed response violated the line protocol."""

    def __init__(self, message: str, *, line: str | None = None) -> None:
        super().__init__(message)
        self.line = line


class ErrorClass(str, Enum):
    """How a failure should be treated."""

    POLICY_REJECTED = "policy_rejected"
    OTHER = "other"


def _error_details(error: BaseException) -> list[Any] | None:
    data = getattr(error, "response_data", None)
    if not isinstance(data, Mapping):
        return None
    body = data.get("error")
    if not isinstance(body, Mapping):
        return None
    details = body.get("details")
    if not isinstance(details, list):
        return None
    return details


def classify_error(error: BaseException) -> ErrorClass:
    """Classify a failure from its structured error details.

    A failure is a policy rejection (VPC Service Controls blocked the caller)
    when any entry of ``error.details`` has reason SECURITY_POLICY_VIOLATED.
    """
    details = _error_details(error)
    if details and any(
        isinstance(detail, Mapping) and detail.get("reason") == SECURITY_POLICY_VIOLATED
        for detail in details
    ):
        return ErrorClass.POLICY_REJECTED
    return ErrorClass.OTHER


@dataclass(frozen=True)
class Success[T]:
    value: T


@dataclass(frozen=True)
class PolicyRejected:
    error: BaseException


type CallResult[T] = Success[T] | PolicyRejected
