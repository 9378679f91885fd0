"""Shared test fixtures and factories."""

import asyncio
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from codeassist.api.endpoint import ENDPOINT_ENV_VAR
from codeassist.api.errors import TransportError
from codeassist.api.server import CodeAssistServer
from codeassist.api.transport import HttpRequest, HttpxTransport
from codeassist.config.loader import ACCESS_TOKEN_ENV_VAR, PROJECT_ENV_VAR
from codeassist.config.paths import ENV_VAR, get_codeassist_home
from codeassist.sessions.types import LogObjectType

# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point CODEASSIST_HOME at a temp dir and clear endpoint/auth env vars."""
    monkeypatch.setenv(ENV_VAR, str(tmp_path / "home"))
    for name in (ENDPOINT_ENV_VAR, ACCESS_TOKEN_ENV_VAR, PROJECT_ENV_VAR):
        monkeypatch.delenv(name, raising=False)
    get_codeassist_home.cache_clear()
    yield
    get_codeassist_home.cache_clear()


# =============================================================================
# Transport Fakes
# =============================================================================


class FakeLineStream:
    """Line stream over a fixed list of lines."""

    def __init__(self, lines: list[str]):
        self._lines = lines
        self.lines_read = 0
        self.closed = False

    async def lines(self) -> AsyncIterator[str]:
        for line in self._lines:
            self.lines_read += 1
            yield line

    async def aclose(self) -> None:
        self.closed = True


class FakeTransport:
    """Transport that records requests and replays canned results."""

    def __init__(
        self,
        responses: list[Any] | None = None,
        stream_lines: list[str] | None = None,
        error: Exception | None = None,
    ):
        self.responses = list(responses or [])
        self.stream_lines = stream_lines or []
        self.error = error
        self.requests: list[HttpRequest] = []
        self.signals: list[asyncio.Event | None] = []
        self.streams: list[FakeLineStream] = []

    async def request(
        self, req: HttpRequest, *, signal: asyncio.Event | None = None
    ) -> Any:
        self.requests.append(req)
        self.signals.append(signal)
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return {}

    async def open_stream(
        self, req: HttpRequest, *, signal: asyncio.Event | None = None
    ) -> FakeLineStream:
        self.requests.append(req)
        self.signals.append(signal)
        if self.error is not None:
            raise self.error
        stream = FakeLineStream(self.stream_lines)
        self.streams.append(stream)
        return stream


class RecordingAuditLogger:
    """Audit logger that keeps entries in memory."""

    def __init__(self) -> None:
        self.entries: list[tuple[LogObjectType, Any]] = []

    def log(self, type: LogObjectType, data: Any) -> None:
        self.entries.append((type, data))

    @property
    def types(self) -> list[LogObjectType]:
        return [entry_type for entry_type, _ in self.entries]


def sse_lines(*messages: str) -> list[str]:
    """Frame raw JSON texts as ``data:`` blocks, each closed by a blank line."""
    lines: list[str] = []
    for message in messages:
        lines.append(f"data: {message}")
        lines.append("")
    return lines


def rpc_error(reason: str, status_code: int = 403) -> TransportError:
    """Build a TransportError carrying a google.rpc error with one detail."""
    return TransportError(
        f"Request failed with status {status_code}",
        status_code=status_code,
        url="https://cloudcode-pa.googleapis.com/v1internal:loadCodeAssist",
        response_data={
            "error": {
                "code": status_code,
                "message": "Request is prohibited by organization's policy.",
                "status": "PERMISSION_DENIED",
                "details": [
                    {
                        "@type": "type.googleapis.com/google.rpc.ErrorInfo",
                        "reason": reason,
                        "domain": "googleapis.com",
                    }
                ],
            }
        },
    )


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def audit_logger() -> RecordingAuditLogger:
    return RecordingAuditLogger()


@pytest.fixture
def make_server(
    audit_logger: RecordingAuditLogger,
) -> Callable[..., CodeAssistServer]:
    """Factory for servers wired to a fake transport and recording logger."""

    def factory(transport: Any, **kwargs: Any) -> CodeAssistServer:
        kwargs.setdefault("audit_logger", audit_logger)
        return CodeAssistServer(transport, **kwargs)

    return factory


def mock_httpx_transport(
    handler: Callable[[httpx.Request], Any], **kwargs: Any
) -> HttpxTransport:
    """HttpxTransport whose client is backed by httpx.MockTransport."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(client, **kwargs)


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
