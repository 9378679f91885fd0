"""Shared runtime bootstrap helpers for CLI entrypoints."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any

import httpx
import typer

from codeassist.api.errors import CodeAssistError
from codeassist.api.server import CodeAssistServer
from codeassist.api.transport import BearerTokenAuth, HttpxTransport
from codeassist.api.types import UserTierId
from codeassist.cli.console import console, error
from codeassist.config import CodeAssistConfig, ConfigError
from codeassist.config.loader import ACCESS_TOKEN_ENV_VAR
from codeassist.logging import log_context
from codeassist.sessions import SessionLogger


def _create_transport(config: CodeAssistConfig) -> HttpxTransport:
    if config.access_token is None:
        raise ConfigError(
            f"No access token configured. Set {ACCESS_TOKEN_ENV_VAR} "
            "or access_token in the config file."
        )
    return HttpxTransport(
        auth=BearerTokenAuth(config.access_token.get_secret_value()),
        timeout=config.timeout_seconds,
    )


@asynccontextmanager
async def open_server(config: CodeAssistConfig) -> AsyncIterator[CodeAssistServer]:
    """Create a server for one CLI invocation.

    Pending session log writes are flushed and the transport closed on exit.
    """
    session_id = str(uuid.uuid4())

    session_logger: SessionLogger | None = None
    if config.session_logging:
        session_logger = SessionLogger(session_id)
        await session_logger.initialize()

    transport = _create_transport(config)
    server = CodeAssistServer(
        transport,
        project_id=config.project_id,
        http_options=config.http_options,
        session_id=session_id,
        user_tier=UserTierId(config.user_tier) if config.user_tier else None,
        audit_logger=session_logger,
        config=config,
    )
    with log_context(session_id=session_id):
        try:
            yield server
        finally:
            await server.drain_audit_log()
            await transport.aclose()


def run_command[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, reporting expected failures as exit status 1."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[dim]Cancelled.[/dim]")
        raise typer.Exit(1) from None
    except (CodeAssistError, ConfigError, FileNotFoundError, httpx.HTTPError) as e:
        error(str(e))
        raise typer.Exit(1) from None
