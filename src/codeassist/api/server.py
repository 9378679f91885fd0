"""Code Assist API client.

Every public operation is a thin wrapper around three dispatch shapes: unary
GET, unary POST, and streaming POST. Failures propagate to the caller as
raised, with one exception: ``load_code_assist`` resolves a VPC Service
Controls rejection to the standard tier.
"""

import asyncio
import inspect
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

from codeassist.api.converter import (
    from_count_token_response,
    from_generate_content_response,
    to_count_token_request,
    to_generate_content_request,
)
from codeassist.api.endpoint import get_method_url
from codeassist.api.errors import (
    CallResult,
    ErrorClass,
    PolicyRejected,
    Success,
    classify_error,
)
from codeassist.api.stream import decode_stream
from codeassist.api.transport import HttpRequest, Transport
from codeassist.api.types import (
    CountTokensParameters,
    CountTokensResponse,
    EmbedContentParameters,
    GenerateContentParameters,
    GenerateContentResponse,
    UserTierId,
)
from codeassist.config.models import CodeAssistConfig, HttpOptions
from codeassist.sessions.types import LogObjectType
from codeassist.sessions.writer import AuditLogger, NullAuditLogger

logger = logging.getLogger(__name__)

STREAM_PARAMS = {"alt": "sse"}


def _standard_tier_response() -> dict[str, Any]:
    return {"currentTier": {"id": UserTierId.STANDARD.value}}


class CodeAssistServer:
    """Client for the Code Assist ``v1internal`` API."""

    def __init__(
        self,
        transport: Transport,
        project_id: str | None = None,
        http_options: HttpOptions | None = None,
        session_id: str | None = None,
        user_tier: UserTierId | None = None,
        audit_logger: AuditLogger | None = None,
        config: CodeAssistConfig | None = None,
    ) -> None:
        self.transport = transport
        self.project_id = project_id
        self.http_options = http_options or HttpOptions()
        self.session_id = session_id
        self.user_tier = user_tier
        self.audit_logger: AuditLogger = audit_logger or NullAuditLogger()
        self.config = config or CodeAssistConfig()
        self._pending_logs: set[asyncio.Task[None]] = set()

    # -- Public operations --------------------------------------------------

    async def generate_content_stream(
        self,
        params: GenerateContentParameters,
        user_prompt_id: str,
    ) -> AsyncGenerator[GenerateContentResponse, None]:
        """Start a streamed generation.

        The request is issued before this returns, so transport failures raise
        here rather than on first iteration.
        """
        signal = params.config.abort_signal if params.config else None
        chunks = await self.request_streaming_post(
            "streamGenerateContent",
            to_generate_content_request(
                params, user_prompt_id, self.project_id, self.session_id
            ),
            signal,
        )

        async def convert() -> AsyncGenerator[GenerateContentResponse, None]:
            try:
                async for chunk in chunks:
                    yield from_generate_content_response(chunk)
            finally:
                await chunks.aclose()

        return convert()

    async def generate_content(
        self,
        params: GenerateContentParameters,
        user_prompt_id: str,
    ) -> GenerateContentResponse:
        signal = params.config.abort_signal if params.config else None
        resp = await self.request_post(
            "generateContent",
            to_generate_content_request(
                params, user_prompt_id, self.project_id, self.session_id
            ),
            signal,
        )
        return from_generate_content_response(resp)

    async def onboard_user(self, req: dict[str, Any]) -> dict[str, Any]:
        """Start onboarding; returns a long-running operation."""
        return await self.request_post("onboardUser", req)

    async def load_code_assist(self, req: dict[str, Any]) -> dict[str, Any]:
        """Load the user's Code Assist state.

        Users blocked by a VPC Service Controls perimeter get the standard
        tier instead of an error.
        """
        result = await self._request_post_classified("loadCodeAssist", req)
        match result:
            case Success(value=value):
                return value
            case PolicyRejected(error=error):
                logger.warning(
                    "loadCodeAssist rejected by security policy, "
                    "assuming standard tier: %s",
                    error,
                )
                return _standard_tier_response()

    async def get_code_assist_global_user_setting(self) -> dict[str, Any]:
        return await self.request_get("getCodeAssistGlobalUserSetting")

    async def set_code_assist_global_user_setting(
        self, req: dict[str, Any]
    ) -> dict[str, Any]:
        return await self.request_post("setCodeAssistGlobalUserSetting", req)

    async def count_tokens(self, params: CountTokensParameters) -> CountTokensResponse:
        resp = await self.request_post("countTokens", to_count_token_request(params))
        return from_count_token_response(resp)

    async def embed_content(self, params: EmbedContentParameters) -> Any:
        raise NotImplementedError("Embeddings are not supported by Code Assist.")

    # -- Dispatch -----------------------------------------------------------

    def get_method_url(self, method: str) -> str:
        return get_method_url(method, endpoint_override=self.config.endpoint_override)

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", **self.http_options.headers}

    async def request_post(
        self,
        method: str,
        req: Any,
        signal: asyncio.Event | None = None,
    ) -> Any:
        url = self.get_method_url(method)
        self._audit(
            LogObjectType.MODEL_REQUEST, {"url": url, "method": "POST", "body": req}
        )
        data = await self.transport.request(
            HttpRequest(
                url=url,
                method="POST",
                headers=self._headers(),
                body=json.dumps(req),
            ),
            signal=signal,
        )
        self._audit(
            LogObjectType.MODEL_RESPONSE,
            {"url": url, "method": "POST", "response": data},
        )
        return data

    async def _request_post_classified(
        self,
        method: str,
        req: Any,
        signal: asyncio.Event | None = None,
    ) -> CallResult[Any]:
        """POST, turning policy rejections into a ``PolicyRejected`` result.

        Every other failure is re-raised unchanged.
        """
        try:
            return Success(await self.request_post(method, req, signal))
        except Exception as e:
            if classify_error(e) is ErrorClass.POLICY_REJECTED:
                return PolicyRejected(e)
            raise

    async def request_get(
        self,
        method: str,
        signal: asyncio.Event | None = None,
    ) -> Any:
        url = self.get_method_url(method)
        self._audit(LogObjectType.MODEL_REQUEST, {"url": url, "method": "GET"})
        data = await self.transport.request(
            HttpRequest(url=url, method="GET", headers=self._headers()),
            signal=signal,
        )
        self._audit(
            LogObjectType.MODEL_RESPONSE,
            {"url": url, "method": "GET", "response": data},
        )
        return data

    async def request_streaming_post(
        self,
        method: str,
        req: Any,
        signal: asyncio.Event | None = None,
    ) -> AsyncGenerator[Any, None]:
        """POST with ``alt=sse`` and return the decoded messages.

        The returned generator is single-pass; each message is audit-logged as
        it is produced. The response is closed when the generator finishes,
        fails, or is closed early.
        """
        url = self.get_method_url(method)
        self._audit(
            LogObjectType.MODEL_REQUEST,
            {"url": url, "method": "POST", "params": dict(STREAM_PARAMS), "body": req},
        )
        stream = await self.transport.open_stream(
            HttpRequest(
                url=url,
                method="POST",
                headers=self._headers(),
                params=dict(STREAM_PARAMS),
                body=json.dumps(req),
            ),
            signal=signal,
        )

        async def messages() -> AsyncGenerator[Any, None]:
            try:
                async for chunk in decode_stream(stream.lines(), signal):
                    self._audit(
                        LogObjectType.MODEL_RESPONSE,
                        {"url": url, "method": "POST", "response": chunk},
                    )
                    yield chunk
            finally:
                await stream.aclose()

        return messages()

    # -- Audit logging ------------------------------------------------------

    def _audit(self, type: LogObjectType, data: Any) -> None:
        """Hand an entry to the audit logger without waiting on it.

        Logger failures never reach the caller.
        """
        try:
            result = self.audit_logger.log(type, data)
        except Exception as e:
            logger.debug("Audit logger failed: %s", e)
            return
        if not inspect.isawaitable(result):
            return

        task = asyncio.ensure_future(result)
        self._pending_logs.add(task)
        task.add_done_callback(self._on_audit_done)

    def _on_audit_done(self, task: asyncio.Task[None]) -> None:
        self._pending_logs.discard(task)
        if task.cancelled():
            return
        if (exc := task.exception()) is not None:
            logger.debug("Audit logger failed: %s", exc)

    async def drain_audit_log(self) -> None:
        """Wait for outstanding audit log writes."""
        if self._pending_logs:
            await asyncio.gather(*self._pending_logs, return_exceptions=True)
