"""Code Assist API client."""

from codeassist.api.endpoint import (
    CODE_ASSIST_API_VERSION,
    CODE_ASSIST_ENDPOINT,
    get_method_url,
)
from codeassist.api.errors import (
    CallResult,
    CodeAssistError,
    ErrorClass,
    PolicyRejected,
    RequestCancelledError,
    StreamDecodeError,
    Success,
    TransportError,
    classify_error,
)
from codeassist.api.server import CodeAssistServer
from codeassist.api.stream import decode_stream
from codeassist.api.transport import (
    BearerTokenAuth,
    HttpRequest,
    HttpxTransport,
    LineStream,
    Transport,
)
from codeassist.api.types import (
    CountTokensParameters,
    CountTokensResponse,
    EmbedContentParameters,
    GenerateContentConfig,
    GenerateContentParameters,
    GenerateContentResponse,
    UserTierId,
)

__all__ = [
    # Server
    "CodeAssistServer",
    "get_method_url",
    "CODE_ASSIST_API_VERSION",
    "CODE_ASSIST_ENDPOINT",
    # Transport
    "BearerTokenAuth",
    "HttpRequest",
    "HttpxTransport",
    "LineStream",
    "Transport",
    # Streaming
    "decode_stream",
    # Errors
    "CallResult",
    "CodeAssistError",
    "ErrorClass",
    "PolicyRejected",
    "RequestCancelledError",
    "StreamDecodeError",
    "Success",
    "TransportError",
    "classify_error",
    # Types
    "CountTokensParameters",
    "CountTokensResponse",
    "EmbedContentParameters",
    "GenerateContentConfig",
    "GenerateContentParameters",
    "GenerateContentResponse",
    "UserTierId",
]
