"""Conversion between call shapes and Code Assist wire shapes."""

from typing import Any

from codeassist.api.errors import CodeAssistError
from codeassist.api.types import (
    Content,
    ContentListUnion,
    CountTokensParameters,
    CountTokensResponse,
    GenerateContentConfig,
    GenerateContentParameters,
    GenerateContentResponse,
    Part,
)

# GenerateContentConfig attribute -> generationConfig wire key
_GENERATION_CONFIG_FIELDS = {
    "temperature": "temperature",
    "top_p": "topP",
    "top_k": "topK",
    "candidate_count": "candidateCount",
    "max_output_tokens": "maxOutputTokens",
    "stop_sequences": "stopSequences",
    "presence_penalty": "presencePenalty",
    "frequency_penalty": "frequencyPenalty",
    "seed": "seed",
    "response_mime_type": "responseMimeType",
    "response_json_schema": "responseJsonSchema",
    "thinking_config": "thinkingConfig",
}


def _is_content(value: dict[str, Any]) -> bool:
    return "parts" in value or "role" in value


def _to_part(value: str | Part) -> Part:
    if isinstance(value, str):
        return {"text": value}
    return value


def to_contents(contents: ContentListUnion) -> list[Content]:
    """Normalize the accepted content shapes to a list of wire contents.

    Bare strings and parts become user content. Consecutive parts are grouped
    into a single user content, matching how a single multi-part prompt reads.
    """
    if isinstance(contents, str):
        return [{"role": "user", "parts": [{"text": contents}]}]
    if isinstance(contents, dict):
        if _is_content(contents):
            return [contents]
        return [{"role": "user", "parts": [contents]}]

    result: list[Content] = []
    pending_parts: list[Part] = []
    for item in contents:
        if isinstance(item, dict) and _is_content(item):
            if pending_parts:
                result.append({"role": "user", "parts": pending_parts})
                pending_parts = []
            result.append(item)
        else:
            pending_parts.append(_to_part(item))
    if pending_parts:
        result.append({"role": "user", "parts": pending_parts})
    return result


def _to_system_instruction(value: str | Content | None) -> Content | None:
    if value is None:
        return None
    if isinstance(value, str):
        return {"role": "user", "parts": [{"text": value}]}
    return value


def _to_generation_config(config: GenerateContentConfig) -> dict[str, Any] | None:
    generation_config = {
        wire_key: getattr(config, attr)
        for attr, wire_key in _GENERATION_CONFIG_FIELDS.items()
        if getattr(config, attr) is not None
    }
    return generation_config or None


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def to_generate_content_request(
    params: GenerateContentParameters,
    user_prompt_id: str,
    project: str | None = None,
    session_id: str | None = None,
) -> dict[str, Any]:
    """Build the generateContent / streamGenerateContent request body."""
    config = params.config or GenerateContentConfig()
    request = _drop_none(
        {
            "contents": to_contents(params.contents),
            "systemInstruction": _to_system_instruction(config.system_instruction),
            "cachedContent": config.cached_content,
            "tools": config.tools,
            "toolConfig": config.tool_config,
            "labels": config.labels,
            "safetySettings": config.safety_settings,
            "generationConfig": _to_generation_config(config),
            "session_id": session_id,
        }
    )
    return _drop_none(
        {
            "model": params.model,
            "project": project,
            "user_prompt_id": user_prompt_id,
            "request": request,
        }
    )


def _expect_object(wire: Any, method: str) -> None:
    if not isinstance(wire, dict):
        raise CodeAssistError(
            f"Unexpected {method} response: expected a JSON object, "
            f"got {type(wire).__name__}"
        )


def from_generate_content_response(wire: dict[str, Any]) -> GenerateContentResponse:
    """Map a (possibly streamed) generateContent wire response."""
    _expect_object(wire, "generateContent")
    inner = wire.get("response") or {}
    _expect_object(inner, "generateContent")
    return GenerateContentResponse(
        candidates=inner.get("candidates") or [],
        prompt_feedback=inner.get("promptFeedback"),
        usage_metadata=inner.get("usageMetadata"),
        model_version=inner.get("modelVersion"),
        automatic_function_calling_history=inner.get("automaticFunctionCallingHistory"),
        response_id=inner.get("responseId"),
        trace_id=wire.get("traceId"),
    )


def to_count_token_request(params: CountTokensParameters) -> dict[str, Any]:
    return {
        "request": {
            "model": f"models/{params.model}",
            "contents": to_contents(params.contents),
        }
    }


def from_count_token_response(wire: dict[str, Any]) -> CountTokensResponse:
    _expect_object(wire, "countTokens")
    return CountTokensResponse(total_tokens=int(wire.get("totalTokens") or 0))
