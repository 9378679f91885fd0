"""Call shapes for the Code Assist API.

Request parameters and responses use snake_case attributes; the wire shapes
they map to live in ``codeassist.api.converter``.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# A content is {"role": ..., "parts": [...]}; a part is e.g. {"text": ...}
Content = dict[str, Any]
Part = dict[str, Any]
ContentListUnion = str | Content | list[str | Content | Part]


class UserTierId(str, Enum):
    """Account-level service tier."""

    FREE = "free-tier"
    LEGACY = "legacy-tier"
    STANDARD = "standard-tier"


@dataclass
class GenerateContentConfig:
    """Optional generation settings.

    ``abort_signal`` is not sent; it cancels the call when set.
    """

    system_instruction: str | Content | None = None
    temperature: float | None = None
    top_p: float | None = None
    top_k: float | None = None
    candidate_count: int | None = None
    max_output_tokens: int | None = None
    stop_sequences: list[str] | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    seed: int | None = None
    response_mime_type: str | None = None
    response_json_schema: dict[str, Any] | None = None
    thinking_config: dict[str, Any] | None = None
    tools: list[dict[str, Any]] | None = None
    tool_config: dict[str, Any] | None = None
    safety_settings: list[dict[str, Any]] | None = None
    labels: dict[str, str] | None = None
    cached_content: str | None = None
    abort_signal: asyncio.Event | None = None


@dataclass
class GenerateContentParameters:
    """Parameters for generateContent / streamGenerateContent."""

    model: str
    contents: ContentListUnion
    config: GenerateContentConfig | None = None


@dataclass
class GenerateContentResponse:
    """One generation result, or one chunk of a streamed result."""

    candidates: list[dict[str, Any]] = field(default_factory=list)
    prompt_feedback: dict[str, Any] | None = None
    usage_metadata: dict[str, Any] | None = None
    model_version: str | None = None
    automatic_function_calling_history: list[Content] | None = None
    response_id: str | None = None
    trace_id: str | None = None

    def _first_parts(self) -> list[Part]:
        if not self.candidates:
            return []
        content = self.candidates[0].get("content") or {}
        return content.get("parts") or []

    @property
    def text(self) -> str | None:
        """Concatenated text parts of the first candidate."""
        texts = [
            part["text"]
            for part in self._first_parts()
            if isinstance(part.get("text"), str) and not part.get("thought")
        ]
        if not texts:
            return None
        return "".join(texts)

    @property
    def function_calls(self) -> list[dict[str, Any]]:
        """Function calls requested by the first candidate."""
        return [
            part["functionCall"]
            for part in self._first_parts()
            if "functionCall" in part
        ]


@dataclass
class CountTokensParameters:
    """Parameters for countTokens."""

    model: str
    contents: ContentListUnion


@dataclass
class CountTokensResponse:
    total_tokens: int = 0


@dataclass
class EmbedContentParameters:
    model: str
    contents: ContentListUnion
