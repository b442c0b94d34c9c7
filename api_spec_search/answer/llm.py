"""LLM rephrasing of deterministic answers through an OpenAI-compatible API."""

import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from ..config import LLMSettings
from .composer import MODE_DETAILED, LlmAnswerPayload

logger = logging.getLogger(__name__)

DEFAULT_DIRECTIVE = """あなたは提供された構造化データだけを使ってAPIエンドポイントに関する回答を書き直すアシスタントです。

ルール:
- 使用できるのは提供された項目（モード、メソッド、パス、パラメータ、リクエストボディ、レスポンス、引用）のみです。
- 新しい事実や例を推測・追加してはいけません。
- 引用元ファイル名をそのまま1回だけ記載してください。
- 情報が不足している場合は「提供されたOpenAPIファイルには情報がありません。」と正確に回答してください。
- 出力は必ず自然な日本語にしてください。"""

DEFAULT_TIMEOUT = 5.0
MIN_TIMEOUT = 3.0
MAX_TIMEOUT = 8.0
CONCISE_CHAR_LIMIT = 1200
DETAILED_CHAR_LIMIT = 2400
MAX_ATTEMPTS = 2
MIN_MAX_TOKENS = 200


def resolve_timeout(timeout: Optional[float]) -> float:
    """Clamp a timeout in seconds to the supported range."""
    if not timeout or math.isnan(timeout):
        return DEFAULT_TIMEOUT
    return min(MAX_TIMEOUT, max(MIN_TIMEOUT, timeout))


def resolve_output_limit(mode: str, override: Optional[int] = None) -> int:
    if override and override > 0:
        return override
    return DETAILED_CHAR_LIMIT if mode == MODE_DETAILED else CONCISE_CHAR_LIMIT


def build_prompt(payload: LlmAnswerPayload, fallback_text: str) -> str:
    """Render the payload and baseline answer as the user message.

    Args:
        payload: Structured facts about the operation
        fallback_text: Deterministic answer the model should rephrase

    Returns:
        Prompt text
    """
    lines = ["構造化された事実:"]

    mode_label = "詳細" if payload.mode == MODE_DETAILED else "簡潔"
    lines.append(f"- モード: {mode_label}")
    lines.append(f"- メソッド: {payload.method}")
    lines.append(f"- パス: {payload.path}")

    if payload.summary:
        lines.append(f"- 要約: {payload.summary}")
    if payload.description:
        lines.append(f"- 説明: {payload.description}")

    if payload.parameters:
        lines.append("- パラメータ:")
        for parameter in payload.parameters:
            parts = [
                f"名称: {parameter.name}",
                f"位置: {parameter.location}",
                f"必須: {'はい' if parameter.required else 'いいえ'}",
            ]
            if parameter.description:
                parts.append(f"説明: {parameter.description}")
            lines.append(f"  • {' | '.join(parts)}")
    else:
        lines.append("- パラメータ: 記載なし。")

    if payload.request_body is not None:
        lines.append("- リクエストボディ:")
        if payload.request_body.description:
            lines.append(f"  • 説明: {payload.request_body.description}")
        if payload.request_body.schema:
            lines.append(f"  • スキーマ: {payload.request_body.schema}")

    if payload.responses:
        lines.append("- レスポンス:")
        for response in payload.responses:
            parts = [f"ステータス: {response.status}"]
            if response.description:
                parts.append(f"説明: {response.description}")
            if response.schema:
                parts.append(f"スキーマ: {response.schema}")
            lines.append(f"  • {' | '.join(parts)}")

    lines.append(f"- 引用: {payload.citation}")
    lines.extend(["", "ベースライン回答:", fallback_text])

    return "\n".join(lines)


def extract_message_text(result: Dict[str, Any]) -> Optional[str]:
    """Text of the first choice of a chat-completions response."""
    choices = result.get("choices") or []
    if not choices:
        return None
    content = (choices[0].get("message") or {}).get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        pieces: List[str] = [
            block["text"]
            for block in content
            if isinstance(block, dict) and isinstance(block.get("text"), str) and block["text"]
        ]
        return "\n".join(pieces) if pieces else None
    return None


class LLMFormatter:
    """Rephrases deterministic answers, falling back to them on any failure."""

    def __init__(
        self,
        settings: LLMSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize formatter.

        Args:
            settings: Endpoint, model and key
            transport: Optional transport, used to stub the endpoint in tests
        """
        self.settings = settings
        self.transport = transport
        self.headers = {
            "Authorization": f"Bearer {settings.api_key}",
            "HTTP-Referer": "https://github.com/api-spec-search/api-spec-search",
            "X-Title": "API Spec Search",
            "Content-Type": "application/json",
        }

    @property
    def configured(self) -> bool:
        return bool(self.settings.model and self.settings.api_key)

    async def format_answer(
        self,
        payload: LlmAnswerPayload,
        fallback_text: str,
        timeout: Optional[float] = None,
        max_output_chars: Optional[int] = None,
    ) -> str:
        """Rephrase an answer.

        Args:
            payload: Structured facts about the operation
            fallback_text: Deterministic answer
            timeout: Per-attempt timeout in seconds, clamped to 3-8
            max_output_chars: Output cap; defaults by mode

        Returns:
            Rephrased text, or ``fallback_text`` when unconfigured or failing
        """
        if not self.configured:
            return fallback_text

        timeout = resolve_timeout(timeout)
        max_chars = resolve_output_limit(payload.mode, max_output_chars)
        data = {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": DEFAULT_DIRECTIVE},
                {"role": "user", "content": build_prompt(payload, fallback_text)},
            ],
            "temperature": 0,
            "top_p": 0.9,
            "max_tokens": max(MIN_MAX_TOKENS, round(max_chars / 4)),
            "stream": False,
        }
        url = f"{self.settings.base_url.rstrip('/')}/chat/completions"

        async with httpx.AsyncClient(
            headers=self.headers,
            timeout=timeout,
            transport=self.transport,
        ) as client:
            for attempt in range(1, MAX_ATTEMPTS + 1):
                try:
                    response = await client.post(url, json=data)
                    response.raise_for_status()
                    text = extract_message_text(response.json())
                    if not text:
                        raise ValueError("Missing text output")
                    normalized = text.strip()
                    if not normalized:
                        raise ValueError("Blank response")
                    if len(normalized) > max_chars:
                        return f"{normalized[:max_chars]}…"
                    return normalized
                except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
                    logger.debug(f"LLM attempt {attempt}/{MAX_ATTEMPTS} failed: {e}")
                    if attempt >= MAX_ATTEMPTS:
                        logger.warning(
                            f"Falling back to deterministic answer ({payload.mode}, "
                            f"{payload.citation}): {e}"
                        )

        return fallback_text


__all__ = [
    "DEFAULT_DIRECTIVE",
    "LLMFormatter",
    "build_prompt",
    "extract_message_text",
    "resolve_output_limit",
    "resolve_timeout",
]
