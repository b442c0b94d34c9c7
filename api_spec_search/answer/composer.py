"""
Deterministic Answer Composer for API Spec Search

This module answers direct ``METHOD /path`` questions from the API descriptions
alone. The answer is plain text assembled from the operation's summary,
parameters and, in detailed mode, its request body and responses. The same
facts are returned as a structured payload that an LLM may rephrase.

Answer reasons:
- ``ok``: the operation was found and described
- ``refusal``: the question names no HTTP method and path
- ``unknown``: no catalogued operation matches the method and path

Example Usage:
    from api_spec_search.answer import answer_question

    answer = answer_question(store.load_catalog(), "Explain GET /todos/{id} in detail")
    print(answer.text, answer.citation)
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..catalog.operations import (
    HTTP_METHODS,
    ApiCatalog,
    extract_parameters,
    extract_request_body,
    extract_responses,
    find_operation,
    normalize_path,
)

logger = logging.getLogger(__name__)

REFUSAL_TEXT = "HTTPメソッドとパスを含むAPIに関する質問のみに回答できます。"
UNKNOWN_TEXT = "提供されたOpenAPIファイルには情報がありません。"
NO_CITATION = "N/A"

MAX_DESCRIPTION_LENGTH = 500
MAX_SCHEMA_LENGTH = 1000
MAX_RESPONSE_ENTRIES = 5

MODE_CONCISE = "concise"
MODE_DETAILED = "detailed"

REASON_OK = "ok"
REASON_REFUSAL = "refusal"
REASON_UNKNOWN = "unknown"

QUESTION_PATTERN = re.compile(
    r"\b(" + "|".join(HTTP_METHODS) + r")\b\s+([^\s?]+)",
    re.IGNORECASE | re.ASCII,
)
DETAIL_PATTERN = re.compile(r"(detail|detailed|explain|full)", re.IGNORECASE)
DETAIL_PATTERN_JA = re.compile(r"詳細|詳しく")
TRAILING_PUNCTUATION = re.compile(r"[.,!?;:]+$")


@dataclass
class PayloadParameter:
    name: str
    location: str
    required: bool
    description: Optional[str] = None


@dataclass
class PayloadRequestBody:
    description: Optional[str] = None
    schema: Optional[str] = None


@dataclass
class PayloadResponse:
    status: str
    description: Optional[str] = None
    schema: Optional[str] = None


@dataclass
class LlmAnswerPayload:
    """Facts about one operation, truncated for use in a prompt."""

    mode: str
    method: str
    path: str
    citation: str
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: List[PayloadParameter] = field(default_factory=list)
    request_body: Optional[PayloadRequestBody] = None
    responses: List[PayloadResponse] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DeterministicAnswer:
    """Answer composed without any model."""

    text: str
    citation: str
    mode: str
    reason: str
    payload: Optional[LlmAnswerPayload] = None


def truncate(value: Optional[str], limit: int) -> Optional[str]:
    """Cut a string to ``limit`` characters, marking the cut with an ellipsis."""
    if value is None or len(value) <= limit:
        return value
    return f"{value[:limit]}…"


def parse_question(question: str) -> Optional[Tuple[str, str]]:
    """Extract the HTTP method and normalized path named in a question.

    Args:
        question: Free-text question

    Returns:
        (method, path) or None when the question names no operation
    """
    match = QUESTION_PATTERN.search(question)
    if not match:
        return None

    method = match.group(1).upper()
    path = TRAILING_PUNCTUATION.sub("", match.group(2))
    return method, normalize_path(path)


def infer_mode(question: str) -> str:
    if DETAIL_PATTERN.search(question) or DETAIL_PATTERN_JA.search(question):
        return MODE_DETAILED
    return MODE_CONCISE


def answer_question(catalog: ApiCatalog, question: str) -> DeterministicAnswer:
    """Answer a direct question about one operation.

    Args:
        catalog: Operation catalog
        question: Question naming an HTTP method and path

    Returns:
        Deterministic answer
    """
    trimmed = question.strip()
    if not trimmed:
        return DeterministicAnswer(REFUSAL_TEXT, NO_CITATION, MODE_CONCISE, REASON_REFUSAL)

    mode = infer_mode(trimmed)
    parsed = parse_question(trimmed)
    if parsed is None:
        logger.debug(f"No method and path in question: {trimmed!r}")
        return DeterministicAnswer(REFUSAL_TEXT, NO_CITATION, mode, REASON_REFUSAL)

    method, path = parsed
    record = find_operation(catalog, method, path)
    if record is None:
        logger.debug(f"No operation for {method} {path}")
        return DeterministicAnswer(UNKNOWN_TEXT, NO_CITATION, mode, REASON_UNKNOWN)

    operation = record.operation
    document = record.document
    parameters = extract_parameters(operation, document)
    request_body = extract_request_body(operation, document)
    responses = extract_responses(operation, document)
    summary = operation.get("summary")

    parts = []
    if summary:
        parts.append(f"{method} {record.path} - {summary}。")
    else:
        parts.append(f"{method} {record.path}。")

    if parameters:
        described = []
        for parameter in parameters:
            status = "必須" if parameter.required else "任意"
            details = f"・{parameter.description}" if parameter.description else ""
            described.append(f"{parameter.name}（{parameter.location}・{status}{details}）")
        parts.append(f"パラメータ: {'、 '.join(described)}。")
    else:
        parts.append("パラメータ: 定義されていません。")

    if mode == MODE_DETAILED:
        if request_body is not None:
            details = []
            if request_body.description:
                details.append(f"説明: {request_body.description}")
            if request_body.schema:
                details.append(f"スキーマ: {request_body.schema}")
            if details:
                parts.append(f"リクエストボディ: {' '.join(details)}。")

        if responses:
            entries = []
            for response in responses:
                segments = [response.status]
                if response.description:
                    segments.append(response.description)
                if response.schema:
                    segments.append(f"スキーマ: {response.schema}")
                entries.append(" - ".join(segments))
            parts.append(f"レスポンス: {' | '.join(entries)}。")

    if not summary and mode == MODE_CONCISE:
        parts.append("仕様には要約が記載されていません。")

    payload = LlmAnswerPayload(
        mode=mode,
        method=method,
        path=record.path,
        citation=record.spec_name,
        summary=truncate(summary, MAX_DESCRIPTION_LENGTH),
        description=truncate(operation.get("description"), MAX_DESCRIPTION_LENGTH),
        parameters=[
            PayloadParameter(
                name=parameter.name,
                location=parameter.location,
                required=parameter.required,
                description=truncate(parameter.description, MAX_DESCRIPTION_LENGTH),
            )
            for parameter in parameters
        ],
        request_body=(
            PayloadRequestBody(
                description=truncate(request_body.description, MAX_DESCRIPTION_LENGTH),
                schema=truncate(request_body.schema, MAX_SCHEMA_LENGTH),
            )
            if request_body is not None
            else None
        ),
        responses=[
            PayloadResponse(
                status=response.status,
                description=truncate(response.description, MAX_DESCRIPTION_LENGTH),
                schema=truncate(response.schema, MAX_SCHEMA_LENGTH),
            )
            for response in responses[:MAX_RESPONSE_ENTRIES]
        ],
    )

    return DeterministicAnswer(
        text=" ".join(parts),
        citation=record.spec_name,
        mode=mode,
        reason=REASON_OK,
        payload=payload,
    )


__all__ = [
    "DeterministicAnswer",
    "LlmAnswerPayload",
    "NO_CITATION",
    "REFUSAL_TEXT",
    "UNKNOWN_TEXT",
    "answer_question",
    "infer_mode",
    "parse_question",
    "truncate",
]
