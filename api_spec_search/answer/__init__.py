"""
Answer Package for API Spec Search

Key Components:
1. Composer Module:
   - Method and path extraction from questions
   - Concise and detailed deterministic answers
   - Structured payload for rephrasing

2. LLM Module:
   - Optional rephrasing through an OpenAI-compatible endpoint
   - Bounded timeout, retries and output length

3. Router Module:
   - Direct questions, searches and unified input
   - Auto-answer for a sole confident candidate

Example Usage:
    from api_spec_search.answer import create_router

    router = create_router()
    response = await router.process_unified("create a todo")
"""

from .composer import DeterministicAnswer, LlmAnswerPayload, answer_question
from .llm import LLMFormatter
from .router import (
    NOT_FOUND_MESSAGE,
    QueryResponse,
    QueryRouter,
    SearchResponse,
    UnifiedResponse,
    create_router,
)

__all__ = [
    "DeterministicAnswer",
    "LLMFormatter",
    "LlmAnswerPayload",
    "NOT_FOUND_MESSAGE",
    "QueryResponse",
    "QueryRouter",
    "SearchResponse",
    "UnifiedResponse",
    "answer_question",
    "create_router",
]
