"""Routing of direct questions, searches and free-form input."""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..catalog.store import SpecStore
from ..config import AppConfig, LLMSettings
from ..search.search_models import SearchCandidate
from ..search.searcher import OperationSearcher
from .composer import MODE_DETAILED, REASON_OK, answer_question
from .llm import LLMFormatter

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "No matching API found. Try different terms."

DETAILED_LLM_TIMEOUT = 7.0
CONCISE_LLM_TIMEOUT = 5.0

RESULT_ANSWER = "answer"
RESULT_CANDIDATES = "candidates"
RESULT_NOT_FOUND = "not_found"

ROUTED_TO_QUERY = "query"
ROUTED_TO_SEARCH = "search"

METHOD_PATH_PATTERN = re.compile(
    r"^(GET|POST|PUT|PATCH|DELETE|HEAD|OPTIONS)\s+/", re.IGNORECASE
)

FormatterFactory = Callable[[LLMSettings], LLMFormatter]


@dataclass
class QueryResponse:
    text: str
    citation: str

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "citation": self.citation}


@dataclass
class SearchResponse:
    candidates: List[SearchCandidate] = field(default_factory=list)
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "candidates": [candidate.to_dict() for candidate in self.candidates]
        }
        if self.message is not None:
            result["message"] = self.message
        return result


@dataclass
class UnifiedResponse:
    """Outcome of routing one free-form input."""

    result_type: str
    routed_to: str
    answer: Optional[QueryResponse] = None
    candidates: Optional[List[SearchCandidate]] = None
    message: Optional[str] = None
    auto_answered: bool = False
    question: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "result_type": self.result_type,
            "routed_to": self.routed_to,
        }
        if self.answer is not None:
            result["answer"] = self.answer.to_dict()
        if self.candidates is not None:
            result["candidates"] = [candidate.to_dict() for candidate in self.candidates]
        if self.message is not None:
            result["message"] = self.message
        if self.auto_answered:
            result["auto_answered"] = True
        if self.question is not None:
            result["question"] = self.question
        return result


def looks_like_method_and_path(value: str) -> bool:
    return bool(METHOD_PATH_PATTERN.match(value))


class QueryRouter:
    """Answers direct questions and routes free-form input to search."""

    def __init__(
        self,
        store: SpecStore,
        searcher: Optional[OperationSearcher] = None,
        config_loader: Optional[Callable[[], AppConfig]] = None,
        formatter_factory: Optional[FormatterFactory] = None,
    ) -> None:
        """Initialize router.

        Args:
            store: Source of catalogued operations
            searcher: Searcher over the same store
            config_loader: Callable returning the current configuration
            formatter_factory: Builds the LLM formatter from its settings
        """
        self.store = store
        self.config_loader = config_loader or AppConfig.from_env
        self.searcher = searcher or OperationSearcher(store, config_loader=self.config_loader)
        self.formatter_factory = formatter_factory or LLMFormatter

    async def process_question(self, question: str) -> QueryResponse:
        """Answer a ``METHOD /path`` question.

        The deterministic answer is returned unless LLM formatting is enabled
        and the operation was found, in which case the model's rephrasing is
        returned; any formatting failure falls back to the deterministic text.

        Args:
            question: Question naming an HTTP method and path

        Returns:
            Answer text and citation
        """
        config = self.config_loader()
        loop = asyncio.get_running_loop()
        catalog = await loop.run_in_executor(None, self.store.load_catalog)
        deterministic = answer_question(catalog, question)

        if (
            deterministic.reason != REASON_OK
            or deterministic.payload is None
            or not config.llm.enabled
        ):
            return QueryResponse(deterministic.text, deterministic.citation)

        timeout = DETAILED_LLM_TIMEOUT if deterministic.mode == MODE_DETAILED else CONCISE_LLM_TIMEOUT
        try:
            formatter = self.formatter_factory(config.llm)
            text = await formatter.format_answer(
                deterministic.payload,
                fallback_text=deterministic.text,
                timeout=timeout,
            )
        except Exception as e:
            logger.warning(
                f"LLM formatting failed, using deterministic answer "
                f"({deterministic.mode}, {deterministic.citation}): {e}"
            )
            text = deterministic.text

        return QueryResponse(text, deterministic.citation)

    async def process_search(self, query: str, force_reload: bool = False) -> SearchResponse:
        """Search, attaching a hint message when nothing matches."""
        trimmed = query.strip()
        if not trimmed:
            return SearchResponse(message=NOT_FOUND_MESSAGE)

        candidates = await self.searcher.search(trimmed, force_reload=force_reload)
        if not candidates:
            return SearchResponse(message=NOT_FOUND_MESSAGE)
        return SearchResponse(candidates=candidates)

    def should_auto_answer(self, candidates: List[SearchCandidate]) -> bool:
        """Whether a sole candidate clears the threshold by the score gap."""
        if len(candidates) != 1:
            return False

        settings = self.config_loader().search
        top = candidates[0]
        if top.score < settings.threshold:
            return False
        return top.score - settings.threshold >= settings.score_gap

    async def process_unified(self, value: str) -> UnifiedResponse:
        """Route free-form input.

        ``METHOD /path`` input is answered directly. Anything else is searched;
        a sole confident candidate is answered in detailed mode.

        Args:
            value: Question or search query

        Returns:
            Answer, candidates or not-found response
        """
        trimmed = value.strip()
        if not trimmed:
            return UnifiedResponse(RESULT_NOT_FOUND, ROUTED_TO_SEARCH, message=NOT_FOUND_MESSAGE)

        if looks_like_method_and_path(trimmed):
            answer = await self.process_question(trimmed)
            return UnifiedResponse(
                RESULT_ANSWER, ROUTED_TO_QUERY, answer=answer, question=trimmed
            )

        search_response = await self.process_search(trimmed)
        if not search_response.candidates:
            return UnifiedResponse(
                RESULT_NOT_FOUND,
                ROUTED_TO_SEARCH,
                message=search_response.message or NOT_FOUND_MESSAGE,
            )

        if self.should_auto_answer(search_response.candidates):
            top = search_response.candidates[0]
            detailed_question = f"Explain {top.method} {top.path} in detail"
            logger.debug(f"Auto-answering sole candidate {top.method} {top.path}")
            answer = await self.process_question(detailed_question)
            return UnifiedResponse(
                RESULT_ANSWER,
                ROUTED_TO_SEARCH,
                answer=answer,
                candidates=search_response.candidates,
                auto_answered=True,
                question=detailed_question,
            )

        return UnifiedResponse(
            RESULT_CANDIDATES, ROUTED_TO_SEARCH, candidates=search_response.candidates
        )


def create_router(config: Optional[AppConfig] = None) -> QueryRouter:
    """Create a router reading API files from the configured directory."""
    if config is None:
        return QueryRouter(SpecStore(AppConfig.from_env().api_dir))
    return QueryRouter(SpecStore(config.api_dir), config_loader=lambda: config)


__all__ = [
    "NOT_FOUND_MESSAGE",
    "QueryResponse",
    "QueryRouter",
    "SearchResponse",
    "UnifiedResponse",
    "create_router",
    "looks_like_method_and_path",
]
