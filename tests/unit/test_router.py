"""Tests for question, search and unified routing."""

import httpx
import pytest

from api_spec_search.answer.composer import REFUSAL_TEXT
from api_spec_search.answer.llm import LLMFormatter
from api_spec_search.answer.router import (
    NOT_FOUND_MESSAGE,
    QueryRouter,
    looks_like_method_and_path,
)
from api_spec_search.config import AppConfig, LLMSettings
from api_spec_search.search.search_models import SearchCandidate


def make_router(store, config):
    return QueryRouter(store, config_loader=lambda: config)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("GET /todos", True),
        ("delete /todos/1", True),
        ("GET todos", False),
        ("please GET /todos", False),
        ("create a todo", False),
    ],
)
def test_looks_like_method_and_path(value, expected):
    assert looks_like_method_and_path(value) is expected


@pytest.mark.asyncio
async def test_process_question_without_llm(store, make_config):
    router = make_router(store, make_config())

    response = await router.process_question("GET /todos/1")

    assert response.text.startswith("GET /todos/{id} - Get a todo。")
    assert response.citation == "todo.yaml"


@pytest.mark.asyncio
async def test_process_question_refusal_skips_llm(store, api_dir):
    calls = []

    def factory(settings):
        calls.append(settings)
        raise AssertionError("formatter must not be built")

    config = AppConfig(api_dir=str(api_dir), llm=LLMSettings(enabled=True, model="m", api_key="k"))
    router = QueryRouter(store, config_loader=lambda: config, formatter_factory=factory)

    response = await router.process_question("tell me something")

    assert response.text == REFUSAL_TEXT
    assert response.citation == "N/A"
    assert calls == []


@pytest.mark.asyncio
async def test_process_question_with_llm(store, api_dir):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": "整形済みの回答"}}]})

    config = AppConfig(api_dir=str(api_dir), llm=LLMSettings(enabled=True, model="m", api_key="k"))
    router = QueryRouter(
        store,
        config_loader=lambda: config,
        formatter_factory=lambda settings: LLMFormatter(settings, transport=httpx.MockTransport(handler)),
    )

    response = await router.process_question("Explain GET /todos/1")

    assert response.text == "整形済みの回答"
    assert response.citation == "todo.yaml"
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_process_question_formatter_error_falls_back(store, api_dir):
    def factory(settings):
        raise RuntimeError("no client")

    config = AppConfig(api_dir=str(api_dir), llm=LLMSettings(enabled=True, model="m", api_key="k"))
    router = QueryRouter(store, config_loader=lambda: config, formatter_factory=factory)

    response = await router.process_question("GET /todos/1")

    assert response.text.startswith("GET /todos/{id} - Get a todo。")


@pytest.mark.asyncio
async def test_process_search(store, make_config):
    router = make_router(store, make_config())

    response = await router.process_search("create a todo")

    assert response.message is None
    assert (response.candidates[0].method, response.candidates[0].path) == ("POST", "/todos")
    assert "message" not in response.to_dict()


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", "zzzqqq"])
async def test_process_search_not_found(store, make_config, query):
    router = make_router(store, make_config())

    response = await router.process_search(query)

    assert response.candidates == []
    assert response.message == NOT_FOUND_MESSAGE


@pytest.mark.asyncio
async def test_unified_routes_method_and_path_to_answer(store, make_config):
    router = make_router(store, make_config())

    response = await router.process_unified("  DELETE /todos/3 ")

    assert response.result_type == "answer"
    assert response.routed_to == "query"
    assert response.question == "DELETE /todos/3"
    assert response.answer.citation == "todo.yaml"
    assert response.candidates is None


@pytest.mark.asyncio
@pytest.mark.parametrize("value", ["", "zzzqqq"])
async def test_unified_not_found(store, make_config, value):
    router = make_router(store, make_config())

    response = await router.process_unified(value)

    assert response.result_type == "not_found"
    assert response.routed_to == "search"
    assert response.message == NOT_FOUND_MESSAGE
    assert response.to_dict() == {
        "result_type": "not_found",
        "routed_to": "search",
        "message": NOT_FOUND_MESSAGE,
    }


@pytest.mark.asyncio
async def test_unified_returns_candidates(store, make_config):
    router = make_router(store, make_config())

    response = await router.process_unified("title")

    assert response.result_type == "candidates"
    assert response.routed_to == "search"
    assert len(response.candidates) == 3
    assert response.answer is None


@pytest.mark.asyncio
async def test_unified_auto_answers_sole_candidate(store, make_config):
    router = make_router(store, make_config(top_k=1))

    response = await router.process_unified("create a todo")

    assert response.result_type == "answer"
    assert response.routed_to == "search"
    assert response.auto_answered is True
    assert response.question == "Explain POST /todos in detail"
    assert "リクエストボディ" in response.answer.text
    assert [(c.method, c.path) for c in response.candidates] == [("POST", "/todos")]


@pytest.mark.asyncio
async def test_unified_requires_score_gap(store, make_config):
    router = make_router(store, make_config(top_k=1, score_gap=1000.0))

    response = await router.process_unified("create a todo")

    assert response.result_type == "candidates"
    assert response.auto_answered is False


def test_should_auto_answer_margin(store, make_config):
    router = make_router(store, make_config(threshold=0.2, score_gap=0.05))

    def candidate(score):
        return SearchCandidate("GET", "/todos", None, score, "todo.yaml", "operation")

    assert router.should_auto_answer([candidate(0.3)])
    assert not router.should_auto_answer([candidate(0.24)])
    assert not router.should_auto_answer([candidate(1.0), candidate(0.9)])
    assert not router.should_auto_answer([])
