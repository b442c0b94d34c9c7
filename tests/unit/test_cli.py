"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from api_spec_search.cli import cli

CLEAN_ENV = {"USE_LLM": None, "ENABLE_LLM": None, "LOG_LEVEL": None, "SEARCH_TOP_K": None}


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, api_dir, *args):
    return runner.invoke(cli, ["--api-dir", str(api_dir), *args], env=CLEAN_ENV)


def test_search_json(runner, api_dir):
    result = invoke(runner, api_dir, "search", "create a todo", "--format", "json")

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    top = data["candidates"][0]
    assert (top["method"], top["path"]) == ("POST", "/todos")
    assert top["source_type"] == "operation"
    assert top["spec_name"] == "todo.yaml"


def test_search_table(runner, api_dir):
    result = invoke(runner, api_dir, "search", "create a todo")

    assert result.exit_code == 0, result.output
    assert "POST" in result.output
    assert "/todos" in result.output


def test_search_not_found(runner, api_dir):
    result = invoke(runner, api_dir, "search", "zzzqqq")

    assert result.exit_code == 0
    assert "No matching API found. Try different terms." in result.output


def test_search_rebuild(runner, api_dir):
    result = invoke(runner, api_dir, "search", "--rebuild", "--format", "json", "title")

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["candidates"]


def test_ask(runner, api_dir):
    result = invoke(runner, api_dir, "ask", "GET /todos/1")

    assert result.exit_code == 0, result.output
    assert "Get a todo" in result.output
    assert "Source: todo.yaml" in result.output


def test_ask_json(runner, api_dir):
    result = invoke(runner, api_dir, "ask", "--format", "json", "hello")

    assert json.loads(result.output)["citation"] == "N/A"


def test_query_answers_method_and_path(runner, api_dir):
    result = invoke(runner, api_dir, "query", "--format", "json", "GET /todos/1")

    data = json.loads(result.output)
    assert data["result_type"] == "answer"
    assert data["routed_to"] == "query"
    assert data["answer"]["citation"] == "todo.yaml"


def test_query_not_found(runner, api_dir):
    result = invoke(runner, api_dir, "query", "zzzqqq")

    assert result.exit_code == 0
    assert "No matching API found" in result.output


def test_index(runner, api_dir):
    result = invoke(runner, api_dir, "index")

    assert result.exit_code == 0, result.output
    assert "Operations" in result.output
    assert "Property nodes" in result.output


def test_broken_file_exits_with_error(runner, api_dir):
    (api_dir / "broken.yaml").write_text("openapi: [3.0\n", encoding="utf-8")

    result = invoke(runner, api_dir, "search", "create a todo")

    assert result.exit_code == 1
    assert "Error:" in result.output
