"""Shared fixtures: a small todo API written to a temporary directory."""

from pathlib import Path
from typing import Callable

import pytest

from api_spec_search.catalog import ApiCatalog, SpecStore, build_catalog, load_spec_files
from api_spec_search.config import AppConfig, SearchSettings

TODO_SPEC = """\
openapi: 3.0.3
info:
  title: Todo API
  version: 1.0.0
paths:
  /todos:
    get:
      operationId: listTodos
      summary: List todos
      tags: [todos]
      parameters:
        - name: completed
          in: query
          required: false
          description: Filter by completion
          schema:
            type: boolean
      responses:
        200:
          description: All todos
          content:
            application/json:
              schema:
                type: array
                items:
                  $ref: "#/components/schemas/Todo"
    post:
      operationId: createTodo
      summary: Create a todo
      tags: [todos]
      requestBody:
        description: Todo to create
        required: true
        content:
          application/json:
            schema:
              $ref: "#/components/schemas/NewTodo"
      responses:
        "201":
          description: Created
          content:
            application/json:
              schema:
                type: object
                properties:
                  id:
                    type: string
  /todos/{id}:
    get:
      operationId: getTodo
      summary: Get a todo
      tags: [todos]
      parameters:
        - $ref: "#/components/parameters/TodoId"
      responses:
        "200":
          description: The todo
          content:
            application/json:
              schema:
                $ref: "#/components/schemas/Todo"
        "404":
          description: Not found
    delete:
      operationId: deleteTodo
      tags: [todos]
      parameters:
        - $ref: "#/components/parameters/TodoId"
        - $ref: "#/components/parameters/TodoId"
      responses:
        "204":
          description: Deleted
components:
  parameters:
    TodoId:
      name: id
      in: path
      required: true
      description: Todo identifier
      schema:
        type: string
  schemas:
    NewTodo:
      type: object
      required: [title]
      properties:
        title:
          type: string
    Todo:
      type: object
      properties:
        id:
          type: string
        title:
          type: string
        completed:
          type: boolean
"""


@pytest.fixture
def api_dir(tmp_path: Path) -> Path:
    """Directory holding todo.yaml."""
    directory = tmp_path / "apis"
    directory.mkdir()
    (directory / "todo.yaml").write_text(TODO_SPEC, encoding="utf-8")
    return directory


@pytest.fixture
def catalog(api_dir: Path) -> ApiCatalog:
    return build_catalog(load_spec_files(api_dir))


@pytest.fixture
def store(api_dir: Path) -> SpecStore:
    return SpecStore(api_dir)


@pytest.fixture
def make_config(api_dir: Path) -> Callable[..., AppConfig]:
    """Factory for configurations pointing at the todo API directory."""

    def factory(**search_overrides) -> AppConfig:
        return AppConfig(api_dir=str(api_dir), search=SearchSettings(**search_overrides))

    return factory
