"""Tests for the operation catalog."""

import threading
from pathlib import Path

import pytest

from api_spec_search.catalog import (
    APIParser,
    SpecFile,
    SpecStore,
    build_catalog,
    extract_parameters,
    extract_request_body,
    extract_responses,
    find_operation,
    load_spec_files,
    normalize_path,
    resolve_ref,
)
from api_spec_search.exceptions import SpecLoadError


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("/todos", "/todos"),
        ("todos//1/", "/todos/1"),
        ("  /todos/  ", "/todos"),
        ("", "/"),
        ("///", "/"),
    ],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


class TestResolveRef:
    document = {
        "components": {
            "schemas": {
                "Todo": {"type": "object"},
                "Alias": {"$ref": "#/components/schemas/Todo"},
                "Self": {"$ref": "#/components/schemas/Self"},
                "LoopA": {"$ref": "#/components/schemas/LoopB"},
                "LoopB": {"$ref": "#/components/schemas/LoopA"},
            }
        },
        "paths": {"/todos/{id}": {"get": {"responses": {200: {"description": "ok"}}}}},
        "servers": [{"url": "a"}, {"url": "b"}],
    }

    def test_resolves_local_pointer(self):
        assert resolve_ref(self.document, "#/components/schemas/Todo") == {"type": "object"}

    def test_follows_reference_chains(self):
        assert resolve_ref(self.document, "#/components/schemas/Alias") == {"type": "object"}

    def test_self_reference_is_absent(self):
        assert resolve_ref(self.document, "#/components/schemas/Self") is None

    def test_reference_loop_is_absent(self):
        assert resolve_ref(self.document, "#/components/schemas/LoopA") is None

    def test_unescapes_pointer_segments(self):
        resolved = resolve_ref(self.document, "#/paths/~1todos~1{id}/get")
        assert "responses" in resolved

    def test_numeric_keys_and_list_indexes(self):
        assert resolve_ref(self.document, "#/paths/~1todos~1{id}/get/responses/200") == {
            "description": "ok"
        }
        assert resolve_ref(self.document, "#/servers/1/url") == "b"
        assert resolve_ref(self.document, "#/servers/5") is None

    def test_external_and_dangling_references(self):
        assert resolve_ref(self.document, "other.yaml#/components/schemas/Todo") is None
        assert resolve_ref(self.document, "#/components/schemas/Missing") is None
        assert resolve_ref(self.document, None) is None


def test_build_catalog_lists_operations(catalog):
    keys = [(record.method, record.path) for record in catalog.operations]
    assert keys == [
        ("GET", "/todos"),
        ("POST", "/todos"),
        ("GET", "/todos/{id}"),
        ("DELETE", "/todos/{id}"),
    ]
    assert all(record.spec_name == "todo.yaml" for record in catalog.operations)


def test_build_catalog_skips_entries_without_responses():
    document = {
        "openapi": "3.0.0",
        "paths": {
            "/items": {
                "summary": "Items",
                "parameters": [],
                "get": {"summary": "No responses"},
                "put": {"responses": {"200": {"description": "ok"}}},
            }
        },
    }
    catalog = build_catalog([SpecFile(name="items.yaml", document=document)])
    assert [(record.method, record.path) for record in catalog.operations] == [("PUT", "/items")]


class TestFindOperation:
    def test_exact_match(self, catalog):
        record = find_operation(catalog, "GET", "/todos")
        assert record.path == "/todos"

    def test_template_match(self, catalog):
        record = find_operation(catalog, "get", "/todos/42/")
        assert (record.method, record.path) == ("GET", "/todos/{id}")

    def test_template_requires_single_segment(self, catalog):
        assert find_operation(catalog, "GET", "/todos/42/comments") is None

    def test_method_must_match(self, catalog):
        assert find_operation(catalog, "PATCH", "/todos/42") is None

    def test_case_insensitive_path(self, catalog):
        record = find_operation(catalog, "DELETE", "/TODOS/7")
        assert record.path == "/todos/{id}"


def test_extract_parameters_resolves_and_deduplicates(catalog):
    record = find_operation(catalog, "DELETE", "/todos/1")
    parameters = extract_parameters(record.operation, record.document)

    assert len(parameters) == 1
    assert parameters[0].name == "id"
    assert parameters[0].location == "path"
    assert parameters[0].required is True
    assert parameters[0].description == "Todo identifier"


def test_extract_request_body(catalog):
    record = find_operation(catalog, "POST", "/todos")
    request_body = extract_request_body(record.operation, record.document)

    assert request_body.description == "Todo to create"
    assert request_body.schema_object["required"] == ["title"]
    assert '"title"' in request_body.schema


def test_extract_request_body_absent(catalog):
    record = find_operation(catalog, "GET", "/todos")
    assert extract_request_body(record.operation, record.document) is None


def test_extract_responses_stringifies_status(catalog):
    record = find_operation(catalog, "GET", "/todos")
    responses = extract_responses(record.operation, record.document)

    assert [response.status for response in responses] == ["200"]
    assert responses[0].schema_object["type"] == "array"


def test_extract_responses_without_schema(catalog):
    record = find_operation(catalog, "GET", "/todos/1")
    responses = extract_responses(record.operation, record.document)

    assert [response.status for response in responses] == ["200", "404"]
    assert responses[1].schema is None
    assert responses[1].schema_object is None


class TestParser:
    def test_missing_directory(self, tmp_path: Path):
        assert load_spec_files(tmp_path / "missing") == []

    def test_sorted_and_filtered(self, tmp_path: Path):
        (tmp_path / "b.json").write_text('{"openapi": "3.0.0", "paths": {}}', encoding="utf-8")
        (tmp_path / "a.yml").write_text("swagger: '2.0'\npaths: {}\n", encoding="utf-8")
        (tmp_path / "notes.yaml").write_text("title: not an api\n", encoding="utf-8")
        (tmp_path / "readme.md").write_text("# docs\n", encoding="utf-8")

        specs = load_spec_files(tmp_path)

        assert [spec.name for spec in specs] == ["a.yml", "b.json"]

    def test_syntax_error(self, tmp_path: Path):
        broken = tmp_path / "broken.yaml"
        broken.write_text("openapi: [3.0\n", encoding="utf-8")

        with pytest.raises(SpecLoadError) as excinfo:
            APIParser().parse_file(broken)

        assert "broken.yaml" in str(excinfo.value)
        assert excinfo.value.details["file"] == str(broken)


class TestSpecStore:
    def test_caches_catalog(self, store):
        assert store.load_catalog() is store.load_catalog()

    def test_reset_reloads_and_notifies(self, store, api_dir):
        calls = []
        store.on_reset(lambda: calls.append("reset"))
        first = store.load_catalog()

        (api_dir / "todo.yaml").unlink()
        store.reset()

        assert calls == ["reset"]
        assert store.load_catalog() is not first
        assert len(store.load_catalog()) == 0

    def test_force_reload(self, store):
        calls = []
        store.on_reset(lambda: calls.append("reset"))
        first = store.load_catalog()

        second = store.load_catalog(force_reload=True)

        assert calls == ["reset"]
        assert second is not first

    def test_unsubscribe(self, store):
        calls = []
        unsubscribe = store.on_reset(lambda: calls.append("reset"))
        unsubscribe()
        store.reset()
        assert calls == []

    def test_failing_listener_does_not_block_others(self, store):
        calls = []

        def failing():
            raise RuntimeError("boom")

        store.on_reset(failing)
        store.on_reset(lambda: calls.append("reset"))
        store.reset()

        assert calls == ["reset"]

    def test_reset_does_not_wait_for_a_slow_load(self, api_dir):
        parser = BlockingParser()
        store = SpecStore(api_dir, parser=parser)
        loader = threading.Thread(target=store.load_catalog)
        loader.start()
        assert parser.entered.wait(5)

        reset_done = threading.Event()
        resetter = threading.Thread(target=lambda: (store.reset(), reset_done.set()))
        resetter.start()
        finished_while_loading = reset_done.wait(5)

        parser.release.set()
        loader.join(5)
        resetter.join(5)
        assert finished_while_loading

    def test_load_started_before_reset_is_not_cached(self, api_dir):
        parser = BlockingParser()
        store = SpecStore(api_dir, parser=parser)
        results = []
        loader = threading.Thread(target=lambda: results.append(store.load_spec_files()))
        loader.start()
        assert parser.entered.wait(5)

        store.reset()
        parser.release.set()
        loader.join(5)

        assert [spec.name for spec in results[0]] == ["todo.yaml"]
        assert parser.calls == 1
        store.load_spec_files()
        assert parser.calls == 2


class BlockingParser(APIParser):
    """Parser whose first directory parse waits until released."""

    def __init__(self):
        super().__init__()
        self.calls = 0
        self.entered = threading.Event()
        self.release = threading.Event()

    def parse_directory(self, spec_dir):
        self.calls += 1
        if self.calls == 1:
            self.entered.set()
            self.release.wait(5)
        return super().parse_directory(spec_dir)
