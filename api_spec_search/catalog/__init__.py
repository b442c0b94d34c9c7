"""
API Description Catalog Package for API Spec Search

This package loads OpenAPI/Swagger documents and exposes the operations they
declare to the search engine and the answer composer.

Key Components:
1. Parser Module:
   - YAML/JSON loading
   - Format detection
   - Directory scanning

2. Operations Module:
   - Operation enumeration
   - Reference resolution
   - Parameter, request body and response extraction
   - Method + path lookup with path templates

3. Store Module:
   - Process-scoped caching
   - Reset notifications for derived caches

Example Usage:
    from api_spec_search.catalog import SpecStore, find_operation

    store = SpecStore("assets/apis")
    catalog = store.load_catalog()
    record = find_operation(catalog, "GET", "/todos/42")
"""

from .operations import (
    ApiCatalog,
    OperationRecord,
    build_catalog,
    extract_parameters,
    extract_request_body,
    extract_responses,
    find_operation,
    normalize_path,
    resolve_ref,
)
from .parser import APIParser, SpecFile, load_spec_files
from .store import SpecStore

__all__ = [
    "APIParser",
    "ApiCatalog",
    "OperationRecord",
    "SpecFile",
    "SpecStore",
    "build_catalog",
    "extract_parameters",
    "extract_request_body",
    "extract_responses",
    "find_operation",
    "load_spec_files",
    "normalize_path",
    "resolve_ref",
]
