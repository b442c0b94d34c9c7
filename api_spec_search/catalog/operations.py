"""Operation catalog built from parsed API description documents.

The catalog is the document model the search engine consumes: an enumerable list
of operations, same-document ``$ref`` resolution, and extraction of parameters,
request bodies and responses with their references resolved.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Sequence, Set, Tuple

from .parser import SpecFile

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD")

JSON_MEDIA_TYPE = "application/json"


@dataclass(frozen=True, eq=False)
class OperationRecord:
    """One HTTP method bound to one path of one API description."""

    method: str
    path: str
    normalized_path: str
    path_pattern: Pattern[str]
    spec_name: str
    document: Dict[str, Any]
    operation: Dict[str, Any]

    @property
    def key(self) -> Tuple[str, str]:
        """Identity of the operation."""
        return (self.method, self.path)

    @property
    def summary(self) -> Optional[str]:
        return self.operation.get("summary")


@dataclass
class ApiCatalog:
    """All operations found in a set of API descriptions."""

    operations: List[OperationRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.operations)


@dataclass
class ResolvedParameter:
    name: str
    location: str
    required: bool
    description: Optional[str] = None


@dataclass
class ResolvedRequestBody:
    description: Optional[str] = None
    schema: Optional[str] = None
    schema_object: Optional[Dict[str, Any]] = None


@dataclass
class ResolvedResponse:
    status: str
    description: Optional[str] = None
    schema: Optional[str] = None
    schema_object: Optional[Dict[str, Any]] = None


def normalize_path(value: str) -> str:
    """Normalize a URL path.

    Leading slash enforced, repeated slashes collapsed, trailing slashes dropped.
    """
    trimmed = value.strip()
    if not trimmed:
        return "/"
    if not trimmed.startswith("/"):
        trimmed = f"/{trimmed}"
    collapsed = re.sub(r"/+", "/", trimmed)
    if len(collapsed) == 1:
        return collapsed
    return collapsed.rstrip("/") or "/"


def build_path_pattern(normalized_path: str) -> Pattern[str]:
    """Compile a path template into a case-insensitive regex.

    ``{param}`` segments match exactly one path segment.
    """
    segments = []
    for segment in normalized_path.split("/"):
        if not segment:
            continue
        if segment.startswith("{") and segment.endswith("}"):
            segments.append("[^/]+")
        else:
            segments.append(re.escape(segment))
    return re.compile(f"^/{'/'.join(segments)}$", re.IGNORECASE)


def is_reference(value: Any) -> bool:
    return isinstance(value, dict) and "$ref" in value


def _step(current: Any, key: str) -> Tuple[bool, Any]:
    if isinstance(current, dict):
        if key in current:
            return True, current[key]
        # YAML loads unquoted numeric keys such as response codes as ints
        if key.isdigit() and int(key) in current:
            return True, current[int(key)]
        return False, None
    if isinstance(current, list) and key.isdigit() and int(key) < len(current):
        return True, current[int(key)]
    return False, None


def resolve_ref(
    document: Dict[str, Any],
    ref: str,
    _seen: Optional[Set[str]] = None,
) -> Any:
    """Resolve a same-document JSON pointer reference.

    Args:
        document: Document the reference belongs to
        ref: Reference string, e.g. ``#/components/schemas/Todo``

    Returns:
        Resolved value, or None when the reference is external, dangling,
        points at itself, or loops through other references.
    """
    if not isinstance(ref, str) or not ref.startswith("#/"):
        return None

    current: Any = document
    for part in ref[2:].split("/"):
        key = part.replace("~1", "/").replace("~0", "~")
        found, current = _step(current, key)
        if not found:
            return None

    if is_reference(current):
        seen = set(_seen or ())
        seen.add(ref)
        target = current["$ref"]
        if target in seen:
            logger.debug(f"Reference cycle detected at {ref}")
            return None
        return resolve_ref(document, target, seen)

    return current


def resolve_maybe_reference(component: Any, document: Dict[str, Any]) -> Any:
    if not component:
        return None
    if is_reference(component):
        return resolve_ref(document, component["$ref"])
    return component


def format_json(value: Any) -> Optional[str]:
    """Pretty-print a value as JSON, or None if it cannot be serialized."""
    if value is None:
        return None
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return None


def build_catalog(spec_files: Sequence[SpecFile]) -> ApiCatalog:
    """Collect every operation of every document.

    Args:
        spec_files: Parsed API descriptions

    Returns:
        Catalog of operations in document, path and method order
    """
    operations = []

    for spec in spec_files:
        paths = spec.document.get("paths")
        if not isinstance(paths, dict):
            continue

        for raw_path, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue
            raw_path = str(raw_path)
            normalized = normalize_path(raw_path)
            pattern = build_path_pattern(normalized)

            for method in HTTP_METHODS:
                candidate = path_item.get(method.lower())
                if not isinstance(candidate, dict) or "responses" not in candidate:
                    continue

                operations.append(
                    OperationRecord(
                        method=method,
                        path=raw_path,
                        normalized_path=normalized,
                        path_pattern=pattern,
                        spec_name=spec.name,
                        document=spec.document,
                        operation=candidate,
                    )
                )

    logger.debug(f"Catalogued {len(operations)} operations")
    return ApiCatalog(operations=operations)


def find_operation(
    catalog: ApiCatalog, method: str, path: str
) -> Optional[OperationRecord]:
    """Find an operation by method and concrete or templated path.

    An exact normalized-path match wins; otherwise the first operation whose
    path template matches is returned.
    """
    method = method.upper()
    target = normalize_path(path)
    fallback = None

    for record in catalog.operations:
        if record.method != method:
            continue
        if record.normalized_path == target:
            return record
        if fallback is None and record.path_pattern.match(target):
            fallback = record

    return fallback


def extract_parameters(
    operation: Dict[str, Any], document: Dict[str, Any]
) -> List[ResolvedParameter]:
    """Resolve the operation's parameters, deduplicated by name and location."""
    result = []
    seen = set()

    for entry in operation.get("parameters") or []:
        resolved = resolve_maybe_reference(entry, document)
        if not isinstance(resolved, dict):
            continue

        name = str(resolved.get("name", ""))
        location = str(resolved.get("in", ""))
        key = (name, location)
        if key in seen:
            continue
        seen.add(key)

        result.append(
            ResolvedParameter(
                name=name,
                location=location,
                required=bool(resolved.get("required")),
                description=resolved.get("description"),
            )
        )

    return result


def _json_schema(container: Dict[str, Any], document: Dict[str, Any]) -> Tuple[Optional[str], Optional[Dict[str, Any]]]:
    content = container.get("content")
    if not isinstance(content, dict):
        return None, None
    media = content.get(JSON_MEDIA_TYPE)
    if not isinstance(media, dict) or not media.get("schema"):
        return None, None

    resolved = resolve_maybe_reference(media["schema"], document)
    schema_object = resolved if isinstance(resolved, dict) else None
    return format_json(resolved), schema_object


def extract_request_body(
    operation: Dict[str, Any], document: Dict[str, Any]
) -> Optional[ResolvedRequestBody]:
    """Resolve the operation's JSON request body, if any."""
    if not operation.get("requestBody"):
        return None
    resolved = resolve_maybe_reference(operation["requestBody"], document)
    if not isinstance(resolved, dict):
        return None

    schema, schema_object = _json_schema(resolved, document)
    return ResolvedRequestBody(
        description=resolved.get("description"),
        schema=schema,
        schema_object=schema_object,
    )


def extract_responses(
    operation: Dict[str, Any], document: Dict[str, Any]
) -> List[ResolvedResponse]:
    """Resolve the operation's responses in declaration order."""
    responses = []
    declared = operation.get("responses")
    if not isinstance(declared, dict):
        return responses

    for status, entry in declared.items():
        resolved = resolve_maybe_reference(entry, document)
        if not isinstance(resolved, dict):
            continue

        schema, schema_object = _json_schema(resolved, document)
        responses.append(
            ResolvedResponse(
                status=str(status),
                description=resolved.get("description"),
                schema=schema,
                schema_object=schema_object,
            )
        )

    return responses


__all__ = [
    "ApiCatalog",
    "HTTP_METHODS",
    "OperationRecord",
    "ResolvedParameter",
    "ResolvedRequestBody",
    "ResolvedResponse",
    "build_catalog",
    "build_path_pattern",
    "extract_parameters",
    "extract_request_body",
    "extract_responses",
    "find_operation",
    "format_json",
    "is_reference",
    "normalize_path",
    "resolve_maybe_reference",
    "resolve_ref",
]
