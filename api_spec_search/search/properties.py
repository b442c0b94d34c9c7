"""Recursive extraction of schema properties.

A request or response schema is walked depth first. Every declared property
becomes a descriptor identified by its path (``requestBody.address.postalCode``,
``response.200.items.title``) and carrying the tokens of its ancestors plus its
own name, title, description, type, format and enum values.

Composite schemas (``allOf``/``anyOf``/``oneOf``) contribute their members'
properties at the same depth. Every schema object is visited at most once per
walk, so cyclic and mutually referential schemas terminate.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set

from ..catalog.operations import (
    OperationRecord,
    ResolvedRequestBody,
    ResolvedResponse,
    is_reference,
    resolve_ref,
)
from .tokenizer import normalize_identifier, tokenize

logger = logging.getLogger(__name__)

COMPOSITE_KEYWORDS = ("allOf", "anyOf", "oneOf")


@dataclass
class PropertyDescriptor:
    """One nested schema property."""

    path: List[str]
    tokens: List[str]

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path)


@dataclass
class _AccumulatorEntry:
    path: List[str]
    tokens: Dict[str, None] = field(default_factory=dict)

    def add_tokens(self, tokens: Sequence[str]) -> None:
        for token in tokens:
            if token:
                self.tokens[token] = None


PropertyAccumulator = Dict[str, _AccumulatorEntry]


def resolve_schema_object(schema: Any, document: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Resolve a schema or reference to a concrete schema mapping."""
    if not schema or not isinstance(schema, dict):
        return None
    if is_reference(schema):
        resolved = resolve_ref(document, schema["$ref"])
        if isinstance(resolved, dict):
            return resolved
        logger.debug(f"Skipping unresolvable schema reference {schema['$ref']!r}")
        return None
    return schema


def _stringify(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _name_tokens(name: str) -> List[str]:
    tokens = tokenize(name)
    normalized = normalize_identifier(name)
    if normalized:
        tokens.append(normalized)
    return tokens


def build_property_tokens(
    property_name: str,
    base_tokens: Sequence[str],
    schema: Optional[Dict[str, Any]],
) -> List[str]:
    """Tokens describing one property in its context."""
    tokens = list(base_tokens) + _name_tokens(property_name)

    if schema:
        if schema.get("title"):
            tokens.extend(tokenize(schema["title"]))
        if schema.get("description"):
            tokens.extend(tokenize(schema["description"]))
        schema_type = schema.get("type")
        if schema_type:
            if isinstance(schema_type, list):
                schema_type = " ".join(_stringify(item) for item in schema_type)
            tokens.extend(tokenize(_stringify(schema_type)))
        if schema.get("format"):
            tokens.extend(tokenize(_stringify(schema["format"])))
        if isinstance(schema.get("enum"), list):
            for value in schema["enum"]:
                tokens.extend(tokenize(_stringify(value)))

    return tokens


def collect_schema_properties(
    schema: Any,
    document: Dict[str, Any],
    path: List[str],
    base_tokens: List[str],
    accumulator: PropertyAccumulator,
    visited: Set[int],
) -> None:
    """Walk a schema and record its properties in the accumulator.

    Args:
        schema: Schema mapping or ``$ref`` mapping
        document: Document used to resolve references
        path: Path segments of the schema being walked
        base_tokens: Tokens inherited from the enclosing context
        accumulator: Descriptors keyed by dotted path; repeated paths merge
        visited: Identities of schema objects already walked
    """
    resolved = resolve_schema_object(schema, document)
    if resolved is None or id(resolved) in visited:
        return
    visited.add(id(resolved))

    for keyword in COMPOSITE_KEYWORDS:
        members = resolved.get(keyword)
        if isinstance(members, list):
            for member in members:
                collect_schema_properties(member, document, path, base_tokens, accumulator, visited)

    properties = resolved.get("properties")
    if isinstance(properties, dict):
        for property_name, property_schema in properties.items():
            property_name = str(property_name)
            property_path = path + [property_name]
            entry = accumulator.setdefault(
                ".".join(property_path), _AccumulatorEntry(path=property_path)
            )

            resolved_property = resolve_schema_object(property_schema, document)
            entry.add_tokens(build_property_tokens(property_name, base_tokens, resolved_property))

            if resolved_property is not None:
                collect_schema_properties(
                    resolved_property,
                    document,
                    property_path,
                    base_tokens + _name_tokens(property_name),
                    accumulator,
                    visited,
                )

    additional = resolved.get("additionalProperties")
    if isinstance(additional, dict) and additional:
        collect_schema_properties(
            additional,
            document,
            path + ["additionalProperties"],
            base_tokens + ["additional", "properties"],
            accumulator,
            visited,
        )

    items = resolved.get("items")
    if isinstance(items, list):
        for index, item_schema in enumerate(items):
            collect_schema_properties(
                item_schema,
                document,
                path + [f"items{index}"],
                base_tokens + ["items"],
                accumulator,
                visited,
            )
    elif isinstance(items, dict) and items:
        collect_schema_properties(
            items,
            document,
            path + ["items"],
            base_tokens + ["items"],
            accumulator,
            visited,
        )


def collect_operation_properties(
    operation: OperationRecord,
    request_body: Optional[ResolvedRequestBody],
    responses: Sequence[ResolvedResponse],
) -> List[PropertyDescriptor]:
    """Property descriptors of an operation's request body and responses.

    Each root is walked with its own visited set. Descriptors are deduplicated
    by path within the operation.
    """
    accumulator: PropertyAccumulator = {}

    if request_body is not None and request_body.schema_object:
        base_tokens = [token for token in _name_tokens("request body") if token]
        collect_schema_properties(
            request_body.schema_object,
            operation.document,
            ["requestBody"],
            base_tokens,
            accumulator,
            set(),
        )

    for response in responses:
        if not response.schema_object:
            continue
        status_tokens = tokenize("response") + _name_tokens(response.status)
        collect_schema_properties(
            response.schema_object,
            operation.document,
            ["response", response.status],
            status_tokens,
            accumulator,
            set(),
        )

    return [
        PropertyDescriptor(path=entry.path, tokens=list(entry.tokens))
        for entry in accumulator.values()
        if entry.tokens
    ]


__all__ = [
    "PropertyDescriptor",
    "build_property_tokens",
    "collect_operation_properties",
    "collect_schema_properties",
    "resolve_schema_object",
]
