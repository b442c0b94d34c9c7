"""Search nodes built from catalogued operations.

Every operation yields one ``operation`` node holding the tokens of its method,
paths, identifiers, texts, parameters, request body and responses, plus one
``property`` node per distinct schema property found in its request body and
responses.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..catalog.operations import (
    OperationRecord,
    ResolvedParameter,
    ResolvedRequestBody,
    ResolvedResponse,
    extract_parameters,
    extract_request_body,
    extract_responses,
)
from .embeddings import EmbeddingVector, create_embedding
from .properties import collect_operation_properties
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

NODE_TYPE_OPERATION = "operation"
NODE_TYPE_PROPERTY = "property"


@dataclass(frozen=True, eq=False)
class SearchNode:
    """Indexable unit: one operation or one property of an operation."""

    id: str
    node_type: str
    operation: OperationRecord
    tokens: List[str]
    term_frequency: Dict[str, int]
    length: int
    embedding: Optional[EmbeddingVector]
    matched_property_path: Optional[str] = None

    @property
    def summary(self) -> Optional[str]:
        return self.operation.summary

    @property
    def spec_name(self) -> str:
        return self.operation.spec_name


def operation_key(method: str, path: str) -> str:
    return f"{method}:{path}"


def create_search_node(
    node_id: str,
    node_type: str,
    operation: OperationRecord,
    tokens: Sequence[str],
    matched_property_path: Optional[str] = None,
) -> SearchNode:
    """Build a node, dropping empty tokens and counting term frequencies."""
    filtered = [token for token in tokens if token]
    return SearchNode(
        id=node_id,
        node_type=node_type,
        operation=operation,
        tokens=filtered,
        term_frequency=dict(Counter(filtered)),
        length=len(filtered),
        embedding=create_embedding(filtered),
        matched_property_path=matched_property_path,
    )


def extract_schema_tokens(schema: Optional[str]) -> List[str]:
    """Tokens of a schema's canonical compact JSON form.

    Falls back to tokenizing the raw text when it is not valid JSON.
    """
    if not schema:
        return []
    try:
        parsed = json.loads(schema)
        return tokenize(json.dumps(parsed, ensure_ascii=False, separators=(",", ":")))
    except (TypeError, ValueError):
        return tokenize(schema)


def collect_parameter_tokens(parameters: Sequence[ResolvedParameter]) -> List[str]:
    tokens = []
    for parameter in parameters:
        tokens.extend(tokenize(parameter.name))
        tokens.extend(tokenize(parameter.location))
        if parameter.description:
            tokens.extend(tokenize(parameter.description))
    return tokens


def collect_request_body_tokens(request_body: Optional[ResolvedRequestBody]) -> List[str]:
    if request_body is None:
        return []
    tokens = []
    if request_body.description:
        tokens.extend(tokenize(request_body.description))
    tokens.extend(extract_schema_tokens(request_body.schema))
    return tokens


def collect_response_tokens(responses: Sequence[ResolvedResponse]) -> List[str]:
    tokens = []
    for response in responses:
        tokens.extend(tokenize(response.status))
        if response.description:
            tokens.extend(tokenize(response.description))
        tokens.extend(extract_schema_tokens(response.schema))
    return tokens


def build_operation_nodes(operation: OperationRecord) -> List[SearchNode]:
    """Build the operation node and property nodes of one operation.

    Args:
        operation: Catalogued operation

    Returns:
        Operation node followed by its property nodes
    """
    definition = operation.operation
    document = operation.document

    tokens = []
    tokens.extend(tokenize(operation.method))
    tokens.extend(tokenize(operation.path))
    tokens.extend(tokenize(operation.normalized_path))

    if definition.get("operationId"):
        tokens.extend(tokenize(definition["operationId"]))
    for tag in definition.get("tags") or []:
        tokens.extend(tokenize(tag))
    if definition.get("summary"):
        tokens.extend(tokenize(definition["summary"]))
    if definition.get("description"):
        tokens.extend(tokenize(definition["description"]))

    parameters = extract_parameters(definition, document)
    tokens.extend(collect_parameter_tokens(parameters))

    request_body = extract_request_body(definition, document)
    tokens.extend(collect_request_body_tokens(request_body))

    responses = extract_responses(definition, document)
    tokens.extend(collect_response_tokens(responses))

    key = operation_key(operation.method, operation.path)
    nodes = [create_search_node(f"op:{key}", NODE_TYPE_OPERATION, operation, tokens)]

    for descriptor in collect_operation_properties(operation, request_body, responses):
        nodes.append(
            create_search_node(
                f"prop:{key}:{descriptor.dotted_path}",
                NODE_TYPE_PROPERTY,
                operation,
                descriptor.tokens,
                matched_property_path=descriptor.dotted_path,
            )
        )

    return nodes


__all__ = [
    "NODE_TYPE_OPERATION",
    "NODE_TYPE_PROPERTY",
    "SearchNode",
    "build_operation_nodes",
    "create_search_node",
    "extract_schema_tokens",
    "operation_key",
]
