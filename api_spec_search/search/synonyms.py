"""Synonym groups and query expansion.

Each synonym group is expanded into a symmetric relation keyed by normalized
terms: every member maps to every other member of its group. Query expansion
turns a token list into a weighted term multiset plus the ordered set of
distinct terms.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Sequence

from .tokenizer import contains_cjk, normalize_term

logger = logging.getLogger(__name__)

TODO_SYNONYMS = ["todo", "todos", "タスク", "to-do"]
CREATE_SYNONYMS = ["作成", "登録", "登録する", "追加", "新規", "作る", "生成", "create", "add", "register", "new"]
RETRIEVE_SYNONYMS = ["取得", "参照", "照会", "読む", "get", "fetch", "read"]
UPDATE_SYNONYMS = ["更新", "変更", "編集", "修正", "upsert", "update", "modify", "edit", "change"]
DELETE_SYNONYMS = ["削除", "消去", "破棄", "削る", "delete", "remove", "destroy"]
LIST_SYNONYMS = ["一覧", "検索", "絞り込み", "list", "find", "search", "query"]
STATUS_SYNONYMS = ["完了", "完了済み", "ステータス", "状態", "done", "status", "completed"]
POSTAL_SYNONYMS = ["郵便", "郵便番号", "postalcode", "postal_code", "zipcode"]

SYNONYM_GROUPS: List[List[str]] = [
    TODO_SYNONYMS,
    CREATE_SYNONYMS,
    RETRIEVE_SYNONYMS,
    UPDATE_SYNONYMS,
    DELETE_SYNONYMS,
    LIST_SYNONYMS,
    STATUS_SYNONYMS,
    POSTAL_SYNONYMS,
]

NGRAM_SIZES = (2, 3)


def build_synonym_map(groups: Iterable[Sequence[str]]) -> Dict[str, List[str]]:
    """Expand synonym groups into a symmetric term -> synonyms relation.

    Args:
        groups: Groups of terms sharing one meaning

    Returns:
        Mapping from normalized term to its normalized synonyms, excluding the
        term itself, in first-seen order
    """
    relation: Dict[str, Dict[str, None]] = {}

    for group in groups:
        normalized = [normalize_term(term) for term in group]
        for i, base in enumerate(normalized):
            related = relation.setdefault(base, {})
            for j, other in enumerate(normalized):
                if i != j:
                    related[other] = None

    return {term: list(related) for term, related in relation.items()}


SYNONYM_MAP = build_synonym_map(SYNONYM_GROUPS)

# Roots containing CJK characters; compound tokens that contain one of them
# expand as if the root had been given on its own.
CJK_SYNONYM_ROOTS = [(root, synonyms) for root, synonyms in SYNONYM_MAP.items() if contains_cjk(root)]


@dataclass
class QueryContext:
    """Expanded query terms.

    Attributes:
        frequency: Weighted term multiset, in first-seen order
        terms: Distinct terms, in first-seen order
    """

    frequency: Dict[str, int] = field(default_factory=dict)
    terms: List[str] = field(default_factory=list)

    @property
    def term_set(self) -> FrozenSet[str]:
        return frozenset(self.frequency)

    def add(self, term: str, weight: int = 1) -> None:
        if not term:
            return
        if term not in self.frequency:
            self.terms.append(term)
            self.frequency[term] = 0
        self.frequency[term] += weight

    def add_with_synonyms(self, term: str) -> None:
        self.add(term)
        for synonym in SYNONYM_MAP.get(term, ()):
            self.add(synonym)


def generate_character_ngrams(token: str) -> List[str]:
    """Character bigrams then trigrams of a token that contain CJK characters."""
    ngrams = []
    for size in NGRAM_SIZES:
        for start in range(len(token) - size + 1):
            segment = token[start:start + size]
            if contains_cjk(segment):
                ngrams.append(segment)
    return ngrams


def build_query_context(tokens: Sequence[str]) -> QueryContext:
    """Expand query tokens with synonyms and CJK n-grams.

    For every token: the token and its synonyms; for CJK tokens, each
    character n-gram and its synonyms; and every CJK synonym root contained
    in the token, together with that root's synonyms.

    Args:
        tokens: Tokens produced by :func:`tokenize`

    Returns:
        Query context
    """
    context = QueryContext()

    for token in tokens:
        context.add_with_synonyms(token)

        if contains_cjk(token):
            for gram in generate_character_ngrams(token):
                context.add_with_synonyms(gram)

        for root, synonyms in CJK_SYNONYM_ROOTS:
            if root == token or root not in token:
                continue
            context.add(root)
            for synonym in synonyms:
                context.add(synonym)

    logger.debug(f"Expanded {len(tokens)} query tokens into {len(context.terms)} terms")
    return context


__all__ = [
    "CREATE_SYNONYMS",
    "DELETE_SYNONYMS",
    "LIST_SYNONYMS",
    "POSTAL_SYNONYMS",
    "QueryContext",
    "RETRIEVE_SYNONYMS",
    "STATUS_SYNONYMS",
    "SYNONYM_GROUPS",
    "SYNONYM_MAP",
    "TODO_SYNONYMS",
    "UPDATE_SYNONYMS",
    "build_query_context",
    "build_synonym_map",
    "generate_character_ngrams",
]
