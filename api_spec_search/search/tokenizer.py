"""Text normalization and tokenization.

Tokens are maximal runs of Han/Hiragana/Katakana characters or maximal runs of
ASCII letters and digits, taken after NFKC normalization, camelCase splitting,
punctuation folding and lowercasing. Everything else separates tokens.
"""

import re
import unicodedata
from typing import List

import regex

CJK_CHARS = r"\p{Script=Han}\p{Script=Hiragana}\p{Script=Katakana}"

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_QUOTES = re.compile("[\"'`’]")
_WORD_JOINERS = re.compile(r"[_\-]+")
_TOKEN = regex.compile(f"[{CJK_CHARS}]+|[a-z0-9]+")
_CJK_CHAR = regex.compile(f"[{CJK_CHARS}]")
_NON_ALNUM = re.compile(r"[^a-z0-9]+", re.IGNORECASE)


def normalize_term(term: str) -> str:
    """Normalize a term without splitting it into tokens.

    Steps: NFKC, camelCase boundary splitting, quote and underscore/hyphen
    folding to spaces, lowercasing.
    """
    text = unicodedata.normalize("NFKC", term)
    text = _CAMEL_BOUNDARY.sub(r"\1 \2", text)
    text = _QUOTES.sub(" ", text)
    text = _WORD_JOINERS.sub(" ", text)
    return text.lower()


def tokenize(text: str) -> List[str]:
    """Split text into normalized tokens.

    Args:
        text: Raw text. Empty or missing input yields no tokens.

    Returns:
        Tokens in order of appearance
    """
    if not text:
        return []
    if not isinstance(text, str):
        text = str(text)
    return _TOKEN.findall(normalize_term(text))


def contains_cjk(value: str) -> bool:
    """Whether the value contains a Han, Hiragana or Katakana character."""
    return bool(_CJK_CHAR.search(value))


def normalize_identifier(value: str) -> str:
    """Lowercase an identifier and strip everything but ASCII letters and digits."""
    return _NON_ALNUM.sub("", value).lower()


__all__ = [
    "CJK_CHARS",
    "contains_cjk",
    "normalize_identifier",
    "normalize_term",
    "tokenize",
]
