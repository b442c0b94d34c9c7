"""
Configuration Management for API Spec Search

This module defines the configuration models for API Spec Search and the parsing
rules that turn environment variables into them. Configuration is parsed once at
the call boundary and handed to the components that need it; nothing deep inside
the scoring code reads the environment.

Malformed values (non-numeric, negative, out of range, unknown flags) never raise.
They are replaced by the documented defaults, or clamped where a range applies.

Environment Variables:
    API_DIR: Directory containing API description files
    LOG_LEVEL: Logging level
    SEARCH_SCORE_THRESHOLD: Minimum fused score for a candidate (> 0)
    SEARCH_TOP_K: Maximum number of candidates (floored, minimum 1)
    SEARCH_SCORE_GAP: Margin a sole candidate needs over the threshold (>= 0)
    EMBEDDINGS_ENABLED: Fuse hashed-embedding similarity into scores
    EMBED_WEIGHT: Fusion weight, clamped to [0, 1]
    USE_LLM / ENABLE_LLM: Reformat deterministic answers with an LLM
    LLM_API_KEY: API key for the chat-completions endpoint
    LLM_MODEL: Model identifier
    LLM_BASE_URL: Base URL of the chat-completions endpoint

Example Usage:
    from api_spec_search.config import AppConfig

    config = AppConfig.from_env()
    print(config.search.threshold, config.search.top_k)
"""

import logging
import math
import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.2
DEFAULT_TOP_K = 3
DEFAULT_SCORE_GAP = 0.05
DEFAULT_EMBED_WEIGHT = 0.4
DEFAULT_API_DIR = "assets/apis"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LLM_BASE_URL = "https://openrouter.ai/api/v1"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def parse_positive_number(value: Any, fallback: float) -> float:
    """Parse a strictly positive number.

    Args:
        value: Raw value
        fallback: Value used when parsing fails or the number is <= 0

    Returns:
        Parsed number or fallback
    """
    parsed = _parse_float(value)
    if parsed is not None and parsed > 0:
        return parsed
    return fallback


def parse_non_negative_number(value: Any, fallback: float) -> float:
    """Parse a number that may be zero.

    Args:
        value: Raw value
        fallback: Value used when parsing fails or the number is negative

    Returns:
        Parsed number or fallback
    """
    parsed = _parse_float(value)
    if parsed is not None and parsed >= 0:
        return parsed
    return fallback


def parse_boolean_flag(value: Optional[str], fallback: bool) -> bool:
    """Parse an on/off flag.

    Args:
        value: Raw value
        fallback: Value used for empty or unrecognised input

    Returns:
        Parsed flag or fallback
    """
    if not value:
        return fallback
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return fallback


def parse_weight(value: Any, fallback: float) -> float:
    """Parse a weight, clamping it to [0, 1].

    Args:
        value: Raw value
        fallback: Value used when parsing fails

    Returns:
        Clamped weight or fallback
    """
    parsed = _parse_float(value)
    if parsed is None:
        return fallback
    return min(1.0, max(0.0, parsed))


def parse_top_k(value: Any, fallback: int) -> int:
    """Parse a candidate limit, flooring it to an integer of at least 1."""
    return max(1, math.floor(parse_positive_number(value, fallback)))


class SearchSettings(BaseModel):
    """Ranking thresholds and limits."""

    threshold: float = Field(
        DEFAULT_THRESHOLD, gt=0, description="Minimum fused score for a candidate"
    )
    top_k: int = Field(DEFAULT_TOP_K, ge=1, description="Maximum number of candidates")
    score_gap: float = Field(
        DEFAULT_SCORE_GAP,
        ge=0,
        description="Margin over the threshold required to auto-answer a sole candidate",
    )

    @field_validator("threshold", mode="before")
    @classmethod
    def _coerce_threshold(cls, value: Any) -> float:
        return parse_positive_number(value, DEFAULT_THRESHOLD)

    @field_validator("top_k", mode="before")
    @classmethod
    def _coerce_top_k(cls, value: Any) -> int:
        return parse_top_k(value, DEFAULT_TOP_K)

    @field_validator("score_gap", mode="before")
    @classmethod
    def _coerce_score_gap(cls, value: Any) -> float:
        return parse_non_negative_number(value, DEFAULT_SCORE_GAP)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SearchSettings":
        """Parse search settings from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            threshold=env.get("SEARCH_SCORE_THRESHOLD"),
            top_k=env.get("SEARCH_TOP_K"),
            score_gap=env.get("SEARCH_SCORE_GAP"),
        )


class EmbeddingSettings(BaseModel):
    """Hashed-embedding fusion settings."""

    enabled: bool = Field(False, description="Fuse embedding similarity into scores")
    weight: float = Field(
        DEFAULT_EMBED_WEIGHT, ge=0, le=1, description="Weight of the embedding similarity"
    )

    @field_validator("weight", mode="before")
    @classmethod
    def _clamp_weight(cls, value: Any) -> float:
        return parse_weight(value, DEFAULT_EMBED_WEIGHT)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EmbeddingSettings":
        """Parse embedding settings from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            enabled=parse_boolean_flag(env.get("EMBEDDINGS_ENABLED"), False),
            weight=env.get("EMBED_WEIGHT"),
        )


class LLMSettings(BaseModel):
    """Optional LLM answer formatting settings."""

    enabled: bool = Field(False, description="Reformat deterministic answers with an LLM")
    api_key: Optional[str] = Field(None, description="API key for the endpoint")
    model: Optional[str] = Field(None, description="Model identifier")
    base_url: str = Field(DEFAULT_LLM_BASE_URL, description="Chat-completions base URL")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LLMSettings":
        """Parse LLM settings from environment variables."""
        env = os.environ if environ is None else environ
        flag = env.get("USE_LLM") or env.get("ENABLE_LLM") or ""
        enabled = flag.strip().lower() in ("1", "true", "yes")
        return cls(
            enabled=enabled,
            api_key=(env.get("LLM_API_KEY") or "").strip() or None,
            model=(env.get("LLM_MODEL") or "").strip() or None,
            base_url=(env.get("LLM_BASE_URL") or "").strip() or DEFAULT_LLM_BASE_URL,
        )


class AppConfig(BaseModel):
    """Complete configuration."""

    api_dir: str = Field(DEFAULT_API_DIR, description="Directory containing API files")
    log_level: str = Field(DEFAULT_LOG_LEVEL, description="Logging level")
    search: SearchSettings = Field(default_factory=SearchSettings)
    embeddings: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Load configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Parsed configuration
        """
        env = os.environ if environ is None else environ

        log_level = (env.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
        if log_level not in VALID_LOG_LEVELS:
            logger.debug(f"Ignoring invalid LOG_LEVEL {log_level!r}")
            log_level = DEFAULT_LOG_LEVEL

        return cls(
            api_dir=(env.get("API_DIR") or "").strip() or DEFAULT_API_DIR,
            log_level=log_level,
            search=SearchSettings.from_env(env),
            embeddings=EmbeddingSettings.from_env(env),
            llm=LLMSettings.from_env(env),
        )


__all__ = [
    "AppConfig",
    "EmbeddingSettings",
    "LLMSettings",
    "SearchSettings",
    "parse_boolean_flag",
    "parse_non_negative_number",
    "parse_positive_number",
    "parse_top_k",
    "parse_weight",
]
