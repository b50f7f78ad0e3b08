"""
Application-wide configuration constants and helper utilities.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

import streamlit as st

# Column and cell literals shown in the rendered table
SENTIMENT_HEADER = "Sentiment Analysis"
LOADING_TEXT = "Loading..."

# Row-scoped sentinel strings written in place of a classification label
API_KEY_MISSING = "API key missing"
NO_SENTIMENT_RESULT = "No sentiment result"
SENTIMENT_ERROR = "Error analyzing sentiment"

SENTIMENT_LABELS = ("Positive", "Negative", "Neutral")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-1.5-flash"

# Near-deterministic decoding, single-word answer expected
GENERATION_CONFIG = {
    "temperature": 0.2,
    "topK": 1,
    "topP": 0.8,
    "maxOutputTokens": 20,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class SentimentTableError(Exception):
    """Base error for the sentiment table package."""


class ConfigError(SentimentTableError):
    """A required setting is missing or malformed."""


def get_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """Try env first, then st.secrets (if available)."""
    val = os.getenv(name)
    if val:
        return val
    try:
        sec = getattr(st, "secrets", None)
        if sec:
            v = sec.get(name)  # type: ignore[index]
            return str(v) if v is not None else default
    except Exception:
        # st.secrets raises when no secrets.toml exists outside Streamlit
        pass
    return default


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"Expected a boolean value, got {raw!r}")


def _parse_positive_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"Expected an integer value, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"Expected a positive integer, got {value}")
    return value


@dataclass(frozen=True)
class EnrichmentSettings:
    api_key: str = ""
    model: str = DEFAULT_MODEL
    max_concurrency: Optional[int] = None
    suppress_stale: bool = True

    @property
    def endpoint(self) -> str:
        return f"{GEMINI_BASE_URL}/{self.model}:generateContent"

    @classmethod
    def from_env(cls) -> "EnrichmentSettings":
        return cls(
            api_key=get_secret("GEMINI_API_KEY", "") or "",
            model=get_secret("GEMINI_MODEL", DEFAULT_MODEL) or DEFAULT_MODEL,
            max_concurrency=_parse_positive_int(get_secret("SENTIMENT_MAX_CONCURRENCY")),
            suppress_stale=_parse_bool(get_secret("SENTIMENT_SUPPRESS_STALE"), True),
        )


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or get_secret("LOG_LEVEL", "INFO") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
