"""
Sentiment enrichment client.

Sends one review text to the Gemini `generateContent` endpoint and turns the
reply into a single label. Every failure is reported as one of the sentinel
strings from `sentiment_table.config`; `classify` never raises.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from sentiment_table.config import (
    GENERATION_CONFIG,
    NO_SENTIMENT_RESULT,
    SENTIMENT_ERROR,
    EnrichmentSettings,
)

logger = logging.getLogger(__name__)


def build_prompt(text: str) -> str:
    return (
        "Analyze the sentiment of this review and respond with either 'Positive', "
        f"'Negative', or 'Neutral': \"{text}\""
    )


def build_payload(text: str) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": build_prompt(text)}]}],
        "generationConfig": dict(GENERATION_CONFIG),
    }


def extract_label(result: Any) -> Optional[str]:
    """Return candidates[0].content.parts[0].text, trimmed, or None if the path is missing."""
    if not isinstance(result, dict):
        return None
    candidates = result.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    content = first.get("content") if isinstance(first, dict) else None
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    if not isinstance(text, str):
        return None
    return text.strip()


class SentimentClient:
    """Classifies review text through the Gemini REST API.

    An `httpx.AsyncClient` may be injected (shared connection pool, test
    transports); otherwise a short-lived client is opened per request.
    """

    def __init__(
        self,
        settings: Optional[EnrichmentSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or EnrichmentSettings()
        self._http_client = http_client

    async def _post(self, payload: Dict[str, Any], api_key: str) -> httpx.Response:
        kwargs = {
            "params": {"key": api_key},
            "json": payload,
            "headers": {"Content-Type": "application/json"},
        }
        if self._http_client is not None:
            return await self._http_client.post(self.settings.endpoint, **kwargs)
        async with httpx.AsyncClient() as client:
            return await client.post(self.settings.endpoint, **kwargs)

    async def classify(self, text: str, api_key: str) -> str:
        try:
            response = await self._post(build_payload(text), api_key)
            if response.is_error:
                logger.warning(f"Sentiment API returned HTTP {response.status_code}")
            result = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Sentiment analysis error: {e}")
            return SENTIMENT_ERROR
        except ValueError as e:
            logger.error(f"Sentiment analysis returned non-JSON body: {e}")
            return SENTIMENT_ERROR
        except Exception as e:
            logger.exception(f"Unexpected sentiment analysis error: {e}")
            return SENTIMENT_ERROR

        label = extract_label(result)
        if label is None:
            logger.info("Sentiment API response had no candidate text")
            return NO_SENTIMENT_RESULT
        return label
