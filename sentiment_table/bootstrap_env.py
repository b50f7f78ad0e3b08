"""
Environment bootstrap for the Google Sheet data source.

Loads `.env` without overriding existing variables, then makes sure
GOOGLE_APPLICATION_CREDENTIALS points at a service-account file. When it
does not, the JSON from GOOGLE_CREDENTIALS_JSON (env or st.secrets) is
written to a temp file. Other settings are looked up on demand through
`config.get_secret`.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Optional

import streamlit as st
from dotenv import load_dotenv

from sentiment_table.config import get_secret

CREDENTIALS_FILENAME = "sentiment-table-google-credentials.json"


def _credentials_json() -> Optional[str]:
    raw: Any = os.getenv("GOOGLE_CREDENTIALS_JSON")
    if not raw:
        try:
            raw = st.secrets.get("GOOGLE_CREDENTIALS_JSON")  # type: ignore[attr-defined]
        except Exception:
            # No secrets.toml, or running outside the Streamlit runtime
            return None
    if not raw:
        return None
    if isinstance(raw, dict) or hasattr(raw, "to_dict"):
        return json.dumps(dict(raw))
    try:
        json.loads(str(raw))
    except ValueError:
        return None
    return str(raw)


def write_google_credentials() -> Optional[str]:
    """Return the service-account file path, materializing it from JSON if needed."""
    existing_path = get_secret("GOOGLE_APPLICATION_CREDENTIALS")
    if existing_path and os.path.exists(existing_path):
        return existing_path

    json_text = _credentials_json()
    if json_text is None:
        return None
    tmp_path = os.path.join(tempfile.gettempdir(), CREDENTIALS_FILENAME)
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(json_text)
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = tmp_path
    return tmp_path


def ensure_env() -> None:
    """Idempotent; safe to call inside and outside the Streamlit runtime."""
    load_dotenv()
    write_google_credentials()
