"""Download the published bet sheet as CSV text."""
from __future__ import annotations

import logging
import time
from typing import Optional

import requests

from settings import CSV_URL, FETCH_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """The sheet export could not be downloaded (network error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def build_fetch_url(base_url: str, now_ms: Optional[int] = None) -> str:
    """Append a ``t=<epoch ms>`` cache-buster so intermediaries never serve a stale export."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}t={now_ms}"


def fetch_csv_text(url: str = CSV_URL, session=None,
                   timeout: float = FETCH_TIMEOUT_SECONDS) -> str:
    """GET the export and return its text. Raises FetchError on any failure."""
    http = session or requests
    target = build_fetch_url(url)
    logger.info("Fetching bet sheet: %s", url)
    try:
        response = http.get(target, timeout=timeout)
    except requests.RequestException as e:
        logger.error("Bet sheet fetch failed: %s", e)
        raise FetchError(f"CSV fetch failed: {e}") from e

    if not response.ok:
        logger.error("Bet sheet fetch returned HTTP %s", response.status_code)
        raise FetchError(f"CSV fetch failed: {response.status_code}",
                         status_code=response.status_code)

    text = response.content.decode("utf-8-sig", errors="replace")
    logger.info("Fetched bet sheet (%d bytes)", len(response.content))
    return text
