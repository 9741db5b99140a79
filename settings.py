"""Runtime configuration for the ROI dashboard.

All values come from environment variables (a local ``.env`` is honoured)
and fall back to the defaults used for the published bet sheet.
"""
from __future__ import annotations

import os

import dotenv

dotenv.load_dotenv()

# ---------------------------------------------------------------------------
# Configuration (all from env vars)
# ---------------------------------------------------------------------------

DEFAULT_CSV_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vREk1VsXzGIVBKq27R9hDZZMvM3v5HAaRQfXpxMJnfuUZljh1p6OIf_FgKFAA8zyUc2PPYv8RepTH8d"
    "/pub?gid=2133702332&single=true&output=csv"
)

CSV_URL = os.environ.get("ROI_CSV_URL", DEFAULT_CSV_URL)
BET_PER_RACE = int(os.environ.get("ROI_BET_PER_RACE", "2000"))
FETCH_TIMEOUT_SECONDS = float(os.environ.get("ROI_FETCH_TIMEOUT", "15"))
DAY_WINDOW_SIZE = int(os.environ.get("ROI_DAY_WINDOW", "14"))
LOG_LEVEL = os.environ.get("ROI_LOG_LEVEL", "INFO").upper()
