"""Normalize parsed sheet rows into typed bet records.

The bet sheet is maintained by hand, so headers drift (Japanese, romaji or
English spellings) and cells are messy. This module maps every accepted
header spelling to a canonical field, coerces cells to typed values and
discards rows that are blank or carry no usable date.

Usage:
    records = records_from_csv(text, stake_per_race=2000)
"""
from __future__ import annotations

import logging
import math
import re
import warnings
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Union

import pandas as pd

from csv_parser import parse_csv
from settings import BET_PER_RACE

logger = logging.getLogger(__name__)

Number = Union[int, float]

# ---------------------------------------------------------------------------
# Header synonyms
# ---------------------------------------------------------------------------

HEADER_SYNONYMS: Dict[str, tuple] = {
    "date": ("date", "日付", "開催日", "race date"),
    "race": ("race", "レース", "レース名", "race name"),
    "horse": ("honmei", "本命", "本命馬", "本命馬名", "horse", "selected horse"),
    "favorite_rank": ("ninki", "人気", "本命人気", "favorite rank", "popularity"),
    "finish_position": ("chaku", "着順", "結果", "finish", "finish position"),
    "payout": ("payout", "払戻", "払い戻し", "払戻金", "回収額", "return"),
    "timestamp": ("timestamp", "タイムスタンプ"),
}

_HEADER_LOOKUP: Dict[str, str] = {
    synonym: canonical
    for canonical, synonyms in HEADER_SYNONYMS.items()
    for synonym in synonyms
}

_NON_NUMERIC = re.compile(r"[^\d.\-]")
_DATE_SEPARATORS = re.compile(r"[.\-]")
# pandas resolves these to the wall clock; a sheet cell holding them is not a date
_RELATIVE_DATE_WORDS = frozenset({"now", "today"})


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BetRecord:
    """One bet from the sheet (one race)."""
    date: date
    race: str = ""
    horse: str = ""
    favorite_rank: Optional[Number] = None     # None when blank / unparseable
    finish_position: Optional[Number] = None
    stake: int = BET_PER_RACE
    payout: float = 0.0

    @property
    def day_key(self) -> str:
        return self.date.strftime("%Y-%m-%d")


# ---------------------------------------------------------------------------
# Header mapping
# ---------------------------------------------------------------------------

def normalize_header(name: Optional[str]) -> str:
    """Canonical field name for a header cell; unknown headers pass through lowercased."""
    key = str(name or "").strip().lstrip("\ufeff").strip().lower()
    return _HEADER_LOOKUP.get(key, key)


def build_column_index(header_row: List[str]) -> Dict[str, int]:
    """Map canonical field -> column position. Duplicate headers: last one wins."""
    index: Dict[str, int] = {}
    for pos, name in enumerate(header_row):
        index[normalize_header(name)] = pos
    return index


def pick(row: List[str], index: Dict[str, int], field: str) -> str:
    """Cell for ``field``; empty string if the column is unknown or the row is short."""
    pos = index.get(field)
    if pos is None or pos >= len(row):
        return ""
    return row[pos]


# ---------------------------------------------------------------------------
# Cell coercion
# ---------------------------------------------------------------------------

def parse_date(text: Optional[str]) -> Optional[date]:
    """Calendar date from a sheet cell, or None.

    ``.``, ``-`` and ``/`` are interchangeable separators; any time of day
    is dropped.
    """
    raw = str(text or "").strip()
    if not raw or raw.lower() in _RELATIVE_DATE_WORDS:
        return None
    with warnings.catch_warnings():
        # day-first cells (13/05/2024) warn once per row otherwise
        warnings.simplefilter("ignore", UserWarning)
        ts = pd.to_datetime(_DATE_SEPARATORS.sub("/", raw), errors="coerce")
    if pd.isna(ts):
        return None
    return date(ts.year, ts.month, ts.day)


def parse_number(text: Optional[str]) -> float:
    """Strip everything but digits, '.', '-' and parse. Empty -> 0, invalid -> NaN."""
    cleaned = _NON_NUMERIC.sub("", str(text or ""))
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return math.nan


def _optional_number(text: Optional[str]) -> Optional[Number]:
    value = parse_number(text)
    if math.isnan(value) or value == 0:
        return None
    return int(value) if value.is_integer() else value


def _payout(text: Optional[str]) -> float:
    value = parse_number(text)
    if math.isnan(value):
        return 0.0
    return value


# ---------------------------------------------------------------------------
# Row normalization
# ---------------------------------------------------------------------------

def normalize_row(row: List[str], index: Dict[str, int],
                  stake_per_race: int = BET_PER_RACE) -> Optional[BetRecord]:
    """Typed record for one data row, or None when the row should be skipped."""
    day = parse_date(pick(row, index, "date"))
    if day is None:
        return None

    record = BetRecord(
        date=day,
        race=pick(row, index, "race").strip(),
        horse=pick(row, index, "horse").strip(),
        favorite_rank=_optional_number(pick(row, index, "favorite_rank")),
        finish_position=_optional_number(pick(row, index, "finish_position")),
        stake=stake_per_race,
        payout=_payout(pick(row, index, "payout")),
    )

    # blank spreadsheet row that only carries a date
    if not record.race and not record.horse and record.payout == 0:
        return None
    return record


def normalize_rows(table: List[List[str]],
                   stake_per_race: int = BET_PER_RACE) -> List[BetRecord]:
    """Records for every usable data row of ``table`` (header first), sorted by date."""
    if len(table) < 2:
        return []

    index = build_column_index(table[0])
    records: List[BetRecord] = []
    skipped = 0
    for line_no, row in enumerate(table[1:], start=2):
        record = normalize_row(row, index, stake_per_race)
        if record is None:
            skipped += 1
            logger.debug("Skipping sheet row %d: %r", line_no, row)
            continue
        records.append(record)

    if skipped:
        logger.debug("Skipped %d of %d sheet rows", skipped, len(table) - 1)
    return sorted(records, key=lambda r: r.date)


def records_from_csv(text: str, stake_per_race: int = BET_PER_RACE) -> List[BetRecord]:
    """Parse + normalize a raw CSV export."""
    return normalize_rows(parse_csv(text), stake_per_race)
