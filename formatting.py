"""Display formatting for the ROI dashboard (yen, percentages, tables).

The aggregation layer only produces typed values; every string the
dashboard shows is built here.
"""
from __future__ import annotations

import math
from typing import List, Optional, Sequence

import pandas as pd

from bet_records import BetRecord
from roi_aggregator import Bucket, YearlySummary

PLACEHOLDER = "—"
LOAD_ERROR = "読込エラー"
NO_DATA = "選択した期間のデータがありません。"

MONTHLY_COLUMNS = ["月", "回収率", "投資", "払戻", "レース数"]
BUCKET_COLUMNS = ["期間", "回収率", "投資", "払戻", "レース数"]
DETAIL_COLUMNS = ["日付", "レース", "本命", "人気", "着順", "投資", "払戻"]


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def yen(amount) -> str:
    """12000 -> '12,000円'. Non-numeric or non-finite values show as 0."""
    value = round(amount) if _is_finite_number(amount) else 0
    return f"{value:,}円"


def pct(ratio: Optional[float]) -> str:
    """1.5 -> '150.0%'. None / NaN / inf -> placeholder."""
    if not _is_finite_number(ratio):
        return PLACEHOLDER
    return f"{ratio * 100:.1f}%"


def roi_percent(ratio: Optional[float]) -> Optional[float]:
    """Chart value in percent; None leaves a gap instead of a bogus point."""
    if not _is_finite_number(ratio):
        return None
    return ratio * 100


def _cell(value) -> str:
    return PLACEHOLDER if value is None else str(value)


# ---------------------------------------------------------------------------
# Text blocks
# ---------------------------------------------------------------------------

def yearly_meta_text(summary: YearlySummary) -> str:
    return (f"投資 {yen(summary.total_stake)}（{summary.race_count}レース）"
            f" / 払戻 {yen(summary.total_payout)}")


def range_text(summary: YearlySummary) -> str:
    if summary.first_date is None or summary.last_date is None:
        return PLACEHOLDER
    return f"{summary.first_date:%Y-%m-%d} 〜 {summary.last_date:%Y-%m-%d}"


def count_text(summary: YearlySummary) -> str:
    if not summary.race_count:
        return "登録件数: 0"
    return f"登録件数: {summary.race_count}レース"


def bucket_summary_text(bucket: Optional[Bucket]) -> str:
    """One-line summary for the selected day or week."""
    if bucket is None or not bucket.records:
        return NO_DATA
    heading = bucket.key if bucket.label == bucket.key else f"{bucket.key}（{bucket.label}）"
    return (f"{heading} {bucket.first_date:%Y-%m-%d}〜{bucket.last_date:%Y-%m-%d}"
            f" / 回収率 {pct(bucket.roi_ratio)}"
            f"（投資 {yen(bucket.total_stake)}・払戻 {yen(bucket.total_payout)}"
            f"・{bucket.race_count}レース）")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def bucket_frame(buckets: Sequence[Bucket], columns: Optional[List[str]] = None) -> pd.DataFrame:
    rows = [
        [b.key, pct(b.roi_ratio), yen(b.total_stake), yen(b.total_payout), b.race_count]
        for b in buckets
    ]
    return pd.DataFrame(rows, columns=columns or BUCKET_COLUMNS)


def monthly_frame(buckets: Sequence[Bucket]) -> pd.DataFrame:
    return bucket_frame(buckets, MONTHLY_COLUMNS)


def detail_frame(records: Sequence[BetRecord]) -> pd.DataFrame:
    rows = [
        [r.day_key, r.race, r.horse, _cell(r.favorite_rank), _cell(r.finish_position),
         yen(r.stake), yen(r.payout)]
        for r in records
    ]
    return pd.DataFrame(rows, columns=DETAIL_COLUMNS)
