"""ROI aggregation over bet records.

Groups records by day, ISO week or calendar month and computes stake,
payout and ROI per bucket, plus a single summary over the whole record set.
Buckets only exist for periods that have at least one record and are
returned in ascending key order (keys are zero-padded, so lexicographic
order is chronological).

Usage:
    days = aggregate_by_day(records)
    weeks = aggregate_by_week(records)
    summary = summarize(records)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from bet_records import BetRecord
from settings import BET_PER_RACE


# ---------------------------------------------------------------------------
# Period keys
# ---------------------------------------------------------------------------

class IsoWeek(NamedTuple):
    year: int
    week: int

    @property
    def key(self) -> str:
        return f"{self.year}-W{self.week:02d}"

    @property
    def label(self) -> str:
        return f"{self.year}年 第{self.week}週"


def day_key(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def iso_week(d: date) -> IsoWeek:
    """ISO-8601 week (Monday start; week 1 holds the year's first Thursday)."""
    iso_year, week, _ = d.isocalendar()
    return IsoWeek(iso_year, week)


def week_key(d: date) -> str:
    return iso_week(d).key


def _ratio(payout: float, stake: float) -> Optional[float]:
    if stake > 0:
        return payout / stake
    return None


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Bucket:
    """Records sharing one period key (day, ISO week or month)."""
    key: str
    label: str
    total_payout: float
    race_count: int
    stake_per_race: int = BET_PER_RACE
    records: Tuple[BetRecord, ...] = ()

    @property
    def total_stake(self) -> int:
        return self.race_count * self.stake_per_race

    @property
    def roi_ratio(self) -> Optional[float]:
        """Payout / stake; None when nothing was staked."""
        return _ratio(self.total_payout, self.total_stake)

    @property
    def first_date(self) -> Optional[date]:
        return self.records[0].date if self.records else None

    @property
    def last_date(self) -> Optional[date]:
        return self.records[-1].date if self.records else None


@dataclass(frozen=True)
class YearlySummary:
    """Aggregate over every loaded record."""
    total_stake: int = 0
    total_payout: float = 0.0
    race_count: int = 0
    first_date: Optional[date] = None
    last_date: Optional[date] = None

    @property
    def roi_ratio(self) -> Optional[float]:
        return _ratio(self.total_payout, self.total_stake)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def _group(records: Sequence[BetRecord],
           key_fn: Callable[[date], str],
           label_fn: Callable[[date], str],
           stake_per_race: int) -> List[Bucket]:
    members: Dict[str, List[BetRecord]] = {}
    labels: Dict[str, str] = {}
    for rec in records:
        k = key_fn(rec.date)
        if k not in members:
            members[k] = []
            labels[k] = label_fn(rec.date)
        members[k].append(rec)

    buckets = []
    for k in sorted(members):
        group = sorted(members[k], key=lambda r: r.date)
        buckets.append(Bucket(
            key=k,
            label=labels[k],
            total_payout=sum(r.payout for r in group),
            race_count=len(group),
            stake_per_race=stake_per_race,
            records=tuple(group),
        ))
    return buckets


def aggregate_by_day(records: Sequence[BetRecord],
                     stake_per_race: int = BET_PER_RACE) -> List[Bucket]:
    return _group(records, day_key, day_key, stake_per_race)


def aggregate_by_week(records: Sequence[BetRecord],
                      stake_per_race: int = BET_PER_RACE) -> List[Bucket]:
    return _group(records, week_key, lambda d: iso_week(d).label, stake_per_race)


def aggregate_by_month(records: Sequence[BetRecord],
                       stake_per_race: int = BET_PER_RACE) -> List[Bucket]:
    return _group(records, month_key, month_key, stake_per_race)


def summarize(records: Sequence[BetRecord],
              stake_per_race: int = BET_PER_RACE) -> YearlySummary:
    """Single bucket over all records, no key grouping."""
    if not records:
        return YearlySummary()
    dates = [r.date for r in records]
    return YearlySummary(
        total_stake=len(records) * stake_per_race,
        total_payout=sum(r.payout for r in records),
        race_count=len(records),
        first_date=min(dates),
        last_date=max(dates),
    )


# ---------------------------------------------------------------------------
# Detail lookups
# ---------------------------------------------------------------------------

def records_for_day(records: Sequence[BetRecord], key: str) -> List[BetRecord]:
    return sorted((r for r in records if day_key(r.date) == key), key=lambda r: r.date)


def records_for_week(records: Sequence[BetRecord], key: str) -> List[BetRecord]:
    return sorted((r for r in records if week_key(r.date) == key), key=lambda r: r.date)


def bucket_for_key(buckets: Sequence[Bucket], key: str) -> Optional[Bucket]:
    for bucket in buckets:
        if bucket.key == key:
            return bucket
    return None
