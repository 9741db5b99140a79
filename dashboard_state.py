"""Explicit dashboard state: loaded records, derived buckets, selection, day window.

One ``DashboardState`` lives per UI session and is passed to the render
functions. Reloads are tagged with a run id so that a slow, older fetch
finishing after a newer one can never overwrite newer results.

Usage:
    state = DashboardState()
    state.reload()
    state.select_week("2024-W18")
    rows = state.selected_records()
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from bet_records import BetRecord, records_from_csv
from roi_aggregator import (
    Bucket, YearlySummary,
    aggregate_by_day, aggregate_by_week, aggregate_by_month, summarize,
    bucket_for_key, records_for_day, records_for_week,
)
from settings import BET_PER_RACE, CSV_URL, DAY_WINDOW_SIZE
from sheet_fetch import FetchError, fetch_csv_text

logger = logging.getLogger(__name__)

SELECT_DAY = "day"
SELECT_WEEK = "week"


class DashboardState:
    """Owns everything the dashboard renders between triggers."""

    def __init__(self, stake_per_race: int = BET_PER_RACE,
                 window_size: int = DAY_WINDOW_SIZE):
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        self.stake_per_race = stake_per_race
        self.window_size = window_size

        self.records: List[BetRecord] = []
        self.daily: List[Bucket] = []
        self.weekly: List[Bucket] = []
        self.monthly: List[Bucket] = []
        self.summary: YearlySummary = YearlySummary()
        self.error: Optional[str] = None
        self.selection: Optional[Tuple[str, str]] = None
        self.window_end: int = 0     # exclusive index into self.daily
        self._chart_pick: Optional[Tuple[str, str]] = None

        self._run_counter = 0
        self._applied_run = 0

    # ------------------------------------------------------------------
    # Load cycle
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._applied_run > 0

    def begin_run(self) -> int:
        self._run_counter += 1
        return self._run_counter

    def _is_stale(self, run_id: int) -> bool:
        if run_id < self._applied_run:
            logger.warning("Discarding stale load run %d (run %d already applied)",
                           run_id, self._applied_run)
            return True
        return False

    def complete_run(self, run_id: int, records: List[BetRecord]) -> bool:
        """Apply a finished run's records. Returns False if the run was stale."""
        if self._is_stale(run_id):
            return False
        self._applied_run = run_id
        self.error = None
        self.records = list(records)
        self.daily = aggregate_by_day(self.records, self.stake_per_race)
        self.weekly = aggregate_by_week(self.records, self.stake_per_race)
        self.monthly = aggregate_by_month(self.records, self.stake_per_race)
        self.summary = summarize(self.records, self.stake_per_race)

        self.window_end = len(self.daily)
        self.selection = (SELECT_WEEK, self.weekly[-1].key) if self.weekly else None
        self._chart_pick = None
        logger.info("Loaded %d bet records (%d days, %d weeks, %d months)",
                    len(self.records), len(self.daily), len(self.weekly), len(self.monthly))
        return True

    def fail_run(self, run_id: int, message: str) -> bool:
        """Record a fetch failure. Previously loaded records are dropped."""
        if self._is_stale(run_id):
            return False
        self._applied_run = run_id
        self.error = message
        self.records = []
        self.daily, self.weekly, self.monthly = [], [], []
        self.summary = YearlySummary()
        self.selection = None
        self.window_end = 0
        self._chart_pick = None
        return True

    def reload(self, fetch: Callable[[str], str] = fetch_csv_text,
               url: str = CSV_URL) -> bool:
        """Run fetch -> parse -> normalize -> aggregate once."""
        run_id = self.begin_run()
        try:
            text = fetch(url)
        except FetchError as e:
            return self.fail_run(run_id, str(e))
        return self.complete_run(run_id, records_from_csv(text, self.stake_per_race))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_week(self, key: str) -> None:
        self.selection = (SELECT_WEEK, key)

    def select_day(self, key: str) -> None:
        self.selection = (SELECT_DAY, key)

    def pick_from_chart(self, kind: str, key: str) -> bool:
        """Select the clicked chart point unless it is the pick already applied.

        Chart selections persist across reruns, so the same point comes back
        on every rerun until the user clicks elsewhere.
        """
        if (kind, key) == self._chart_pick:
            return False
        self._chart_pick = (kind, key)
        self.selection = (kind, key)
        return True

    def selected_records(self) -> List[BetRecord]:
        if self.selection is None:
            return []
        kind, key = self.selection
        if kind == SELECT_DAY:
            return records_for_day(self.records, key)
        return records_for_week(self.records, key)

    def selected_bucket(self) -> Optional[Bucket]:
        if self.selection is None:
            return None
        kind, key = self.selection
        return bucket_for_key(self.daily if kind == SELECT_DAY else self.weekly, key)

    # ------------------------------------------------------------------
    # Day window
    # ------------------------------------------------------------------

    @property
    def window_start(self) -> int:
        return max(0, self.window_end - self.window_size)

    def day_window(self) -> List[Bucket]:
        return self.daily[self.window_start:self.window_end]

    @property
    def can_advance(self) -> bool:
        return self.window_end < len(self.daily)

    @property
    def can_retreat(self) -> bool:
        return self.window_start > 0

    def advance_window(self) -> None:
        """Move one page later in time, clamped at the newest day."""
        self.window_end = min(len(self.daily), self.window_end + self.window_size)

    def retreat_window(self) -> None:
        """Move one page earlier in time, clamped so the window stays full where possible."""
        self.window_end = max(min(self.window_size, len(self.daily)),
                              self.window_end - self.window_size)
