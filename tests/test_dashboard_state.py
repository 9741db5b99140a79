"""Tests for the dashboard controller: load runs, stale completions, selection, day window."""
import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from bet_records import BetRecord
from dashboard_state import DashboardState, SELECT_DAY, SELECT_WEEK
from sheet_fetch import FetchError


def _days(n, start=date(2024, 5, 1)):
    return [BetRecord(date=start + timedelta(days=i), race=f"R{i}", payout=1000 * i)
            for i in range(n)]


class TestReload:
    def test_reload_runs_full_pipeline(self, sheet_csv):
        state = DashboardState(stake_per_race=2000)
        assert state.reload(fetch=lambda url: sheet_csv, url="https://x") is True
        assert state.loaded
        assert state.error is None
        assert state.summary.race_count == 3
        assert state.summary.roi_ratio == pytest.approx(1.0)
        assert [d.key for d in state.daily] == ["2024-05-01", "2024-05-02"]
        assert state.selection == (SELECT_WEEK, "2024-W18")

    def test_fetch_error_recorded(self):
        def failing(url):
            raise FetchError("CSV fetch failed: 500", status_code=500)

        state = DashboardState()
        assert state.reload(fetch=failing) is True
        assert state.error == "CSV fetch failed: 500"
        assert state.records == []
        assert state.summary.roi_ratio is None
        assert state.selection is None

    def test_success_after_failure_clears_error(self, sheet_csv):
        state = DashboardState()
        run = state.begin_run()
        state.fail_run(run, "down")
        state.reload(fetch=lambda url: sheet_csv)
        assert state.error is None
        assert state.records

    def test_empty_sheet(self):
        state = DashboardState()
        state.reload(fetch=lambda url: "date,race,payout\n")
        assert state.records == []
        assert state.summary.roi_ratio is None
        assert state.selection is None
        assert state.day_window() == []


class TestStaleRuns:
    def test_run_ids_increase(self):
        state = DashboardState()
        assert state.begin_run() < state.begin_run()

    def test_older_run_completing_late_is_discarded(self):
        state = DashboardState()
        old = state.begin_run()
        new = state.begin_run()
        assert state.complete_run(new, _days(3)) is True
        assert state.complete_run(old, _days(1)) is False
        assert len(state.records) == 3

    def test_stale_failure_does_not_clobber(self):
        state = DashboardState()
        old = state.begin_run()
        new = state.begin_run()
        state.complete_run(new, _days(2))
        assert state.fail_run(old, "timeout") is False
        assert state.error is None

    def test_older_run_applies_if_newer_not_finished(self):
        state = DashboardState()
        old = state.begin_run()
        state.begin_run()
        assert state.complete_run(old, _days(1)) is True


class TestSelection:
    def test_select_day_and_week(self, may_races):
        state = DashboardState(stake_per_race=2000)
        state.complete_run(state.begin_run(), may_races)

        state.select_day("2024-05-01")
        assert state.selection == (SELECT_DAY, "2024-05-01")
        assert [r.race for r in state.selected_records()] == ["R1", "R2"]
        assert state.selected_bucket().roi_ratio == pytest.approx(1.5)

        state.select_week("2024-W18")
        assert len(state.selected_records()) == 3
        assert state.selected_bucket().race_count == 3

    def test_unknown_key(self, may_races):
        state = DashboardState()
        state.complete_run(state.begin_run(), may_races)
        state.select_week("1999-W01")
        assert state.selected_records() == []
        assert state.selected_bucket() is None

    def test_nothing_selected(self):
        state = DashboardState()
        assert state.selected_records() == []
        assert state.selected_bucket() is None


class TestChartPick:
    def test_repeated_pick_is_ignored(self, may_races):
        state = DashboardState()
        state.complete_run(state.begin_run(), may_races)
        assert state.pick_from_chart(SELECT_DAY, "2024-05-01") is True
        state.select_week("2024-W18")
        assert state.pick_from_chart(SELECT_DAY, "2024-05-01") is False
        assert state.selection == (SELECT_WEEK, "2024-W18")

    def test_reload_selects_newest_week_over_old_pick(self, sheet_csv):
        state = DashboardState(stake_per_race=2000)
        state.reload(fetch=lambda url: sheet_csv, url="u")
        state.pick_from_chart(SELECT_DAY, "2024-05-01")
        state.reload(fetch=lambda url: sheet_csv, url="u")
        assert state.selection == (SELECT_WEEK, "2024-W18")
        # a click after the reload counts even on the same point
        assert state.pick_from_chart(SELECT_DAY, "2024-05-01") is True
        assert state.selection == (SELECT_DAY, "2024-05-01")


class TestDayWindow:
    def _state(self, n_days, size):
        state = DashboardState(window_size=size)
        state.complete_run(state.begin_run(), _days(n_days))
        return state

    def test_starts_at_latest_days(self):
        state = self._state(10, 4)
        assert [b.key for b in state.day_window()] == [
            "2024-05-07", "2024-05-08", "2024-05-09", "2024-05-10"]
        assert not state.can_advance
        assert state.can_retreat

    def test_retreat_and_advance(self):
        state = self._state(10, 4)
        state.retreat_window()
        assert state.day_window()[0].key == "2024-05-03"
        state.retreat_window()
        assert [b.key for b in state.day_window()] == [
            "2024-05-01", "2024-05-02", "2024-05-03", "2024-05-04"]
        assert not state.can_retreat
        state.retreat_window()
        assert state.day_window()[0].key == "2024-05-01"

        state.advance_window()
        state.advance_window()
        state.advance_window()
        assert state.day_window()[-1].key == "2024-05-10"
        assert not state.can_advance

    def test_fewer_days_than_window(self):
        state = self._state(2, 14)
        assert len(state.day_window()) == 2
        assert not state.can_retreat
        assert not state.can_advance

    def test_invalid_window_size(self):
        with pytest.raises(ValueError):
            DashboardState(window_size=0)
