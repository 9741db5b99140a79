"""Shared fixtures for the ROI dashboard tests."""
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


SHEET_CSV = (
    "タイムスタンプ,日付,レース名,本命馬名,本命人気,着順,払戻金\r\n"
    "2024/05/02 10:00:00,2024/05/02,東京11R,ダノンデサイル,1,5,\r\n"
    "2024/05/01 09:00:00,2024/05/01,京都11R,ジャスティンミラノ,2,1,\"6,000\"\r\n"
    "2024/05/01 09:05:00,2024-05-01,京都12R,ドゥレッツァ,,3,0\r\n"
    ",,,,,,\r\n"
    "2024/05/03 08:00:00,TBD,新潟1R,テスト,1,1,500\r\n"
)


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content

    @property
    def ok(self):
        return 200 <= self.status_code < 300


class FakeSession:
    """Stands in for ``requests``: records calls and returns a canned response."""

    def __init__(self, response=None, exc=None):
        self.response = response or FakeResponse()
        self.exc = exc
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.exc is not None:
            raise self.exc
        return self.response


@pytest.fixture
def sheet_csv():
    """Export with Japanese headers: 3 usable rows, one blank, one bad date."""
    return SHEET_CSV


@pytest.fixture
def may_races():
    """Two races on 2024-05-01 (one paying 6000) and one losing race on 05-02."""
    from datetime import date
    from bet_records import BetRecord

    return [
        BetRecord(date=date(2024, 5, 1), race="R1", horse="A", stake=2000, payout=0),
        BetRecord(date=date(2024, 5, 1), race="R2", horse="B", stake=2000, payout=6000),
        BetRecord(date=date(2024, 5, 2), race="R3", horse="C", stake=2000, payout=0),
    ]


@pytest.fixture
def fake_session():
    def _make(status_code=200, text="", exc=None):
        return FakeSession(FakeResponse(status_code, text.encode("utf-8")), exc=exc)
    return _make
