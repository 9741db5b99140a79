"""CLI for printing ROI statistics from the bet sheet.

Usage:
    python roi_report.py                      # fetch the configured sheet URL
    python roi_report.py --url https://...    # fetch another published export
    python roi_report.py --file export.csv    # read a downloaded export
    python roi_report.py --file export.csv --json
"""
import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List

from bet_records import BetRecord, records_from_csv
from formatting import pct, yen, range_text
from roi_aggregator import Bucket, YearlySummary, aggregate_by_month, aggregate_by_week, summarize
from settings import BET_PER_RACE, CSV_URL, LOG_LEVEL
from sheet_fetch import FetchError, fetch_csv_text


def _bucket_to_dict(bucket: Bucket) -> Dict[str, Any]:
    return {
        "key": bucket.key,
        "label": bucket.label,
        "race_count": bucket.race_count,
        "total_stake": bucket.total_stake,
        "total_payout": bucket.total_payout,
        "roi_ratio": bucket.roi_ratio,
    }


def report_to_dict(records: List[BetRecord], stake_per_race: int = BET_PER_RACE) -> Dict[str, Any]:
    summary = summarize(records, stake_per_race)
    return {
        "summary": {
            "race_count": summary.race_count,
            "total_stake": summary.total_stake,
            "total_payout": summary.total_payout,
            "roi_ratio": summary.roi_ratio,
            "first_date": summary.first_date.isoformat() if summary.first_date else None,
            "last_date": summary.last_date.isoformat() if summary.last_date else None,
        },
        "monthly": [_bucket_to_dict(b) for b in aggregate_by_month(records, stake_per_race)],
        "weekly": [_bucket_to_dict(b) for b in aggregate_by_week(records, stake_per_race)],
    }


def print_report(summary: YearlySummary, months: List[Bucket]) -> None:
    print("Yearly ROI:")
    print(f"  ROI:     {pct(summary.roi_ratio)}")
    print(f"  Races:   {summary.race_count}")
    print(f"  Stake:   {yen(summary.total_stake)}")
    print(f"  Payout:  {yen(summary.total_payout)}")
    print(f"  Range:   {range_text(summary)}")
    if not months:
        return
    print("\nMonthly:")
    for m in months:
        print(f"  {m.key}  {pct(m.roi_ratio):>7}  {yen(m.total_stake):>12}  "
              f"{yen(m.total_payout):>12}  {m.race_count:>4}")


def main():
    ap = argparse.ArgumentParser(description="Print ROI statistics for the bet sheet")
    ap.add_argument("--url", default=CSV_URL, help="Published CSV export URL")
    ap.add_argument("--file", metavar="CSV", help="Read a local CSV export instead of fetching")
    ap.add_argument("--stake", type=int, default=BET_PER_RACE,
                    help=f"Stake per race (default: {BET_PER_RACE})")
    ap.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    args = ap.parse_args()

    logging.basicConfig(level=LOG_LEVEL)

    if args.file:
        if not os.path.exists(args.file):
            print(f"File not found: {args.file}")
            sys.exit(1)
        with open(args.file, encoding="utf-8-sig") as f:
            text = f.read()
    else:
        try:
            text = fetch_csv_text(args.url)
        except FetchError as e:
            print(f"Load error: {e}")
            sys.exit(1)

    records = records_from_csv(text, args.stake)

    if args.json:
        print(json.dumps(report_to_dict(records, args.stake), ensure_ascii=False, indent=2))
    else:
        print_report(summarize(records, args.stake), aggregate_by_month(records, args.stake))


if __name__ == "__main__":
    main()
