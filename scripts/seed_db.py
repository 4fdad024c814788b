"""
Seed script for the Noise Report Hub mock DB or Firestore.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured DB: python scripts/seed_db.py --apply
  - Force mock DB even if FIREBASE configured: python scripts/seed_db.py --apply --force-mock
  - Use a JSON file of report inputs instead of the built-in demo set:
    python scripts/seed_db.py --apply --file reports.json

Behavior:
  - Every report goes through ReportStore.create, so the same validation and
    geoLocation derivation apply as for real submissions.
  - Media URLs point at placeholder objects; no files are uploaded.

NOTE: When applying to real Firestore, ensure `FIREBASE_CREDENTIALS_PATH` and `USE_MOCK_DB=false` are set in `.env`.
"""

import argparse
import json
import os
import sys
from typing import List

DEMO_REPORTS: List[dict] = [
    {
        "mediaUrl": "https://example.com/media/noise-reports/audio/demo-music.m4a",
        "mediaType": "audio",
        "reason": "🔊 Loud Music",
        "comment": "Karaoke from the building across the street since 10pm",
        "location": {
            "latitude": 14.5995,
            "longitude": 120.9842,
            "address": {"city": "Manila", "region": "Metro Manila", "country": "Philippines"},
        },
    },
    {
        "mediaUrl": "https://example.com/media/noise-reports/video/demo-construction.mp4",
        "mediaType": "video",
        "reason": "🔨 Construction",
        "comment": "Jackhammers before 7am",
        "location": {"latitude": 14.6042, "longitude": 120.9822},
    },
    {
        "mediaUrl": "https://example.com/media/noise-reports/audio/demo-traffic.m4a",
        "mediaType": "audio",
        "reason": "🚗 Vehicle Noise",
        "location": {"latitude": 14.5547, "longitude": 121.0244},
    },
    {
        "mediaUrl": "https://example.com/media/noise-reports/audio/demo-party.m4a",
        "mediaType": "audio",
        "reason": "🎉 Party/Event",
        "comment": "No location shared",
    },
]


def load_seed(path: str) -> List[dict]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_reports(reports: List[dict], apply: bool = False) -> int:
    from app.core.exceptions import NoiseReportError
    from app.services.report_store import get_report_store

    store = get_report_store()
    written = 0
    for data in reports:
        print(f"Preparing: {data.get('reason')} ({data.get('mediaType')})")
        if not apply:
            continue
        try:
            report = store.create(data)
        except NoiseReportError as e:
            print(f"Failed to write report {data.get('reason')!r}: {e.message}")
            continue
        written += 1
        print(f"Wrote: {report.id}")
    return written


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--force-mock", action="store_true", help="Force use of mock DB even if FIREBASE configured")
    parser.add_argument("--file", help="JSON file holding a list of report inputs")
    args = parser.parse_args()

    if args.file and not os.path.exists(args.file):
        print(f"Seed file not found: {args.file}")
        return 1

    if args.force_mock:
        os.environ["USE_MOCK_DB"] = "true"

    # Settings are read on first import, after the env tweak above
    sys.path.insert(0, os.getcwd())

    reports = load_seed(args.file) if args.file else DEMO_REPORTS
    written = write_reports(reports, apply=args.apply)

    if args.apply:
        print(f"Done: {written}/{len(reports)} reports written")
    else:
        print(f"Dry run: {len(reports)} reports would be written (use --apply)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
