#!/usr/bin/env python3
"""
End every ongoing interview whose owner has run out of credits.

Runs a single pass of the interview monitor that the API server
otherwise runs hourly.  Useful from cron when the in-process monitor
is disabled (INTERVIEW_MONITOR_ENABLED=false).

Usage:
    python check_interviews.py
    python check_interviews.py --db ./aipilot_api/aipilot.db
"""

import argparse
import asyncio
import os
import sys

from aipilot_api.app.core.config import settings
from aipilot_api.app.core.db import init_db
from aipilot_api.app.core.logging_config import setup_logging
from aipilot_api.app.services.interview_monitor_service import InterviewMonitorService


def main():
    ap = argparse.ArgumentParser(description="End interviews that exceeded their owner's credits.")
    ap.add_argument("--db", help="Path to SQLite DB file (defaults to DATABASE_URL)")
    args = ap.parse_args()

    if args.db:
        if not os.path.exists(args.db):
            print(f"[!] DB not found: {args.db}", file=sys.stderr)
            sys.exit(1)
        settings.database_url = os.path.abspath(args.db)

    setup_logging(settings.log_level, settings.log_file or None)
    init_db()
    ended = asyncio.run(InterviewMonitorService.check_and_end_interviews())
    for interview in ended:
        print(f"[+] Ended interview {interview.id} of user {interview.user_id} ({interview.duration} min)")
    print(f"[+] {len(ended)} interview(s) ended")


if __name__ == "__main__":
    main()
