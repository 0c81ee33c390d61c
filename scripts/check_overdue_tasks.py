#!/usr/bin/env python3
"""Run the overdue sweep once; meant for cron or other external schedulers."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tasktracker.config import get_settings  # noqa: E402  - import after sys.path adjustment
from tasktracker.database import SessionLocal  # noqa: E402
from tasktracker.logging_config import setup_logging  # noqa: E402
from tasktracker.services.overdue_sweep import OverdueSweep  # noqa: E402


def main() -> None:
    """CLI entrypoint."""
    parser = argparse.ArgumentParser(description="Notify assignees and admins about overdue tasks.")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.log_dir, debug=args.debug or settings.debug)

    db = SessionLocal()
    try:
        report = OverdueSweep.run(db)
    finally:
        db.close()

    print(f"Processed {report.processed} overdue task(s)")
    print(f"Sent notifications for {report.sent} task(s), skipped {report.skipped}, failed {report.failed}")
    sys.exit(1 if report.failed else 0)


if __name__ == "__main__":
    main()
