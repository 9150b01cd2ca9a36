"""
Verification status maintenance.

Reports or repairs students whose Student.is_verified and User.is_email_verified
flags disagree. Both commands are safe to run repeatedly.

Usage:
    cd backend
    python scripts/verification_status.py check
    python scripts/verification_status.py sync
"""

import argparse
import logging
import sys
from pathlib import Path

# Add the backend directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.database import SessionLocal
from app.services.reconciliation import find_verification_drift, sync_verification_status


def check() -> int:
    db = SessionLocal()
    try:
        report = find_verification_drift(db)
    finally:
        db.close()

    print("Verification status report")
    print(f"  Total students:    {report.total}")
    print(f"  Verified students: {report.verified}")
    print(f"  Pending students:  {report.pending}")
    print(f"  Mismatched:        {len(report.mismatched)}")

    for record in report.mismatched:
        print(
            f"  - student {record.student_id} ({record.email}): "
            f"student={record.student_verified} user={record.user_verified}"
        )

    if report.in_sync:
        print("All verification records are in sync.")
        return 0
    print("Run 'sync' to fix mismatched records.")
    return 1


def sync() -> int:
    db = SessionLocal()
    try:
        synced = sync_verification_status(db)
    finally:
        db.close()
    print(f"Synchronization complete. Updated {synced} records.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("command", choices=["check", "sync"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    return check() if args.command == "check" else sync()


if __name__ == "__main__":
    sys.exit(main())
