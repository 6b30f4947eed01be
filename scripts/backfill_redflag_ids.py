#!/usr/bin/env python3
"""
One-time migration: give every legacy red flag its own id.

Flags stored without an _id cannot be edited or removed through the API.
Safe to run more than once.

Usage: python scripts/backfill_redflag_ids.py
"""
import sys
sys.path.insert(0, '.')

from placement_cell.core.logging import setup_logging
from placement_cell.services.red_flag_service import get_red_flag_service


def main():
    setup_logging()
    print("=" * 50)
    print("RED FLAG ID BACKFILL")
    print("=" * 50)
    updated = get_red_flag_service().backfill_ids()
    print(f"\n✅ Updated {updated} student(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
