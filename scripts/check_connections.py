#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the MongoDB connection and create indexes.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from placement_cell.db.mongodb import test_mongo_connection, init_mongo_indexes, get_mongo_db
from placement_cell.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("PLACEMENT CELL - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if not test_mongo_connection():
        print("    ❌ MongoDB: FAILED")
        return 1
    print("    ✅ MongoDB: CONNECTED")

    print("\n[2] Creating indexes...")
    init_mongo_indexes()
    print("    ✅ Indexes ready")

    print("\n[3] Collection sizes...")
    db = get_mongo_db()
    for name in sorted(db.list_collection_names()):
        print(f"    {name}: {db[name].estimated_document_count()}")

    print("\n" + "=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
