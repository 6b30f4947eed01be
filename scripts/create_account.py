#!/usr/bin/env python3
"""
Create an admin or recruiter account.

Students register themselves through the API; admins and recruiters are
created by an operator.

Usage:
    python scripts/create_account.py admin admin@college.edu "Placement Officer" <password>
    python scripts/create_account.py recruiter hr@company.com "Acme HR" <password> --company "Acme"
"""
import argparse
import sys
from datetime import datetime
sys.path.insert(0, '.')

from pymongo.errors import DuplicateKeyError

from placement_cell.core.auth import ROLE_COLLECTIONS, hash_password
from placement_cell.db.mongodb import get_collection, init_mongo_indexes


def main():
    parser = argparse.ArgumentParser(description="Create an admin or recruiter account")
    parser.add_argument("role", choices=["admin", "recruiter"])
    parser.add_argument("email")
    parser.add_argument("name")
    parser.add_argument("password")
    parser.add_argument("--company", help="Recruiter's organization")
    args = parser.parse_args()

    if len(args.password) < 8:
        print("❌ Password must be at least 8 characters")
        return 1

    init_mongo_indexes()
    now = datetime.utcnow()
    doc = {
        "email": args.email.strip().lower(),
        "name": args.name.strip(),
        "password_hash": hash_password(args.password),
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    if args.role == "recruiter":
        doc["company_name"] = args.company

    try:
        result = get_collection(ROLE_COLLECTIONS[args.role]).insert_one(doc)
    except DuplicateKeyError:
        print(f"❌ An {args.role} with email {doc['email']} already exists")
        return 1

    print(f"✅ Created {args.role} {doc['email']} ({result.inserted_id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
