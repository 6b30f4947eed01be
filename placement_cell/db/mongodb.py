"""
MongoDB Connection Utility

MongoDB stores everything for the placement cell:
- Students (profile, red flags, placements)
- Job and internship postings
- Applications (one record per student/posting pair, with status history)
- Admin and recruiter accounts
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from placement_cell.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=False)
    return _client


def get_mongo_db() -> Database:
    """Get the placement database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """
    Get a specific collection.
    Use the COLLECTIONS constants below for the name.
    """
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "students": "students",
    "admins": "admins",
    "recruiters": "recruiters",
    "job_posts": "job_posts",
    "internship_posts": "internship_posts",
    "applications": "applications",
}

# posting_type -> collection key
POSTING_COLLECTIONS = {
    "job": COLLECTIONS["job_posts"],
    "internship": COLLECTIONS["internship_posts"],
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["students"]].create_index("student_id", unique=True)
    db[COLLECTIONS["students"]].create_index("email", unique=True)
    db[COLLECTIONS["admins"]].create_index("email", unique=True)
    db[COLLECTIONS["recruiters"]].create_index("email", unique=True)

    # One application per (student, posting) - enforced by the store
    db[COLLECTIONS["applications"]].create_index([
        ("student_id", ASCENDING),
        ("posting_id", ASCENDING)
    ], unique=True)
    db[COLLECTIONS["applications"]].create_index([
        ("posting_id", ASCENDING),
        ("current_status", ASCENDING)
    ])
    db[COLLECTIONS["applications"]].create_index([("applied_at", DESCENDING)])

    for name in POSTING_COLLECTIONS.values():
        db[name].create_index("is_announced")

    logger.info("MongoDB indexes created successfully")
