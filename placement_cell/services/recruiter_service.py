"""
Recruiter Service - admin view of recruiter accounts and what they submitted.

Postings are linked to a recruiter through the ``recruiter_id`` stamped at
submission time.
"""

from datetime import datetime
from typing import Dict, List

from pymongo import DESCENDING
from pymongo.collection import Collection

from placement_cell.core.exceptions import NotFoundError
from placement_cell.db.mongodb import COLLECTIONS, get_collection
from placement_cell.models.posting import PostingType
from placement_cell.services.mongo_service import to_object_id
from placement_cell.services.posting_service import PostingService, get_posting_services


def recruiter_summary(doc: dict) -> dict:
    """Recruiter account fields safe to show an admin."""
    return {
        "_id": doc["_id"],
        "name": doc.get("name", ""),
        "email": doc.get("email"),
        "company_name": doc.get("company_name") or "N/A",
        "phone": doc.get("phone"),
        "created_at": doc.get("created_at"),
    }


class RecruiterService:

    def __init__(self, collection: Collection = None, postings: Dict[PostingType, PostingService] = None):
        if collection is None:
            collection = get_collection(COLLECTIONS["recruiters"])
        self.collection = collection
        self.postings = postings if postings is not None else get_posting_services()

    def list_with_post_counts(self) -> List[dict]:
        """Every recruiter with the number of job and internship posts they submitted."""
        job_counts = self.postings[PostingType.job].count_by_recruiter()
        internship_counts = self.postings[PostingType.internship].count_by_recruiter()

        roster = []
        for doc in self.collection.find({}, {"password_hash": 0}).sort("created_at", DESCENDING):
            rid = str(doc["_id"])
            roster.append({
                **recruiter_summary(doc),
                "job_post_count": job_counts.get(rid, 0),
                "internship_post_count": internship_counts.get(rid, 0),
            })
        return roster

    def get_with_posts(self, recruiter_id: str) -> dict:
        """
        One recruiter and all of their postings, newest first.

        Each posting carries a ``posting_type`` so jobs and internships can be
        told apart in the merged list.
        """
        doc = self.collection.find_one({"_id": to_object_id(recruiter_id, "Recruiter")}, {"password_hash": 0})
        if doc is None:
            raise NotFoundError("Recruiter not found.")

        rid = str(doc["_id"])
        jobs = self.postings[PostingType.job].list_postings(recruiter_id=rid)
        internships = self.postings[PostingType.internship].list_postings(recruiter_id=rid)
        posts = sorted(
            [{**p, "posting_type": PostingType.job.value} for p in jobs]
            + [{**p, "posting_type": PostingType.internship.value} for p in internships],
            key=lambda p: p.get("created_at") or datetime.min,
            reverse=True,
        )
        return {
            "recruiter": recruiter_summary(doc),
            "posts": posts,
            "stats": {
                "total_posts": len(posts),
                "job_posts": len(jobs),
                "internship_posts": len(internships),
            },
        }


def get_recruiter_service() -> RecruiterService:
    return RecruiterService()
