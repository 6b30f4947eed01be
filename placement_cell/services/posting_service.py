"""
Posting Service - job and internship postings submitted by recruiters.

Each posting type lives in its own collection. Postings start unannounced;
an admin or SPC announces them to make them visible to students.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection

from placement_cell.core.exceptions import NotFoundError, ValidationError
from placement_cell.db.mongodb import POSTING_COLLECTIONS, get_collection
from placement_cell.models.posting import PostingRequirement, PostingType
from placement_cell.services.mongo_service import to_object_id

logger = logging.getLogger(__name__)


def parse_posting_type(value) -> PostingType:
    try:
        return PostingType(value)
    except ValueError:
        raise ValidationError(f"Invalid post type '{value}'. Must be \"job\" or \"internship\".")


class PostingService:
    """
    Handles one posting collection (jobs or internships).
    """

    def __init__(self, posting_type, collection: Collection = None):
        self.posting_type = parse_posting_type(posting_type)
        if collection is None:
            collection = get_collection(POSTING_COLLECTIONS[self.posting_type.value])
        self.collection = collection

    @property
    def label(self) -> str:
        return "Job post" if self.posting_type == PostingType.job else "Internship post"

    def create(self, data: dict, recruiter_id: str = None) -> dict:
        """
        Insert a posting submitted by a recruiter.

        Args:
            data: Validated posting fields
            recruiter_id: Submitting recruiter (None when entered by an admin)
        """
        now = datetime.utcnow()
        doc = {
            **data,
            "posting_type": self.posting_type.value,
            "recruiter_id": recruiter_id,
            "is_announced": False,
            "date_submitted": now,
            "created_at": now,
            "updated_at": now,
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("%s %s created by recruiter %s", self.label, result.inserted_id, recruiter_id)
        return doc

    def get(self, posting_id: str) -> dict:
        doc = self.collection.find_one({"_id": to_object_id(posting_id, self.label)})
        if doc is None:
            raise NotFoundError(f"{self.label} not found.")
        return doc

    def get_with_requirement(self, posting_id: str) -> Tuple[dict, PostingRequirement]:
        doc = self.get(posting_id)
        return doc, PostingRequirement.from_document(doc, self.posting_type)

    def list_postings(self, announced_only: bool = False, recruiter_id: str = None) -> List[dict]:
        query = {}
        if announced_only:
            query["is_announced"] = True
        if recruiter_id:
            query["recruiter_id"] = recruiter_id
        return list(self.collection.find(query).sort("created_at", DESCENDING))

    def count_by_recruiter(self) -> Dict[str, int]:
        """Number of postings per submitting recruiter id."""
        pipeline = [
            {"$match": {"recruiter_id": {"$ne": None}}},
            {"$group": {"_id": "$recruiter_id", "count": {"$sum": 1}}},
        ]
        return {row["_id"]: row["count"] for row in self.collection.aggregate(pipeline)}

    def get_announced(self, posting_id: str) -> dict:
        doc = self.get(posting_id)
        if not doc.get("is_announced"):
            raise NotFoundError(f"{self.label} not found.")
        return doc

    def update(self, posting_id: str, changes: dict) -> dict:
        """Admin edit of posting fields, already validated by JobPostUpdate / InternshipPostUpdate."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            raise ValidationError("No fields to update")
        changes["updated_at"] = datetime.utcnow()
        doc = self.collection.find_one_and_update(
            {"_id": to_object_id(posting_id, self.label)},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError(f"{self.label} not found.")
        return doc

    def delete(self, posting_id: str) -> None:
        result = self.collection.delete_one({"_id": to_object_id(posting_id, self.label)})
        if result.deleted_count == 0:
            raise NotFoundError(f"{self.label} not found.")
        logger.info("%s %s deleted", self.label, posting_id)

    def set_announcement(self, posting_id: str, announced: Optional[bool] = None) -> bool:
        """Set (or toggle when ``announced`` is None) the announcement flag."""
        doc = self.get(posting_id)
        value = (not doc.get("is_announced", False)) if announced is None else announced
        self.collection.update_one(
            {"_id": doc["_id"]},
            {"$set": {"is_announced": value, "updated_at": datetime.utcnow()}},
        )
        logger.info("%s %s announced=%s", self.label, posting_id, value)
        return value


def get_posting_services() -> Dict[PostingType, PostingService]:
    """
    Get a service per posting type.

    Usage:
        services = get_posting_services()
        services[PostingType.job].get(...)
    """
    return {
        PostingType.job: PostingService(PostingType.job),
        PostingType.internship: PostingService(PostingType.internship),
    }
