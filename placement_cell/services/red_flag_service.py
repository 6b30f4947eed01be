"""
Red Flag Service

Red flags are administrative notes an SPC or admin attaches to a student.
They are stored inside the student document; every flag gets its own
ObjectId so it can be edited or removed individually.
"""

import logging
from datetime import datetime

from bson import ObjectId
from pymongo.collection import Collection

from placement_cell.core.exceptions import NotFoundError, ValidationError
from placement_cell.db.mongodb import COLLECTIONS, get_collection
from placement_cell.models.application import Actor
from placement_cell.services.mongo_service import to_object_id

logger = logging.getLogger(__name__)


def _clean_reason(reason: str) -> str:
    if not reason or not reason.strip():
        raise ValidationError("Red flag reason is required.")
    return reason.strip()


class RedFlagService:

    def __init__(self, collection: Collection = None):
        if collection is None:
            collection = get_collection(COLLECTIONS["students"])
        self.collection = collection

    def add(self, student_id: str, reason: str, actor: Actor) -> dict:
        """Attach a new red flag; returns the stored flag."""
        reason = _clean_reason(reason)
        now = datetime.utcnow()
        flag = {
            "_id": ObjectId(),
            "reason": reason,
            "assigned_by": actor.name,
            "assigned_by_id": actor.id or "",
            "created_at": now,
            "updated_at": now,
        }
        result = self.collection.update_one(
            {"_id": to_object_id(student_id, "Student")},
            {"$push": {"redflags": flag}},
        )
        if result.matched_count == 0:
            raise NotFoundError("Student not found.")
        logger.info("Red flag %s added to student %s by %s", flag["_id"], student_id, actor.name)
        return flag

    def update(self, student_id: str, flag_id: str, reason: str) -> dict:
        reason = _clean_reason(reason)
        sid = to_object_id(student_id, "Student")
        fid = to_object_id(flag_id, "Red flag")
        result = self.collection.update_one(
            {"_id": sid, "redflags._id": fid},
            {"$set": {"redflags.$.reason": reason, "redflags.$.updated_at": datetime.utcnow()}},
        )
        if result.matched_count == 0:
            self._raise_missing(sid)
        student = self.collection.find_one({"_id": sid}, {"redflags": 1})
        return next(f for f in student["redflags"] if f.get("_id") == fid)

    def delete(self, student_id: str, flag_id: str) -> None:
        sid = to_object_id(student_id, "Student")
        fid = to_object_id(flag_id, "Red flag")
        result = self.collection.update_one(
            {"_id": sid, "redflags._id": fid},
            {"$pull": {"redflags": {"_id": fid}}},
        )
        if result.matched_count == 0:
            self._raise_missing(sid)
        logger.info("Red flag %s removed from student %s", flag_id, student_id)

    def _raise_missing(self, student_oid: ObjectId):
        if self.collection.count_documents({"_id": student_oid}, limit=1) == 0:
            raise NotFoundError("Student not found.")
        raise NotFoundError("Red flag not found.")

    def backfill_ids(self) -> int:
        """
        One-time migration: give an id to every legacy red flag stored without one.

        Returns:
            Number of students updated
        """
        updated = 0
        cursor = self.collection.find({"redflags": {"$exists": True, "$ne": []}})
        for student in cursor:
            needs_update = False
            flags = []
            for flag in student.get("redflags", []):
                if not flag.get("_id"):
                    needs_update = True
                    now = datetime.utcnow()
                    flag = {
                        **flag,
                        "_id": ObjectId(),
                        "created_at": flag.get("created_at") or now,
                        "updated_at": flag.get("updated_at") or now,
                    }
                flags.append(flag)
            if needs_update:
                self.collection.update_one({"_id": student["_id"]}, {"$set": {"redflags": flags}})
                updated += 1
                logger.info("Backfilled red flag ids for student %s", student.get("student_id"))
        return updated


def get_red_flag_service() -> RedFlagService:
    return RedFlagService()
