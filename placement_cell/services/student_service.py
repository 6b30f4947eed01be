"""
Student Service - CRUD over the ``students`` collection.

A student document holds the academic profile the eligibility rules read,
the placement-availability flag, red flags and the placement records.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from placement_cell.core.exceptions import ConflictError, NotFoundError, ValidationError
from placement_cell.db.mongodb import COLLECTIONS, get_collection
from placement_cell.models.student import StudentProfile
from placement_cell.services.mongo_service import to_object_id
from placement_cell.utils.constants import normalize_year

logger = logging.getLogger(__name__)

# Fields a student must fill before the profile counts as complete
REQUIRED_PROFILE_FIELDS = ("name", "branch", "year", "degree")

# Flat update fields that live under the nested cgpa block
CGPA_FIELDS = {"cgpa": "overall", "active_backlogs": "active_backlogs", "total_backlogs": "total_backlogs"}


def new_student_document(student_id: str, name: str, email: str, password_hash: str = None,
                         **profile) -> dict:
    """Build a fresh student document with every section initialised."""
    now = datetime.utcnow()
    doc = {
        "student_id": student_id.strip(),
        "name": name.strip(),
        "email": email.strip().lower(),
        "password_hash": password_hash,
        "degree": profile.get("degree"),
        "branch": profile.get("branch"),
        "year": normalize_year(profile.get("year")),
        "cgpa": {"overall": 0, "active_backlogs": 0, "total_backlogs": 0},
        "profile_completed": False,
        "is_spc": False,
        "available_for_placement": False,
        "placement_availability_updated_at": None,
        "redflags": [],
        "resume": None,
        "placements": {"final_job": None, "internships_completed": []},
        "created_at": now,
        "updated_at": now,
    }
    return doc


class StudentService:
    """
    Handles student document storage.
    """

    def __init__(self, collection: Collection = None):
        if collection is None:
            collection = get_collection(COLLECTIONS["students"])
        self.collection = collection

    # ---------------- reads ----------------

    def get(self, student_id: str) -> dict:
        """Fetch a student by MongoDB id; raises NotFoundError."""
        doc = self.collection.find_one({"_id": to_object_id(student_id, "Student")})
        if doc is None:
            raise NotFoundError("Student not found.")
        return doc

    def get_by_email(self, email: str) -> Optional[dict]:
        return self.collection.find_one({"email": email.strip().lower()})

    def get_profile(self, student_id: str) -> StudentProfile:
        return StudentProfile.from_document(self.get(student_id))

    def list_students(self, search: str = None) -> List[dict]:
        query = {}
        if search:
            query = {"$or": [
                {"name": {"$regex": search, "$options": "i"}},
                {"student_id": {"$regex": search, "$options": "i"}},
                {"email": {"$regex": search, "$options": "i"}},
            ]}
        return list(self.collection.find(query, {"password_hash": 0}).sort("name", 1))

    def list_available(self, branch: str = None, year: str = None,
                       min_cgpa: float = None) -> Tuple[List[dict], dict]:
        """
        Students who completed their profile and marked themselves available.

        Returns:
            (students, stats) - stats has total, by_branch, by_year, average_cgpa
        """
        query = {"available_for_placement": True, "profile_completed": True}
        if branch and branch != "all":
            query["branch"] = branch
        if year and year != "all":
            query["year"] = normalize_year(year) or year
        if min_cgpa is not None:
            query["cgpa.overall"] = {"$gte": min_cgpa}

        students = list(
            self.collection.find(query, {"password_hash": 0})
            .sort("placement_availability_updated_at", DESCENDING)
        )

        stats = {"total": len(students), "by_branch": {}, "by_year": {}, "average_cgpa": 0}
        cgpas = []
        for student in students:
            branch_key = student.get("branch") or "Unknown"
            year_key = student.get("year") or "Unknown"
            stats["by_branch"][branch_key] = stats["by_branch"].get(branch_key, 0) + 1
            stats["by_year"][year_key] = stats["by_year"].get(year_key, 0) + 1
            overall = (student.get("cgpa") or {}).get("overall")
            if overall:
                cgpas.append(overall)
        if cgpas:
            stats["average_cgpa"] = round(sum(cgpas) / len(cgpas), 2)

        return students, stats

    # ---------------- writes ----------------

    def create(self, student_id: str, name: str, email: str, password_hash: str = None,
               **profile) -> dict:
        doc = new_student_document(student_id, name, email, password_hash, **profile)
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("A student with this student id or email already exists.")
        doc["_id"] = result.inserted_id
        logger.info("Created student %s", doc["student_id"])
        return doc

    def update_profile(self, student_id: str, changes: dict) -> dict:
        """
        Update profile fields. Only provided (non-None) fields are written.

        The profile is marked complete once every required field is present.
        """
        current = self.get(student_id)
        updates = {}
        for field, value in changes.items():
            if value is None:
                continue
            if field in CGPA_FIELDS:
                updates[f"cgpa.{CGPA_FIELDS[field]}"] = value
            elif field == "year":
                year = normalize_year(value)
                if year is None:
                    raise ValidationError(f"Invalid year '{value}'.")
                updates["year"] = year
            else:
                updates[field] = value

        if not updates:
            raise ValidationError("No fields to update")

        merged = {**current, **{k: v for k, v in updates.items() if "." not in k}}
        updates["profile_completed"] = all(merged.get(f) for f in REQUIRED_PROFILE_FIELDS)
        updates["updated_at"] = datetime.utcnow()

        return self.collection.find_one_and_update(
            {"_id": current["_id"]},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )

    def set_placement_availability(self, student_id: str, available: bool,
                                   require_complete_profile: bool = True) -> dict:
        """
        Mark the student (un)available for the placement season.

        Students can only opt in once their profile is complete. An admin
        override passes ``require_complete_profile=False``; the student still
        does not appear in the available list until the profile is complete.
        """
        student = self.get(student_id)
        if require_complete_profile and not student.get("profile_completed"):
            raise ValidationError(
                "Please complete your profile before marking yourself available for placement."
            )
        now = datetime.utcnow()
        self.collection.update_one(
            {"_id": student["_id"]},
            {"$set": {
                "available_for_placement": available,
                "placement_availability_updated_at": now,
                "updated_at": now,
            }},
        )
        logger.info("Student %s availability set to %s", student.get("student_id"), available)
        return {"available_for_placement": available, "placement_availability_updated_at": now}

    def set_resume(self, student_id: str, resume: dict) -> dict:
        student = self.get(student_id)
        self.collection.update_one(
            {"_id": student["_id"]},
            {"$set": {"resume": resume, "updated_at": datetime.utcnow()}},
        )
        return resume

    def toggle_spc(self, student_id: str) -> bool:
        student = self.get(student_id)
        is_spc = not student.get("is_spc", False)
        self.collection.update_one({"_id": student["_id"]}, {"$set": {"is_spc": is_spc}})
        logger.info("Student %s SPC flag set to %s", student.get("student_id"), is_spc)
        return is_spc


def public_student(doc: dict) -> Optional[dict]:
    """Student document without credentials."""
    if doc is None:
        return None
    return {k: v for k, v in doc.items() if k != "password_hash"}


def get_student_service() -> StudentService:
    return StudentService()
