"""
Placement Service - application summaries, cohort tracking and placement records.

A student counts as placed only when an operator records a final placement
on the student document. Reaching "Selected" on an application is tracked
separately and never implies a placement.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import pydantic
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pydantic import BaseModel

from placement_cell.core.exceptions import NotFoundError, ValidationError
from placement_cell.db.mongodb import COLLECTIONS, get_collection
from placement_cell.models.application import Application, ApplicationStatus
from placement_cell.models.placement import CompletedInternship, FinalPlacement
from placement_cell.services.mongo_service import to_object_id

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


# ============================================================
# APPLICATION SUMMARY (one student)
# ============================================================

def summarize(applications: List[Application], recent_limit: int = RECENT_LIMIT) -> dict:
    """Total, per-status counts (every status present) and the latest applications."""
    by_status = {status.value: 0 for status in ApplicationStatus}
    for application in applications:
        by_status[application.current_status.value] += 1
    recent = sorted(applications, key=lambda a: a.applied_at, reverse=True)[:recent_limit]
    return {"total": len(applications), "by_status": by_status, "recent": recent}


# ============================================================
# COHORT TRACKING (all students)
# ============================================================

class CohortFilters(BaseModel):
    status: Optional[str] = None          # "applied", "selected" or "all"
    company: Optional[str] = None
    position: Optional[str] = None


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def _rate(placed: int, total: int) -> float:
    return round(placed / total * 100, 2) if total else 0


def summarize_cohort(
    students: Iterable[dict],
    applications: Iterable[Application],
    filters: CohortFilters = None,
) -> dict:
    """
    Per-student application counts and cohort statistics.

    Args:
        students: Student documents
        applications: Every application of those students
        filters: Optional status / company / position filters

    Returns:
        {"students": [...rows], "stats": {...}}

    ``placement_rate`` is taken over every student given, whatever the
    filters; ``filtered_placement_rate`` covers only the returned rows.
    """
    filters = filters or CohortFilters()
    students = list(students)
    cohort_placed = sum(1 for s in students if (s.get("placements") or {}).get("final_job"))

    per_student: Dict[str, List[Application]] = defaultdict(list)
    for application in applications:
        per_student[application.student_id].append(application)

    rows = []
    for student in students:
        sid = str(student["_id"])
        apps = per_student.get(sid, [])
        selected = [a for a in apps if a.current_status == ApplicationStatus.selected]

        if filters.status == "applied" and not apps:
            continue
        if filters.status == "selected" and not selected:
            continue
        if filters.company and not any(_contains(a.company_name, filters.company) for a in apps):
            continue
        if filters.position and not any(_contains(a.position, filters.position) for a in apps):
            continue

        placements = student.get("placements") or {}
        rows.append({
            "id": sid,
            "student_id": student.get("student_id"),
            "name": student.get("name", ""),
            "email": student.get("email"),
            "branch": student.get("branch"),
            "year": student.get("year"),
            "cgpa": (student.get("cgpa") or {}).get("overall"),
            "total_applications": len(apps),
            "total_selections": len(selected),
            "has_applications": bool(apps),
            "has_selections": bool(selected),
            "selected_applications": selected,
            "placements": placements,
            "is_placed": bool(placements.get("final_job")),
        })

    rows.sort(key=lambda r: (-r["total_selections"], -r["total_applications"], r["name"]))

    total = len(rows)
    placed = sum(1 for r in rows if r["is_placed"])
    stats = {
        "total_students": total,
        "students_with_applications": sum(1 for r in rows if r["has_applications"]),
        "students_with_selections": sum(1 for r in rows if r["has_selections"]),
        "students_placed": placed,
        "total_applications": sum(r["total_applications"] for r in rows),
        "total_selections": sum(r["total_selections"] for r in rows),
        "cohort_size": len(students),
        "placement_rate": _rate(cohort_placed, len(students)),
        "filtered_placement_rate": _rate(placed, total),
    }
    return {"students": rows, "stats": stats}


# ============================================================
# SERVICE
# ============================================================

class PlacementService:
    """
    Reads applications and writes placement records on student documents.
    """

    def __init__(self, students: Collection = None, applications: Collection = None):
        if students is None:
            students = get_collection(COLLECTIONS["students"])
        if applications is None:
            applications = get_collection(COLLECTIONS["applications"])
        self.students = students
        self.applications = applications

    def summarize_applications(self, student_id: str, recent_limit: int = RECENT_LIMIT) -> dict:
        oid = to_object_id(student_id, "Student")
        if self.students.count_documents({"_id": oid}, limit=1) == 0:
            raise NotFoundError("Student not found.")
        cursor = self.applications.find({"student_id": str(oid)}).sort("applied_at", DESCENDING)
        return summarize([Application.from_document(doc) for doc in cursor], recent_limit)

    def placement_tracking(self, filters: CohortFilters = None) -> dict:
        students = list(self.students.find({}, {"password_hash": 0, "redflags": 0}))
        applications = [Application.from_document(doc) for doc in self.applications.find()]
        return summarize_cohort(students, applications, filters)

    # ---------------- placement records ----------------

    def _update_student(self, student_id: str, update: dict) -> dict:
        doc = self.students.find_one_and_update(
            {"_id": to_object_id(student_id, "Student")},
            update,
            projection={"student_id": 1, "name": 1, "email": 1, "placements": 1},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Student not found.")
        return doc

    def record_final_placement(self, student_id: str, data: dict) -> dict:
        """Set (or replace) the student's final placement."""
        try:
            placement = FinalPlacement(**{**data, "placed_at": datetime.utcnow(), "is_current_job": True})
        except pydantic.ValidationError as e:
            raise ValidationError(_record_error(e, "final placement"))

        doc = self._update_student(
            student_id,
            {"$set": {"placements.final_job": _enum_values(placement)}},
        )
        logger.info("Final placement recorded for student %s at %s", student_id, placement.company_name)
        return doc

    def remove_final_placement(self, student_id: str) -> dict:
        doc = self._update_student(student_id, {"$unset": {"placements.final_job": ""}})
        logger.info("Final placement removed for student %s", student_id)
        return doc

    def record_completed_internship(self, student_id: str, data: dict) -> dict:
        try:
            internship = CompletedInternship(**data)
        except pydantic.ValidationError as e:
            raise ValidationError(_record_error(e, "internship completion"))

        doc = self._update_student(
            student_id,
            {"$push": {"placements.internships_completed": _enum_values(internship)}},
        )
        logger.info("Internship at %s recorded for student %s", internship.company_name, student_id)
        return doc


def _record_error(error: pydantic.ValidationError, what: str) -> str:
    fields = {str(err["loc"][0]) for err in error.errors() if err["loc"]}
    if fields & {"company_name", "position"}:
        return f"Company name and position are required for {what}"
    first = error.errors()[0]
    return f"Invalid {what}: {first['loc'][0] if first['loc'] else ''} {first['msg']}".strip()


def _enum_values(model: BaseModel) -> dict:
    # datetimes stay native for BSON, enums become their string values
    data = model.model_dump()
    return {k: (v.value if hasattr(v, "value") else v) for k, v in data.items()}


def get_placement_service() -> PlacementService:
    return PlacementService()
