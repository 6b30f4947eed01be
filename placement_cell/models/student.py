"""
Student domain models.

``StudentProfile`` is the read-only view of a student document that the
eligibility rules consume.
"""

import logging
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from placement_cell.models.placement import CompletedInternship, FinalPlacement
from placement_cell.utils.constants import ALUMNI, FINAL_YEARS, normalize_year

logger = logging.getLogger(__name__)


class RedFlag(BaseModel):
    id: str
    reason: str
    assigned_by: str
    assigned_by_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: dict) -> "RedFlag":
        return cls(
            id=str(doc["_id"]),
            reason=doc.get("reason", ""),
            assigned_by=doc.get("assigned_by", ""),
            assigned_by_id=str(doc.get("assigned_by_id", "")),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )


class Placements(BaseModel):
    final_job: Optional[FinalPlacement] = None
    internships_completed: List[CompletedInternship] = []


class StudentProfile(BaseModel):
    id: Optional[str] = None
    student_id: Optional[str] = None
    name: str = ""
    email: Optional[str] = None
    program: Optional[str] = None
    branch: Optional[str] = None
    year: Optional[str] = None
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    active_backlogs: int = Field(0, ge=0)
    total_backlogs: int = Field(0, ge=0)
    profile_completed: bool = False
    available_for_placement: bool = False
    placement_availability_updated_at: Optional[datetime] = None
    is_spc: bool = False
    redflags: List[RedFlag] = []
    placements: Placements = Placements()

    @field_validator("year", mode="before")
    @classmethod
    def _normalize_year(cls, value):
        return normalize_year(value)

    @property
    def year_number(self) -> Optional[int]:
        """Numeric year of study, None for alumni or unknown."""
        if self.year is None or self.year == ALUMNI:
            return None
        return int(self.year)

    @property
    def is_final_year(self) -> bool:
        return self.year in FINAL_YEARS

    @property
    def is_available(self) -> bool:
        # The flag only counts once the profile is complete
        return self.profile_completed and self.available_for_placement

    @classmethod
    def from_document(cls, doc: dict) -> "StudentProfile":
        """Build a profile from a ``students`` document (missing fields mean no data)."""
        cgpa = doc.get("cgpa") or {}
        placements = doc.get("placements") or {}
        final_job = placements.get("final_job")
        return cls(
            id=str(doc["_id"]) if doc.get("_id") is not None else None,
            student_id=doc.get("student_id"),
            name=doc.get("name", ""),
            email=doc.get("email"),
            program=doc.get("degree"),
            branch=doc.get("branch"),
            year=doc.get("year"),
            cgpa=cgpa.get("overall"),
            active_backlogs=cgpa.get("active_backlogs") or 0,
            total_backlogs=cgpa.get("total_backlogs") or 0,
            profile_completed=bool(doc.get("profile_completed", False)),
            available_for_placement=bool(doc.get("available_for_placement", False)),
            placement_availability_updated_at=doc.get("placement_availability_updated_at"),
            is_spc=bool(doc.get("is_spc", False)),
            redflags=_red_flags(doc),
            placements=Placements(
                final_job=FinalPlacement(**final_job) if final_job else None,
                internships_completed=[
                    CompletedInternship(**i) for i in placements.get("internships_completed", [])
                ],
            ),
        )


def _red_flags(doc: dict) -> List[RedFlag]:
    flags = doc.get("redflags") or []
    legacy = [f for f in flags if not f.get("_id")]
    if legacy:
        logger.warning(
            "Student %s has %d red flag(s) without an id; run scripts/backfill_redflag_ids.py",
            doc.get("student_id"), len(legacy),
        )
    return [RedFlag.from_document(f) for f in flags if f.get("_id")]
