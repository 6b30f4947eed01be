"""
Posting requirement model.

Jobs and internships share the same requirement block; only internships
carry a list of accepted years of study.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from placement_cell.utils.constants import PROGRAM_LEVELS


class PostingType(str, Enum):
    job = "job"
    internship = "internship"


class RequiredBranches(BaseModel):
    model_config = ConfigDict(extra="forbid")

    btech: List[str] = []
    barch: List[str] = []
    mtech: List[str] = []
    mplan: List[str] = []
    msc: List[str] = []
    mba: List[str] = []
    phd: List[str] = []
    minor_specializations: List[str] = []
    all_branches_applicable: bool = False

    def constrained_levels(self) -> List[Tuple[str, List[str]]]:
        """(program level, branches) for every level with a non-empty list, in check order."""
        levels = []
        for level in PROGRAM_LEVELS:
            branches = [b for b in getattr(self, level) if b and b.strip()]
            if branches:
                levels.append((level, branches))
        return levels


class PostingRequirement(BaseModel):
    posting_type: PostingType
    required_programs: List[str] = []
    required_branches: RequiredBranches = RequiredBranches()
    cgpa_requirements: Optional[str] = None
    student_passing_year_for_internship: List[str] = []
    any_other_requirement: Optional[str] = None

    @classmethod
    def from_document(cls, doc: dict, posting_type: PostingType) -> "PostingRequirement":
        """
        Build from a job/internship post document; absent fields impose no constraint.

        Stored values of the wrong shape are coerced (a lone string becomes a
        one-item list, a number becomes text) so a badly edited posting still
        gets a verdict instead of failing every read.
        """
        branches = doc.get("required_branches")
        if not isinstance(branches, dict):
            branches = {}
        levels = {k: _as_text_list(branches.get(k)) for k in PROGRAM_LEVELS + ("minor_specializations",)}
        return cls(
            posting_type=posting_type,
            required_programs=_as_text_list(doc.get("required_programs")),
            required_branches=RequiredBranches(
                **levels,
                all_branches_applicable=branches.get("all_branches_applicable") is True,
            ),
            cgpa_requirements=_as_text(doc.get("cgpa_requirements")),
            student_passing_year_for_internship=_as_text_list(doc.get("student_passing_year_for_internship")),
            any_other_requirement=_as_text(doc.get("any_other_requirement")),
        )


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _as_text_list(value) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [_as_text(v) for v in value if v is not None]


def posting_headline(doc: dict, posting_type: PostingType) -> Tuple[str, str]:
    """(company name, position) shown on application records."""
    position_field = "job_designation" if posting_type == PostingType.job else "internship_profile"
    return doc.get("organization_name", ""), doc.get(position_field, "")
