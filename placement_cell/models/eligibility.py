"""
Eligibility verdict - a derived view, recomputed on demand and never stored.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, computed_field


class CriterionType(str, Enum):
    program_branch = "Program/Branch"
    cgpa = "CGPA"
    academic_year = "Academic Year"
    academic_standing = "Academic Standing"
    placement_availability = "Placement Availability"


class CriterionStatus(str, Enum):
    passed = "pass"
    failed = "fail"
    warning = "warning"


class CriterionResult(BaseModel):
    criterion: CriterionType
    status: CriterionStatus
    requirement: str
    student_value: Optional[Any] = None
    message: str


class EligibilityVerdict(BaseModel):
    results: List[CriterionResult] = []

    @computed_field
    @property
    def eligible(self) -> bool:
        # Warnings never block
        return all(r.status != CriterionStatus.failed for r in self.results)

    @property
    def failures(self) -> List[CriterionResult]:
        return [r for r in self.results if r.status == CriterionStatus.failed]

    @property
    def warnings(self) -> List[CriterionResult]:
        return [r for r in self.results if r.status == CriterionStatus.warning]

    def result_for(self, criterion: CriterionType) -> Optional[CriterionResult]:
        for result in self.results:
            if result.criterion == criterion:
                return result
        return None
