"""
Models module - Pydantic domain models.

These are the internal data structures the services work with:
- StudentProfile, RedFlag, FinalPlacement, CompletedInternship
- PostingRequirement
- Application, StatusHistoryEntry
- EligibilityVerdict
"""

from placement_cell.models.application import (
    Actor, ActorRole, Application, ApplicationStatus, Attachment,
    StatusHistoryEntry, TERMINAL_STATUSES
)
from placement_cell.models.eligibility import (
    CriterionResult, CriterionStatus, CriterionType, EligibilityVerdict
)
from placement_cell.models.placement import (
    CompletedInternship, CompletionStatus, FinalPlacement, OfferType, PerformanceRating
)
from placement_cell.models.posting import PostingRequirement, PostingType, RequiredBranches
from placement_cell.models.student import RedFlag, StudentProfile

__all__ = [
    "Actor", "ActorRole", "Application", "ApplicationStatus", "Attachment",
    "StatusHistoryEntry", "TERMINAL_STATUSES",
    "CriterionResult", "CriterionStatus", "CriterionType", "EligibilityVerdict",
    "CompletedInternship", "CompletionStatus", "FinalPlacement", "OfferType", "PerformanceRating",
    "PostingRequirement", "PostingType", "RequiredBranches",
    "RedFlag", "StudentProfile",
]
