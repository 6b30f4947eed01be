"""
Eligibility Service

PURPOSE:
Decide whether a student qualifies for a job or internship posting.

HOW IT WORKS:
1. Each criterion (branch, CGPA, year, backlogs, availability) is checked
   by its own function and produces a pass / fail / warning result
2. Results are collected in a fixed order into an EligibilityVerdict
3. The student is eligible when no result failed - warnings never block

The checks are advisory: ambiguous or missing data degrades to a warning
instead of raising, and a student may still apply after acknowledging a
failed verdict. Nothing here touches the database.
"""

import re
from typing import List, Optional

from placement_cell.models.eligibility import (
    CriterionResult, CriterionStatus, CriterionType, EligibilityVerdict
)
from placement_cell.models.posting import PostingRequirement, PostingType
from placement_cell.models.student import StudentProfile
from placement_cell.utils.constants import (
    BACKLOG_EXCLUSION_PHRASES, YEAR_SPELLINGS, canonical_branch
)

NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")

PASS = CriterionStatus.passed
FAIL = CriterionStatus.failed
WARNING = CriterionStatus.warning


# ============================================================
# BRANCH / PROGRAM
# ============================================================

def branches_match(student_branch: str, listed_branch: str) -> bool:
    """
    Tolerant branch comparison.

    Matches when either label contains the other (case-insensitive) or both
    resolve to the same canonical branch, so "CSE" and
    "Computer Science & Engineering" are treated as the same branch.
    """
    student = student_branch.strip().lower()
    listed = listed_branch.strip().lower()
    if not student or not listed:
        return False
    if student in listed or listed in student:
        return True
    canonical = canonical_branch(student)
    return canonical is not None and canonical == canonical_branch(listed)


def check_branch(student: StudentProfile, posting: PostingRequirement) -> CriterionResult:
    branches = posting.required_branches
    student_value = student.branch or "Unknown"

    if branches.all_branches_applicable:
        return CriterionResult(
            criterion=CriterionType.program_branch,
            status=PASS,
            requirement="All branches applicable",
            student_value=student_value,
            message="All branches are eligible for this position",
        )

    if not student.branch or not student.branch.strip():
        return CriterionResult(
            criterion=CriterionType.program_branch,
            status=WARNING,
            requirement="Branch information required",
            student_value=student_value,
            message="Branch information incomplete - manual verification needed",
        )

    constrained = branches.constrained_levels()
    if not constrained:
        return CriterionResult(
            criterion=CriterionType.program_branch,
            status=PASS,
            requirement="No specific program restrictions",
            student_value=student_value,
            message="All programs/branches eligible",
        )

    for level, listed in constrained:
        if any(branches_match(student.branch, branch) for branch in listed):
            return CriterionResult(
                criterion=CriterionType.program_branch,
                status=PASS,
                requirement=f"Required ({level}): {', '.join(listed)}",
                student_value=student_value,
                message=f"Your branch ({student.branch}) is eligible under {level.upper()}",
            )

    all_listed = sorted({b for _, listed in constrained for b in listed})
    return CriterionResult(
        criterion=CriterionType.program_branch,
        status=FAIL,
        requirement=f"Required: {', '.join(all_listed)}",
        student_value=student_value,
        message=f"Your branch ({student.branch}) is not in the eligible branches list",
    )


# ============================================================
# CGPA
# ============================================================

def parse_cgpa_threshold(requirement: str) -> Optional[float]:
    """First number in the requirement text ("Minimum 7.0 CGPA" -> 7.0), or None."""
    if not requirement:
        return None
    match = NUMBER_PATTERN.search(requirement)
    return float(match.group()) if match else None


def check_cgpa(student: StudentProfile, posting: PostingRequirement) -> CriterionResult:
    requirement = (posting.cgpa_requirements or "").strip()

    if not requirement:
        return CriterionResult(
            criterion=CriterionType.cgpa,
            status=PASS,
            requirement="No CGPA requirement specified",
            student_value=student.cgpa,
            message="No minimum CGPA for this position",
        )

    threshold = parse_cgpa_threshold(requirement)
    if threshold is None:
        return CriterionResult(
            criterion=CriterionType.cgpa,
            status=WARNING,
            requirement=requirement,
            student_value=student.cgpa,
            message="CGPA requirement format unclear - manual verification needed",
        )

    if student.cgpa is None:
        return CriterionResult(
            criterion=CriterionType.cgpa,
            status=WARNING,
            requirement=f"Minimum {threshold} CGPA required",
            student_value=None,
            message="Your CGPA is not on record - manual verification needed",
        )

    meets = student.cgpa >= threshold
    return CriterionResult(
        criterion=CriterionType.cgpa,
        status=PASS if meets else FAIL,
        requirement=f"Minimum {threshold} CGPA required",
        student_value=student.cgpa,
        message=(
            f"Your CGPA ({student.cgpa}) meets the requirement"
            if meets else
            f"Your CGPA ({student.cgpa}) is below the required {threshold}"
        ),
    )


# ============================================================
# ACADEMIC YEAR
# ============================================================

def year_matches(student_year: int, accepted: List[str]) -> bool:
    """True if any accepted label names the student's year ("3rd year", "Year 3", ...)."""
    spellings = YEAR_SPELLINGS.get(student_year, ())
    for label in accepted:
        label = label.strip().lower()
        if not label:
            continue
        if any(option in label or label in option for option in spellings):
            return True
    return False


def check_internship_year(student: StudentProfile, posting: PostingRequirement) -> CriterionResult:
    accepted = [y for y in posting.student_passing_year_for_internship if y and y.strip()]

    if not accepted:
        return CriterionResult(
            criterion=CriterionType.academic_year,
            status=PASS,
            requirement="No year restrictions specified",
            student_value=student.year,
            message="All academic years are eligible",
        )

    if student.year is None:
        return CriterionResult(
            criterion=CriterionType.academic_year,
            status=WARNING,
            requirement=f"Eligible years: {', '.join(accepted)}",
            student_value=None,
            message="Academic year information incomplete",
        )

    year_number = student.year_number
    if year_number is not None and year_matches(year_number, accepted):
        return CriterionResult(
            criterion=CriterionType.academic_year,
            status=PASS,
            requirement=f"Eligible years: {', '.join(accepted)}",
            student_value=student.year,
            message=f"Your academic year (Year {student.year}) is eligible",
        )

    return CriterionResult(
        criterion=CriterionType.academic_year,
        status=FAIL,
        requirement=f"Eligible years: {', '.join(accepted)}",
        student_value=student.year,
        message=f"Year {student.year} students are not eligible. Required: {', '.join(accepted)}",
    )


def check_job_year(student: StudentProfile, posting: PostingRequirement) -> CriterionResult:
    # Jobs are aimed at final-year students and alumni; anyone else only gets a warning
    eligible = student.is_final_year
    return CriterionResult(
        criterion=CriterionType.academic_year,
        status=PASS if eligible else WARNING,
        requirement="Final year or Alumni students",
        student_value=student.year,
        message=(
            f"Your academic year ({student.year}) is eligible"
            if eligible else
            f"Job typically for final year students. Your year: {student.year or 'Unknown'}"
        ),
    )


# ============================================================
# BACKLOGS
# ============================================================

def has_backlog_restriction(other_requirement: Optional[str]) -> bool:
    text = (other_requirement or "").lower()
    return any(phrase in text for phrase in BACKLOG_EXCLUSION_PHRASES)


def check_backlogs(student: StudentProfile, posting: PostingRequirement) -> CriterionResult:
    backlogs = student.active_backlogs
    student_value = f"{backlogs} active backlogs"

    if has_backlog_restriction(posting.any_other_requirement):
        return CriterionResult(
            criterion=CriterionType.academic_standing,
            status=PASS if backlogs == 0 else FAIL,
            requirement="No backlogs allowed",
            student_value=student_value,
            message=(
                "No active backlogs - meets requirement"
                if backlogs == 0 else
                f"You have {backlogs} active backlogs but company requires clear academic record"
            ),
        )

    return CriterionResult(
        criterion=CriterionType.academic_standing,
        status=PASS if backlogs == 0 else WARNING,
        requirement="No specific backlog restrictions mentioned",
        student_value=student_value,
        message=(
            "No active backlogs"
            if backlogs == 0 else
            f"You have {backlogs} active backlogs - verify with company policy"
        ),
    )


# ============================================================
# PLACEMENT AVAILABILITY (jobs only)
# ============================================================

def check_availability(student: StudentProfile, posting: PostingRequirement) -> CriterionResult:
    available = student.is_available
    return CriterionResult(
        criterion=CriterionType.placement_availability,
        status=PASS if available else FAIL,
        requirement="Student must be available for placement",
        student_value="Available" if available else "Not Available",
        message=(
            "You are available for placement"
            if available else
            "You must mark yourself available for placement to apply"
        ),
    )


# ============================================================
# EVALUATION
# ============================================================

JOB_CHECKS = (check_branch, check_cgpa, check_job_year, check_backlogs, check_availability)
INTERNSHIP_CHECKS = (check_branch, check_cgpa, check_internship_year, check_backlogs)


def evaluate_job(student: StudentProfile, posting: PostingRequirement) -> EligibilityVerdict:
    return EligibilityVerdict(results=[check(student, posting) for check in JOB_CHECKS])


def evaluate_internship(student: StudentProfile, posting: PostingRequirement) -> EligibilityVerdict:
    return EligibilityVerdict(results=[check(student, posting) for check in INTERNSHIP_CHECKS])


def evaluate(student: StudentProfile, posting: PostingRequirement) -> EligibilityVerdict:
    """
    Compute the eligibility verdict for a student against a posting.

    Args:
        student: Profile read from the students collection
        posting: Requirement block of a job or internship post

    Returns:
        EligibilityVerdict with one result per criterion
    """
    if posting.posting_type == PostingType.internship:
        return evaluate_internship(student, posting)
    return evaluate_job(student, posting)
