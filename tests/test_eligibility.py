"""Eligibility rules: one verdict per student/posting pair, never raising."""

import pytest

from placement_cell.models.eligibility import CriterionStatus, CriterionType
from placement_cell.models.posting import PostingRequirement, PostingType, RequiredBranches
from placement_cell.models.student import StudentProfile
from placement_cell.services.eligibility import (
    branches_match, evaluate, parse_cgpa_threshold
)

PASS = CriterionStatus.passed
FAIL = CriterionStatus.failed
WARNING = CriterionStatus.warning


def make_student(**overrides) -> StudentProfile:
    data = dict(
        name="Asha Rao",
        branch="Computer Science & Engineering",
        year="4",
        cgpa=7.2,
        active_backlogs=0,
        profile_completed=True,
        available_for_placement=True,
    )
    data.update(overrides)
    return StudentProfile(**data)


def make_posting(posting_type=PostingType.job, **overrides) -> PostingRequirement:
    data = dict(
        posting_type=posting_type,
        required_branches=RequiredBranches(btech=["Computer Science & Engineering"]),
        cgpa_requirements="Minimum 7.0 CGPA",
    )
    data.update(overrides)
    return PostingRequirement(**data)


def status_of(verdict, criterion):
    return verdict.result_for(criterion).status


# ============================================================
# Criteria order
# ============================================================

def test_job_criteria_order():
    verdict = evaluate(make_student(), make_posting())
    assert [r.criterion for r in verdict.results] == [
        CriterionType.program_branch,
        CriterionType.cgpa,
        CriterionType.academic_year,
        CriterionType.academic_standing,
        CriterionType.placement_availability,
    ]


def test_internship_has_no_availability_check():
    verdict = evaluate(make_student(available_for_placement=False), make_posting(PostingType.internship))
    assert verdict.result_for(CriterionType.placement_availability) is None
    assert len(verdict.results) == 4


# ============================================================
# Branch
# ============================================================

@pytest.mark.parametrize("branch", ["", "Mechanical Engineering", "CSE", "Anything"])
def test_all_branches_applicable_always_passes(branch):
    posting = make_posting(required_branches=RequiredBranches(
        btech=["Civil Engineering"], all_branches_applicable=True
    ))
    verdict = evaluate(make_student(branch=branch), posting)
    assert status_of(verdict, CriterionType.program_branch) == PASS


def test_missing_branch_is_warning():
    verdict = evaluate(make_student(branch=None), make_posting())
    assert status_of(verdict, CriterionType.program_branch) == WARNING


def test_no_branch_lists_passes():
    verdict = evaluate(make_student(branch="Civil Engineering"), make_posting(required_branches=RequiredBranches()))
    assert status_of(verdict, CriterionType.program_branch) == PASS


def test_branch_not_listed_fails():
    verdict = evaluate(make_student(branch="Civil Engineering"), make_posting())
    result = verdict.result_for(CriterionType.program_branch)
    assert result.status == FAIL
    assert "Computer Science & Engineering" in result.requirement
    assert verdict.eligible is False


def test_branch_listed_under_later_program_level():
    posting = make_posting(required_branches=RequiredBranches(
        btech=["Civil Engineering"], mtech=["Computer Science & Engineering"]
    ))
    result = evaluate(make_student(), posting).result_for(CriterionType.program_branch)
    assert result.status == PASS
    assert "mtech" in result.requirement


def test_short_branch_name_matches_full_name_through_aliases():
    verdict = evaluate(make_student(branch="CSE"), make_posting())
    assert status_of(verdict, CriterionType.program_branch) == PASS


@pytest.mark.parametrize("student, listed, expected", [
    ("Computer Science", "Computer Science & Engineering", True),
    ("computer science & engineering", "Computer Science & Engineering", True),
    ("ECE", "Electronics and Communication Engineering", True),
    ("Civil Engineering", "Chemical Engineering", False),
    ("", "Computer Science & Engineering", False),
])
def test_branches_match(student, listed, expected):
    assert branches_match(student, listed) is expected


# ============================================================
# CGPA
# ============================================================

@pytest.mark.parametrize("text, expected", [
    ("Minimum 7.0 CGPA", 7.0),
    ("7.5 and above", 7.5),
    ("CGPA >= 8", 8.0),
    ("No minimum", None),
    ("", None),
])
def test_parse_cgpa_threshold(text, expected):
    assert parse_cgpa_threshold(text) == expected


@pytest.mark.parametrize("cgpa, expected", [
    (7.0, PASS),
    (7.2, PASS),
    (9.9, PASS),
    (6.99, FAIL),
    (0.0, FAIL),
])
def test_cgpa_threshold_comparison(cgpa, expected):
    verdict = evaluate(make_student(cgpa=cgpa), make_posting())
    assert status_of(verdict, CriterionType.cgpa) == expected


def test_cgpa_text_without_number_is_warning():
    verdict = evaluate(make_student(), make_posting(cgpa_requirements="Good academic record"))
    assert status_of(verdict, CriterionType.cgpa) == WARNING
    assert verdict.eligible is True


def test_blank_cgpa_requirement_passes():
    verdict = evaluate(make_student(cgpa=None), make_posting(cgpa_requirements="   "))
    assert status_of(verdict, CriterionType.cgpa) == PASS


def test_missing_student_cgpa_is_warning():
    verdict = evaluate(make_student(cgpa=None), make_posting())
    assert status_of(verdict, CriterionType.cgpa) == WARNING


# ============================================================
# Academic year
# ============================================================

@pytest.mark.parametrize("year, expected", [
    ("4", PASS),
    ("5", PASS),
    ("Alumni", PASS),
    ("3", WARNING),
    (None, WARNING),
])
def test_job_year_is_advisory(year, expected):
    verdict = evaluate(make_student(year=year), make_posting())
    assert status_of(verdict, CriterionType.academic_year) == expected


def test_legacy_year_spelling_is_normalised():
    assert make_student(year="4th").year == "4"
    assert make_student(year="3rd year").year == "3"
    assert make_student(year="alumni").year == "Alumni"


@pytest.mark.parametrize("accepted, year, expected", [
    (["3rd year"], "3", PASS),
    (["2nd year", "3rd year"], "2", PASS),
    (["4th year"], "3", FAIL),
    (["Final year"], "4", PASS),
    ([], "1", PASS),
    (["3rd year"], None, WARNING),
    (["3rd year"], "Alumni", FAIL),
])
def test_internship_year(accepted, year, expected):
    posting = make_posting(PostingType.internship, student_passing_year_for_internship=accepted)
    verdict = evaluate(make_student(year=year), posting)
    assert status_of(verdict, CriterionType.academic_year) == expected


# ============================================================
# Backlogs and availability
# ============================================================

@pytest.mark.parametrize("text", ["No backlogs allowed", "NO PENDING subjects", "Clear academic record"])
def test_backlog_restriction_fails_with_active_backlogs(text):
    verdict = evaluate(make_student(active_backlogs=2), make_posting(any_other_requirement=text))
    assert status_of(verdict, CriterionType.academic_standing) == FAIL


def test_backlog_restriction_passes_without_backlogs():
    verdict = evaluate(make_student(), make_posting(any_other_requirement="No backlogs"))
    assert status_of(verdict, CriterionType.academic_standing) == PASS


def test_backlogs_without_restriction_are_warning():
    verdict = evaluate(make_student(active_backlogs=1), make_posting())
    assert status_of(verdict, CriterionType.academic_standing) == WARNING
    assert verdict.eligible is True


def test_unavailable_student_fails_job():
    verdict = evaluate(make_student(available_for_placement=False), make_posting())
    assert status_of(verdict, CriterionType.placement_availability) == FAIL
    assert verdict.eligible is False


def test_availability_requires_completed_profile():
    verdict = evaluate(make_student(profile_completed=False), make_posting())
    assert status_of(verdict, CriterionType.placement_availability) == FAIL


# ============================================================
# Worked examples
# ============================================================

def test_full_name_branch_student_is_eligible():
    verdict = evaluate(make_student(), make_posting())
    assert status_of(verdict, CriterionType.program_branch) == PASS
    assert status_of(verdict, CriterionType.cgpa) == PASS
    assert verdict.eligible is True
    assert verdict.failures == []


def test_low_cgpa_student_is_not_eligible():
    verdict = evaluate(make_student(cgpa=6.5), make_posting())
    assert status_of(verdict, CriterionType.cgpa) == FAIL
    assert verdict.eligible is False
    assert [r.criterion for r in verdict.failures] == [CriterionType.cgpa]


def test_verdict_serialises_eligible_flag():
    data = evaluate(make_student(cgpa=6.5), make_posting()).model_dump()
    assert data["eligible"] is False
    assert data["results"][1]["status"] == FAIL


def test_requirement_from_document_ignores_unknown_fields():
    requirement = PostingRequirement.from_document(
        {"required_branches": {"btech": ["Civil Engineering"], "legacy": ["x"], "mba": None}},
        PostingType.job,
    )
    assert requirement.required_branches.btech == ["Civil Engineering"]
    assert requirement.required_branches.mba == []
    assert requirement.cgpa_requirements is None


# ============================================================
# Stored postings with wrongly typed fields
# ============================================================

def test_badly_typed_posting_document_still_gets_a_verdict():
    requirement = PostingRequirement.from_document({
        "required_programs": "B.Tech",
        "required_branches": {"btech": "Computer Science & Engineering", "mtech": None},
        "cgpa_requirements": 7.5,
        "any_other_requirement": 0,
    }, PostingType.job)
    assert requirement.required_programs == ["B.Tech"]
    assert requirement.required_branches.btech == ["Computer Science & Engineering"]
    assert requirement.required_branches.mtech == []
    assert requirement.cgpa_requirements == "7.5"

    verdict = evaluate(make_student(), requirement)
    assert len(verdict.results) == 5
    assert status_of(verdict, CriterionType.cgpa) == FAIL


def test_unreadable_cgpa_value_degrades_to_warning():
    requirement = PostingRequirement.from_document(
        {"required_branches": "everyone", "cgpa_requirements": ["see brochure"]}, PostingType.internship
    )
    assert requirement.required_branches.constrained_levels() == []

    verdict = evaluate(make_student(), requirement)
    assert status_of(verdict, CriterionType.cgpa) == WARNING
