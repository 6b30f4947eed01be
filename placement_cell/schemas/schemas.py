"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Command bodies forbid unknown fields so typos fail loudly.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum

from placement_cell.models.application import Attachment
from placement_cell.models.eligibility import EligibilityVerdict
from placement_cell.models.placement import (
    CompletionStatus, OfferType, PerformanceRating
)
from placement_cell.models.posting import RequiredBranches


class Command(BaseModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True)


# ============================================================
# ENUMS
# ============================================================

class AccountRole(str, Enum):
    student = "student"
    admin = "admin"
    recruiter = "recruiter"


class OrganizationType(str, Enum):
    private_sector = "Private sector"
    start_up = "Start-up"
    govt_owned = "Govt. owned"
    public_sector = "Public sector"
    mnc_indian = "MNC (Indian)"
    mnc_foreign = "MNC (Foreign)"
    mnc = "MNC (Indian/Foreign)"
    other = "other"


class FinalOfferAnnouncement(str, Enum):
    same_day = "Same day"
    later_no_interviews = "Later, but no further interviews"
    later_after_interviews = "Later, after next stage of interviews"


class PlacementAction(str, Enum):
    add_final_placement = "add_final_placement"
    remove_final_placement = "remove_final_placement"
    add_internship_completion = "add_internship_completion"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(Command):
    """Student self-registration. Admins and recruiters are created by scripts."""
    student_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    degree: Optional[str] = None
    branch: Optional[str] = None
    year: Optional[str] = None


class LoginRequest(Command):
    email: EmailStr
    password: str
    role: AccountRole = AccountRole.student


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: str
    is_spc: bool = False


class UserResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    name: str = ""
    role: str
    is_spc: bool = False


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class StudentUpdate(Command):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = None
    degree: Optional[str] = None
    branch: Optional[str] = None
    year: Optional[str] = None
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    active_backlogs: Optional[int] = Field(None, ge=0)
    total_backlogs: Optional[int] = Field(None, ge=0)


class PlacementAvailabilityUpdate(Command):
    available_for_placement: bool = Field(..., strict=True)


# ============================================================
# POSTING SCHEMAS
# ============================================================

class SelectionProcess(BaseModel):
    aptitude_test: Optional[bool] = None
    technical_test: Optional[bool] = None
    group_discussion: Optional[bool] = None
    personal_interview: Optional[bool] = None
    number_of_rounds: Optional[int] = Field(None, ge=0)
    provision_for_waitlist: Optional[bool] = None


class JobRemuneration(BaseModel):
    profile: Optional[str] = None
    basic: Optional[float] = None
    hra: Optional[float] = None
    other: Optional[float] = None
    gross: Optional[float] = None
    take_home: Optional[float] = None
    ctc: Optional[float] = None


class InternshipRemuneration(BaseModel):
    other: Optional[str] = None
    stipend: Optional[float] = None
    ctc_ppo: Optional[float] = None


class PostingBase(Command):
    organization_name: str = Field(..., min_length=1)
    website: Optional[str] = None
    organization_type: OrganizationType
    organization_type_other: Optional[str] = None
    industry_sector: Optional[str] = None
    industry_sector_other: Optional[str] = None
    tentative_date_of_joining: Optional[datetime] = None
    place_of_posting: Optional[str] = None
    required_programs: List[str] = []
    required_branches: RequiredBranches = RequiredBranches()
    number_of_positions: Optional[int] = Field(None, ge=0)
    cgpa_requirements: Optional[str] = None
    any_other_requirement: Optional[str] = None
    preferred_dates_for_campus_visit: List[datetime] = []
    number_of_executives_visiting: Optional[int] = Field(None, ge=0)
    number_of_rooms_required: Optional[int] = Field(None, ge=0)
    pre_placement_talk_required: Optional[bool] = None
    selection_process: SelectionProcess = SelectionProcess()
    final_offer_announcement: Optional[FinalOfferAnnouncement] = None
    contact_person: str = Field(..., min_length=1)
    email_address: EmailStr
    contact_address: Optional[str] = None
    mobile_no: Optional[str] = None
    signature_name: Optional[str] = None
    signature_designation: Optional[str] = None


class JobPostCreate(PostingBase):
    job_designation: str = Field(..., min_length=1)
    job_description: str = Field(..., min_length=1)
    medical_requirements: Optional[str] = None
    remuneration: Dict[str, JobRemuneration] = {}
    company_accommodation_provided: Optional[bool] = None
    service_agreement_required: Optional[bool] = None
    service_agreement_duration: Optional[int] = Field(None, ge=0)
    differential_pay_for_nits: Optional[bool] = None
    technical_presentation_required: Optional[bool] = None


INTERNSHIP_YEARS = {"1st year", "2nd year", "3rd year", "4th year", "5th year"}


def _check_internship_years(value: Optional[List[str]]) -> Optional[List[str]]:
    unknown = [v for v in value or [] if v not in INTERNSHIP_YEARS]
    if unknown:
        raise ValueError(f"Unknown year(s): {', '.join(unknown)}")
    return value


class InternshipPostCreate(PostingBase):
    internship_profile: str = Field(..., min_length=1)
    internship_duration: Optional[str] = None
    student_passing_year_for_internship: List[str] = []
    remuneration: Dict[str, InternshipRemuneration] = {}

    @field_validator("student_passing_year_for_internship")
    @classmethod
    def _known_years(cls, value: List[str]) -> List[str]:
        return _check_internship_years(value)


class PostingUpdateBase(Command):
    """
    Admin edit of a posting. Every field is optional; only the ones sent are
    written. A sent ``required_branches`` block replaces the stored one.
    """
    organization_name: Optional[str] = Field(None, min_length=1)
    website: Optional[str] = None
    organization_type: Optional[OrganizationType] = None
    organization_type_other: Optional[str] = None
    industry_sector: Optional[str] = None
    industry_sector_other: Optional[str] = None
    tentative_date_of_joining: Optional[datetime] = None
    place_of_posting: Optional[str] = None
    required_programs: Optional[List[str]] = None
    required_branches: Optional[RequiredBranches] = None
    number_of_positions: Optional[int] = Field(None, ge=0)
    cgpa_requirements: Optional[str] = None
    any_other_requirement: Optional[str] = None
    preferred_dates_for_campus_visit: Optional[List[datetime]] = None
    number_of_executives_visiting: Optional[int] = Field(None, ge=0)
    number_of_rooms_required: Optional[int] = Field(None, ge=0)
    pre_placement_talk_required: Optional[bool] = None
    selection_process: Optional[SelectionProcess] = None
    final_offer_announcement: Optional[FinalOfferAnnouncement] = None
    contact_person: Optional[str] = Field(None, min_length=1)
    email_address: Optional[EmailStr] = None
    contact_address: Optional[str] = None
    mobile_no: Optional[str] = None
    signature_name: Optional[str] = None
    signature_designation: Optional[str] = None


class JobPostUpdate(PostingUpdateBase):
    job_designation: Optional[str] = Field(None, min_length=1)
    job_description: Optional[str] = Field(None, min_length=1)
    medical_requirements: Optional[str] = None
    remuneration: Optional[Dict[str, JobRemuneration]] = None
    company_accommodation_provided: Optional[bool] = None
    service_agreement_required: Optional[bool] = None
    service_agreement_duration: Optional[int] = Field(None, ge=0)
    differential_pay_for_nits: Optional[bool] = None
    technical_presentation_required: Optional[bool] = None


class InternshipPostUpdate(PostingUpdateBase):
    internship_profile: Optional[str] = Field(None, min_length=1)
    internship_duration: Optional[str] = None
    student_passing_year_for_internship: Optional[List[str]] = None
    remuneration: Optional[Dict[str, InternshipRemuneration]] = None

    @field_validator("student_passing_year_for_internship")
    @classmethod
    def _known_years(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _check_internship_years(value)


class AnnouncementUpdate(Command):
    is_announced: Optional[bool] = None


class PostingWithVerdict(BaseModel):
    posting: dict
    eligibility: EligibilityVerdict
    has_applied: bool = False


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(Command):
    cover_letter: Optional[str] = Field(None, max_length=5000)
    additional_info: Optional[str] = Field(None, max_length=5000)
    eligibility_acknowledged: bool = False
    attachments: List[Attachment] = []


class ApplicationStatusUpdate(Command):
    status: str
    notes: Optional[str] = None
    expected_version: Optional[int] = Field(None, ge=1)


class WithdrawRequest(Command):
    notes: Optional[str] = None


# ============================================================
# PLACEMENT SCHEMAS
# ============================================================

class PlacementData(BaseModel):
    """Fields for a final placement or a completed internship."""
    company_name: Optional[str] = None
    position: Optional[str] = None
    ctc: Optional[float] = Field(None, ge=0)
    joining_date: Optional[datetime] = None
    work_location: Optional[str] = None
    offer_type: Optional[OfferType] = None
    duration: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    stipend: Optional[float] = Field(None, ge=0)
    completion_status: Optional[CompletionStatus] = None
    ppo_received: Optional[bool] = None
    ppo_ctc: Optional[float] = Field(None, ge=0)
    ppo_accepted: Optional[bool] = None
    certificate_received: Optional[bool] = None
    performance_rating: Optional[PerformanceRating] = None
    feedback: Optional[str] = None


class PlacementUpdate(Command):
    action: PlacementAction
    placement_data: Optional[PlacementData] = None


# ============================================================
# RED FLAG SCHEMAS
# ============================================================

class RedFlagRequest(Command):
    reason: str = Field(..., min_length=1, max_length=1000)


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
