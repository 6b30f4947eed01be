"""
Posting Routes

POST /postings/job - Recruiter submits a job post
POST /postings/internship - Recruiter submits an internship post
GET /postings/mine/{posting_type} - Recruiter's own submissions
GET /postings/announced/{posting_type} - Announced postings with the student's eligibility
GET /postings/announced/{posting_type}/{posting_id} - One announced posting with eligibility
GET /postings/{posting_type}/{posting_id}/eligibility - Eligibility verdict only
POST /postings/{posting_type}/{posting_id}/apply - Apply to an announced posting
"""

from fastapi import APIRouter, Depends, Request

from placement_cell.core.auth import get_current_recruiter, get_current_student
from placement_cell.models.posting import PostingRequirement
from placement_cell.services.application_service import get_application_service
from placement_cell.services.eligibility import evaluate
from placement_cell.services.mongo_service import serialize_doc, serialize_docs
from placement_cell.services.posting_service import PostingService, parse_posting_type
from placement_cell.services.student_service import get_student_service
from placement_cell.schemas.schemas import (
    ApplicationCreate, InternshipPostCreate, JobPostCreate, PostingWithVerdict
)

router = APIRouter(prefix="/postings", tags=["Postings"])


def _service(posting_type: str) -> PostingService:
    return PostingService(parse_posting_type(posting_type))


@router.post("/job", status_code=201)
async def create_job_post(data: JobPostCreate, recruiter: dict = Depends(get_current_recruiter)):
    """Submit a job post. It stays hidden from students until announced."""
    doc = _service("job").create(data.model_dump(), recruiter_id=recruiter["user_id"])
    return {"success": True, "message": "Job post submitted successfully", "post": serialize_doc(doc)}


@router.post("/internship", status_code=201)
async def create_internship_post(data: InternshipPostCreate, recruiter: dict = Depends(get_current_recruiter)):
    """Submit an internship post. It stays hidden from students until announced."""
    doc = _service("internship").create(data.model_dump(), recruiter_id=recruiter["user_id"])
    return {"success": True, "message": "Internship post submitted successfully", "post": serialize_doc(doc)}


@router.get("/mine/{posting_type}")
async def list_my_postings(posting_type: str, recruiter: dict = Depends(get_current_recruiter)):
    posts = _service(posting_type).list_postings(recruiter_id=recruiter["user_id"])
    return {"success": True, "posts": serialize_docs(posts)}


@router.get("/announced/{posting_type}")
async def list_announced(posting_type: str, student: dict = Depends(get_current_student)):
    """
    Announced postings, each with the current student's eligibility verdict.

    The verdict is recomputed on every request and never stored.
    """
    service = _service(posting_type)
    profile = get_student_service().get_profile(student["student_id"])
    applied_to = {
        a.posting_id for a in get_application_service().list_for_student(student["student_id"], posting_type)
    }

    results = []
    for doc in service.list_postings(announced_only=True):
        verdict = evaluate(profile, PostingRequirement.from_document(doc, service.posting_type))
        results.append(PostingWithVerdict(
            posting=serialize_doc(doc),
            eligibility=verdict,
            has_applied=str(doc["_id"]) in applied_to,
        ))
    return {"success": True, "posts": results}


@router.get("/announced/{posting_type}/{posting_id}")
async def get_announced(posting_type: str, posting_id: str, student: dict = Depends(get_current_student)):
    service = _service(posting_type)
    doc = service.get_announced(posting_id)
    profile = get_student_service().get_profile(student["student_id"])
    applied_to = {
        a.posting_id for a in get_application_service().list_for_student(student["student_id"], posting_type)
    }
    return {
        "success": True,
        "post": PostingWithVerdict(
            posting=serialize_doc(doc),
            eligibility=evaluate(profile, PostingRequirement.from_document(doc, service.posting_type)),
            has_applied=str(doc["_id"]) in applied_to,
        ),
    }


@router.get("/{posting_type}/{posting_id}/eligibility")
async def check_eligibility(posting_type: str, posting_id: str, student: dict = Depends(get_current_student)):
    verdict = get_application_service().check_eligibility(student["student_id"], posting_type, posting_id)
    return {"success": True, "eligibility": verdict}


@router.post("/{posting_type}/{posting_id}/apply", status_code=201)
async def apply(
    posting_type: str,
    posting_id: str,
    data: ApplicationCreate,
    request: Request,
    student: dict = Depends(get_current_student)
):
    """
    Apply to an announced posting.

    Failing an eligibility check does not block the application; the student
    must acknowledge the requirements instead.
    """
    # Unannounced postings are invisible to students
    _service(posting_type).get_announced(posting_id)

    forwarded = request.headers.get("x-forwarded-for")
    ip = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)

    application = get_application_service().create_application(
        student_id=student["student_id"],
        posting_type=posting_type,
        posting_id=posting_id,
        eligibility_acknowledged=data.eligibility_acknowledged,
        cover_letter=data.cover_letter,
        additional_info=data.additional_info,
        attachments=data.attachments,
        submission_ip=ip,
        user_agent=request.headers.get("user-agent"),
    )
    return {"success": True, "message": "Application submitted successfully", "application": application}
