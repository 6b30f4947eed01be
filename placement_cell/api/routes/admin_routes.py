"""
Admin Routes

GET /admin/postings/{posting_type} - List all postings
GET /admin/postings/{posting_type}/{posting_id} - Posting detail
PUT /admin/postings/job/{posting_id} - Edit job post
PUT /admin/postings/internship/{posting_id} - Edit internship post
DELETE /admin/postings/{posting_type}/{posting_id} - Delete posting
PATCH /admin/postings/{posting_type}/{posting_id}/toggle-announcement - Announce / hide
GET /admin/postings/{posting_type}/{posting_id}/applications - Applications to a posting
PATCH /admin/applications/{application_id}/status - Move an application to a new status
GET /admin/students - List students (optional search)
GET /admin/students/available - Students available for placement, with stats
GET /admin/students/placement-tracking - Cohort placement tracking
GET /admin/students/{student_id} - Student detail with application summary
PATCH /admin/students/{student_id}/placements - Record / remove placements
PATCH /admin/students/{student_id}/placement-availability - Override availability
PATCH /admin/students/{student_id}/toggle-spc - Grant / revoke SPC rights
GET /admin/recruiters - Recruiters with post counts
GET /admin/recruiters/{recruiter_id}/posts - One recruiter and their posts
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from placement_cell.core.auth import actor_from_user, require_admin
from placement_cell.core.exceptions import ValidationError
from placement_cell.services.application_service import get_application_service
from placement_cell.services.mongo_service import serialize_doc, serialize_docs
from placement_cell.services.placement_service import CohortFilters, get_placement_service
from placement_cell.services.posting_service import PostingService, parse_posting_type
from placement_cell.services.recruiter_service import get_recruiter_service
from placement_cell.services.student_service import get_student_service, public_student
from placement_cell.schemas.schemas import (
    AnnouncementUpdate, ApplicationStatusUpdate, InternshipPostUpdate, JobPostUpdate,
    MessageResponse, PlacementAction, PlacementAvailabilityUpdate, PlacementUpdate
)

router = APIRouter(prefix="/admin", tags=["Admin"])


def _service(posting_type: str) -> PostingService:
    return PostingService(parse_posting_type(posting_type))


# ============================================================
# POSTINGS
# ============================================================

@router.get("/postings/{posting_type}")
async def list_postings(posting_type: str, admin: dict = Depends(require_admin)):
    return {"success": True, "posts": serialize_docs(_service(posting_type).list_postings())}


@router.get("/postings/{posting_type}/{posting_id}")
async def get_posting(posting_type: str, posting_id: str, admin: dict = Depends(require_admin)):
    return {"success": True, "post": serialize_doc(_service(posting_type).get(posting_id))}


@router.put("/postings/job/{posting_id}")
async def update_job_posting(posting_id: str, data: JobPostUpdate, admin: dict = Depends(require_admin)):
    """Edit job post fields. Only the fields sent are changed."""
    doc = _service("job").update(posting_id, data.model_dump(exclude_none=True))
    return {"success": True, "message": "Post updated successfully", "post": serialize_doc(doc)}


@router.put("/postings/internship/{posting_id}")
async def update_internship_posting(
    posting_id: str,
    data: InternshipPostUpdate,
    admin: dict = Depends(require_admin)
):
    """Edit internship post fields. Only the fields sent are changed."""
    doc = _service("internship").update(posting_id, data.model_dump(exclude_none=True))
    return {"success": True, "message": "Post updated successfully", "post": serialize_doc(doc)}


@router.delete("/postings/{posting_type}/{posting_id}", response_model=MessageResponse)
async def delete_posting(posting_type: str, posting_id: str, admin: dict = Depends(require_admin)):
    service = _service(posting_type)
    service.delete(posting_id)
    return MessageResponse(message=f"{service.label} deleted successfully")


@router.patch("/postings/{posting_type}/{posting_id}/toggle-announcement")
async def toggle_announcement(
    posting_type: str,
    posting_id: str,
    data: Optional[AnnouncementUpdate] = None,
    admin: dict = Depends(require_admin)
):
    """Set the announcement flag, or flip it when no value is given."""
    service = _service(posting_type)
    announced = service.set_announcement(posting_id, data.is_announced if data else None)
    state = "announced" if announced else "unannounced"
    return {"success": True, "message": f"{service.label} {state} successfully", "is_announced": announced}


@router.get("/postings/{posting_type}/{posting_id}/applications")
async def list_posting_applications(
    posting_type: str,
    posting_id: str,
    status: Optional[str] = None,
    admin: dict = Depends(require_admin)
):
    """Applications to one posting, optionally filtered by exact status."""
    posting = _service(posting_type).get(posting_id)
    applications = get_application_service().list_for_posting(str(posting["_id"]), status)
    return {"success": True, "applications": applications, "total": len(applications)}


# ============================================================
# APPLICATIONS
# ============================================================

@router.patch("/applications/{application_id}/status")
async def update_application_status(
    application_id: str,
    data: ApplicationStatusUpdate,
    admin: dict = Depends(require_admin)
):
    """
    Move an application to a new status.

    Selected / Rejected are final. Send expected_version to make
    sure nobody changed the application since you loaded it.
    """
    application = get_application_service().transition(
        application_id,
        data.status,
        actor_from_user(admin),
        note=data.notes,
        expected_version=data.expected_version,
    )
    return {
        "success": True,
        "message": f"Application status updated to {application.current_status.value}",
        "application": application,
    }


# ============================================================
# STUDENTS
# ============================================================

@router.get("/students")
async def list_students(search: Optional[str] = None, admin: dict = Depends(require_admin)):
    students = get_student_service().list_students(search)
    return {"success": True, "students": serialize_docs(students), "total": len(students)}


@router.get("/students/available")
async def list_available_students(
    branch: Optional[str] = None,
    year: Optional[str] = None,
    min_cgpa: Optional[float] = Query(None, ge=0, le=10),
    admin: dict = Depends(require_admin)
):
    """Students who completed their profile and opted in for placement."""
    students, stats = get_student_service().list_available(branch, year, min_cgpa)
    return {"success": True, "students": serialize_docs(students), "stats": stats}


@router.get("/students/placement-tracking")
async def placement_tracking(
    status: Optional[str] = Query(None, pattern="^(applied|selected|all)$"),
    company: Optional[str] = None,
    position: Optional[str] = None,
    admin: dict = Depends(require_admin)
):
    """Per-student application counts and cohort placement statistics."""
    result = get_placement_service().placement_tracking(
        CohortFilters(status=status, company=company, position=position)
    )
    return {
        "success": True,
        "students": [serialize_doc(row) for row in result["students"]],
        "stats": result["stats"],
        "message": f"Found {result['stats']['total_students']} students",
    }


@router.get("/students/{student_id}")
async def get_student(student_id: str, admin: dict = Depends(require_admin)):
    doc = get_student_service().get(student_id)
    summary = get_placement_service().summarize_applications(student_id)
    return {"success": True, "student": serialize_doc(public_student(doc)), "applications": summary}


@router.patch("/students/{student_id}/placements")
async def update_placements(student_id: str, data: PlacementUpdate, admin: dict = Depends(require_admin)):
    """
    Record placement outcomes. These are independent of application statuses:
    selecting a student on an application does not place them.
    """
    service = get_placement_service()
    payload = data.placement_data.model_dump(exclude_none=True) if data.placement_data else {}

    if data.action == PlacementAction.add_final_placement:
        doc = service.record_final_placement(student_id, payload)
        message = "Final placement added successfully"
    elif data.action == PlacementAction.remove_final_placement:
        doc = service.remove_final_placement(student_id)
        message = "Final placement removed successfully"
    elif data.action == PlacementAction.add_internship_completion:
        doc = service.record_completed_internship(student_id, payload)
        message = "Internship completion added successfully"
    else:
        raise ValidationError("Invalid action specified")

    return {"success": True, "message": message, "student": serialize_doc(doc)}


@router.patch("/students/{student_id}/placement-availability")
async def override_placement_availability(
    student_id: str,
    data: PlacementAvailabilityUpdate,
    admin: dict = Depends(require_admin)
):
    """Set a student's availability on their behalf; the profile check is skipped."""
    result = get_student_service().set_placement_availability(
        student_id, data.available_for_placement, require_complete_profile=False
    )
    state = "marked student as available" if data.available_for_placement else "removed student from availability"
    return {"success": True, "message": f"Successfully {state} for placement season.", **result}


@router.patch("/students/{student_id}/toggle-spc")
async def toggle_spc(student_id: str, admin: dict = Depends(require_admin)):
    is_spc = get_student_service().toggle_spc(student_id)
    state = "granted" if is_spc else "revoked"
    return {"success": True, "message": f"SPC rights {state}", "is_spc": is_spc}


# ============================================================
# RECRUITERS
# ============================================================

@router.get("/recruiters")
async def list_recruiters(admin: dict = Depends(require_admin)):
    """Recruiters with how many job and internship posts each has submitted."""
    recruiters = get_recruiter_service().list_with_post_counts()
    return {"success": True, "recruiters": serialize_docs(recruiters), "total": len(recruiters)}


@router.get("/recruiters/{recruiter_id}/posts")
async def get_recruiter_posts(recruiter_id: str, admin: dict = Depends(require_admin)):
    result = get_recruiter_service().get_with_posts(recruiter_id)
    return {
        "success": True,
        "recruiter": serialize_doc(result["recruiter"]),
        "posts": serialize_docs(result["posts"]),
        "stats": result["stats"],
    }
