"""
Student Routes

GET /students/me - Get own profile
PUT /students/me - Update profile
GET /students/me/placement-availability - Get availability flag
PATCH /students/me/placement-availability - Set availability flag
POST /students/me/resume - Upload resume (PDF/DOC/DOCX)
GET /students/me/applications - Get my applications
GET /students/me/applications/summary - Counts per status and recent applications
POST /students/me/applications/{application_id}/withdraw - Withdraw an application
"""

from typing import Optional

from fastapi import APIRouter, Depends, UploadFile, File

from placement_cell.core.auth import actor_from_user, get_current_student
from placement_cell.core.exceptions import NotFoundError
from placement_cell.services.application_service import get_application_service
from placement_cell.services.mongo_service import serialize_doc
from placement_cell.services.placement_service import get_placement_service
from placement_cell.services.student_service import get_student_service, public_student
from placement_cell.utils.file_upload import save_resume
from placement_cell.schemas.schemas import (
    StudentUpdate, PlacementAvailabilityUpdate, WithdrawRequest
)

router = APIRouter(prefix="/students/me", tags=["Students"])


@router.get("")
async def get_profile(student: dict = Depends(get_current_student)):
    """Get current student's profile."""
    doc = get_student_service().get(student["student_id"])
    return {"success": True, "student": serialize_doc(public_student(doc))}


@router.put("")
async def update_profile(data: StudentUpdate, student: dict = Depends(get_current_student)):
    """Update student profile. Only provided fields are updated."""
    doc = get_student_service().update_profile(student["student_id"], data.model_dump())
    return {
        "success": True,
        "message": "Profile updated successfully",
        "student": serialize_doc(public_student(doc)),
    }


@router.get("/placement-availability")
async def get_placement_availability(student: dict = Depends(get_current_student)):
    doc = get_student_service().get(student["student_id"])
    return {
        "success": True,
        "available_for_placement": bool(doc.get("available_for_placement", False)),
        "placement_availability_updated_at": doc.get("placement_availability_updated_at"),
        "profile_completed": bool(doc.get("profile_completed", False)),
    }


@router.patch("/placement-availability")
async def set_placement_availability(
    data: PlacementAvailabilityUpdate,
    student: dict = Depends(get_current_student)
):
    """Mark yourself available (or not) for the placement season. Requires a complete profile."""
    result = get_student_service().set_placement_availability(
        student["student_id"], data.available_for_placement
    )
    state = "available" if data.available_for_placement else "unavailable"
    return {"success": True, "message": f"You are now marked {state} for placement", **result}


@router.post("/resume")
async def upload_resume(
    file: UploadFile = File(..., description="Resume file (PDF, DOC or DOCX)"),
    student: dict = Depends(get_current_student)
):
    """
    Upload resume.

    Supported formats: PDF, DOC, DOCX (max 5MB)
    """
    students = get_student_service()
    doc = students.get(student["student_id"])
    resume, _ = await save_resume(file, doc.get("student_id") or student["student_id"])
    students.set_resume(student["student_id"], resume)
    return {"success": True, "message": "Resume uploaded successfully", "resume": resume}


@router.get("/applications")
async def get_my_applications(posting_type: Optional[str] = None, student: dict = Depends(get_current_student)):
    """Get all applications for current student, most recent first."""
    applications = get_application_service().list_for_student(student["student_id"], posting_type)
    return {"success": True, "applications": applications}


@router.get("/applications/summary")
async def get_my_application_summary(student: dict = Depends(get_current_student)):
    summary = get_placement_service().summarize_applications(student["student_id"])
    return {"success": True, **summary}


@router.post("/applications/{application_id}/withdraw")
async def withdraw_application(
    application_id: str,
    data: Optional[WithdrawRequest] = None,
    student: dict = Depends(get_current_student)
):
    """Withdraw one of your own applications while it is still open."""
    service = get_application_service()
    application = service.get(application_id)
    if application.student_id != student["student_id"]:
        # Someone else's application is reported as missing
        raise NotFoundError("Application not found.")

    updated = service.withdraw(application_id, actor_from_user(student), data.notes if data else None)
    return {"success": True, "message": "Application withdrawn", "application": updated}
