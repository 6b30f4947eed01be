"""
SPC Routes - actions open to Student Placement Coordinators and admins.

GET /spc/students - List students (optional search)
GET /spc/postings/{posting_type} - All postings, announced or not
POST /spc/students/{student_id}/red-flags - Add red flag
PUT /spc/students/{student_id}/red-flags/{flag_id} - Edit red flag reason
DELETE /spc/students/{student_id}/red-flags/{flag_id} - Remove red flag
PATCH /spc/postings/{posting_type}/{posting_id}/toggle-announcement - Announce / hide a posting
"""

from typing import Optional

from fastapi import APIRouter, Depends

from placement_cell.core.auth import actor_from_user, require_spc_or_admin
from placement_cell.services.mongo_service import serialize_doc, serialize_docs
from placement_cell.services.posting_service import PostingService, parse_posting_type
from placement_cell.services.red_flag_service import get_red_flag_service
from placement_cell.services.student_service import get_student_service
from placement_cell.schemas.schemas import AnnouncementUpdate, MessageResponse, RedFlagRequest

router = APIRouter(prefix="/spc", tags=["SPC"])


@router.get("/students")
async def list_students(search: Optional[str] = None, user: dict = Depends(require_spc_or_admin)):
    students = get_student_service().list_students(search)
    return {"success": True, "students": serialize_docs(students), "total": len(students)}


@router.get("/postings/{posting_type}")
async def list_postings(posting_type: str, user: dict = Depends(require_spc_or_admin)):
    """Every posting of one type, including ones not yet announced."""
    posts = PostingService(parse_posting_type(posting_type)).list_postings()
    return {"success": True, "posts": serialize_docs(posts), "total": len(posts)}


@router.post("/students/{student_id}/red-flags", status_code=201)
async def add_red_flag(student_id: str, data: RedFlagRequest, user: dict = Depends(require_spc_or_admin)):
    flag = get_red_flag_service().add(student_id, data.reason, actor_from_user(user))
    return {"success": True, "message": "Red flag added successfully", "red_flag": serialize_doc(flag)}


@router.put("/students/{student_id}/red-flags/{flag_id}")
async def update_red_flag(
    student_id: str,
    flag_id: str,
    data: RedFlagRequest,
    user: dict = Depends(require_spc_or_admin)
):
    flag = get_red_flag_service().update(student_id, flag_id, data.reason)
    return {"success": True, "message": "Red flag updated successfully", "red_flag": serialize_doc(flag)}


@router.delete("/students/{student_id}/red-flags/{flag_id}", response_model=MessageResponse)
async def delete_red_flag(student_id: str, flag_id: str, user: dict = Depends(require_spc_or_admin)):
    get_red_flag_service().delete(student_id, flag_id)
    return MessageResponse(message="Red flag removed successfully")


@router.patch("/postings/{posting_type}/{posting_id}/toggle-announcement")
async def toggle_announcement(
    posting_type: str,
    posting_id: str,
    data: Optional[AnnouncementUpdate] = None,
    user: dict = Depends(require_spc_or_admin)
):
    service = PostingService(parse_posting_type(posting_type))
    announced = service.set_announcement(posting_id, data.is_announced if data else None)
    state = "announced" if announced else "unannounced"
    return {"success": True, "message": f"{service.label} {state} successfully", "is_announced": announced}
