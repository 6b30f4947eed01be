"""
File Routes

GET /files/resume/{filename} - Serve a stored resume

Students may only fetch their own resume; admins, SPCs and recruiters may
fetch any resume that belongs to a student.
"""

import os

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from placement_cell.core.auth import get_current_user
from placement_cell.core.exceptions import AuthorizationError, NotFoundError
from placement_cell.db.mongodb import COLLECTIONS, get_collection
from placement_cell.utils.file_upload import content_type_for, resume_path

router = APIRouter(prefix="/files", tags=["Files"])


@router.get("/resume/{filename}")
async def get_resume(filename: str, user: dict = Depends(get_current_user)):
    path = resume_path(filename)

    owner = get_collection(COLLECTIONS["students"]).find_one(
        {"resume.file_name": filename}, {"resume": 1}
    )
    if owner is None:
        raise NotFoundError("File not found")

    if user["role"] == "student" and not user["is_spc"] and str(owner["_id"]) != user["user_id"]:
        raise AuthorizationError("Access denied")

    if not os.path.isfile(path):
        raise NotFoundError("File not found on server")

    return FileResponse(
        path,
        media_type=content_type_for(filename),
        filename=(owner.get("resume") or {}).get("original_name") or filename,
        headers={"Cache-Control": "private, max-age=3600"},
    )
