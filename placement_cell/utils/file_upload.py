"""
File Upload Utility - Store student resumes on local disk.

Supported formats:
- PDF (.pdf)
- Word (.doc, .docx)

Max file size: settings.max_resume_size_mb (5MB by default)
"""

import os
import re
import time
from datetime import datetime
from typing import Tuple
from fastapi import UploadFile

from placement_cell.core.config import get_settings
from placement_cell.core.exceptions import NotFoundError, ValidationError

settings = get_settings()

CONTENT_TYPES = {
    '.pdf': 'application/pdf',
    '.doc': 'application/msword',
    '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
}
ALLOWED_EXTENSIONS = set(CONTENT_TYPES)

RESUME_URL_PREFIX = "/api/files/resume/"


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def max_resume_bytes() -> int:
    return settings.max_resume_size_mb * 1024 * 1024


def validate_resume(filename: str, content_type: str, size: int) -> str:
    """
    Check a resume upload before it is written.

    Returns:
        The lowercase extension

    Raises:
        ValidationError on a missing name, unsupported type or oversize file
    """
    if not filename:
        raise ValidationError("No file provided")

    ext = get_file_extension(filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"Unsupported file type '{ext}'. Allowed: PDF, DOC, DOCX")

    # Browsers sometimes send a generic type; only reject a conflicting one
    if content_type and content_type != 'application/octet-stream' and content_type not in CONTENT_TYPES.values():
        raise ValidationError(f"Unsupported content type '{content_type}'")

    if size == 0:
        raise ValidationError("Uploaded file is empty")
    if size > max_resume_bytes():
        raise ValidationError(f"File too large. Maximum size: {settings.max_resume_size_mb}MB")

    return ext


def generate_file_name(original_name: str, student_id: str) -> str:
    """resume_<student id>_<millis>.<ext>, with the student id made path-safe."""
    safe_id = re.sub(r'[^A-Za-z0-9_-]', '_', student_id or 'student')
    return f"resume_{safe_id}_{int(time.time() * 1000)}{get_file_extension(original_name)}"


def resume_path(file_name: str) -> str:
    """Absolute path of a stored resume; rejects names that escape the resume directory."""
    if not file_name or os.path.basename(file_name) != file_name or file_name.startswith('.'):
        raise NotFoundError("File not found")
    return os.path.join(os.path.abspath(settings.resume_dir), file_name)


def get_file_url(file_name: str) -> str:
    return RESUME_URL_PREFIX + file_name


async def save_resume(file: UploadFile, student_id: str) -> Tuple[dict, str]:
    """
    Validate and write an uploaded resume.

    Args:
        file: FastAPI UploadFile
        student_id: Institute student id used in the stored name

    Returns:
        Tuple of (resume record for the student document, path written)
    """
    content = await file.read()
    validate_resume(file.filename, file.content_type, len(content))

    file_name = generate_file_name(file.filename, student_id)
    path = resume_path(file_name)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as out:
        out.write(content)

    resume = {
        "file_name": file_name,
        "original_name": file.filename,
        "file_size": len(content),
        "url": get_file_url(file_name),
        "uploaded_at": datetime.utcnow(),
    }
    return resume, path


def content_type_for(file_name: str) -> str:
    return CONTENT_TYPES.get(get_file_extension(file_name), 'application/octet-stream')
