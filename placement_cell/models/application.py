"""
Application record and its status state machine vocabulary.

Applications are stored as their own documents referencing the student and
the posting by id, so each record carries a single ``version`` counter.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from placement_cell.models.posting import PostingType


class ApplicationStatus(str, Enum):
    # Exact strings are part of the reporting contract
    applied = "Applied"
    reviewed = "Reviewed"
    interview_scheduled = "Interview Scheduled"
    selected = "Selected"
    rejected = "Rejected"
    withdrawn = "Withdrawn"


# Decisions are final; a withdrawn application can still be picked up again
TERMINAL_STATUSES = frozenset({
    ApplicationStatus.selected,
    ApplicationStatus.rejected,
})


class ActorRole(str, Enum):
    student = "student"
    spc = "spc"
    admin = "admin"
    recruiter = "recruiter"


class Actor(BaseModel):
    """Who performed a status change."""
    name: str
    role: ActorRole
    id: Optional[str] = None


class StatusHistoryEntry(BaseModel):
    status: ApplicationStatus
    updated_at: datetime
    updated_by: str
    actor_role: Optional[ActorRole] = None
    notes: Optional[str] = None


class Attachment(BaseModel):
    file_name: str
    file_url: str
    file_type: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class Application(BaseModel):
    id: str
    student_id: str
    posting_id: str
    posting_type: PostingType
    company_name: str = ""
    position: str = ""
    applied_at: datetime
    current_status: ApplicationStatus
    status_history: List[StatusHistoryEntry] = []
    cover_letter: Optional[str] = None
    additional_info: Optional[str] = None
    eligibility_acknowledged: bool
    attachments: List[Attachment] = []
    submission_ip: Optional[str] = None
    user_agent: Optional[str] = None
    version: int = 1
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.current_status in TERMINAL_STATUSES

    @classmethod
    def from_document(cls, doc: dict) -> "Application":
        data = {k: v for k, v in doc.items() if k != "_id"}
        return cls(id=str(doc["_id"]), **data)
