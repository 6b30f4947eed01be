"""
Application Service - the application lifecycle.

STATE MACHINE:
    Applied -> Reviewed -> Interview Scheduled -> Selected | Rejected
    Withdrawn is reachable from any non-terminal state.

From a non-terminal state an admin may move an application to any status,
including back out of Withdrawn. Selected and Rejected are terminal: only a
same-status update (e.g. adding a note) is accepted there.

GUARANTEES:
- One application per (student, posting): enforced by a unique index, so a
  duplicate insert fails atomically with ConflictError
- Status history is append-only; the first entry is always "Applied"
- Every status change is a single conditional update keyed on the
  application's version, so two concurrent updates cannot both win
- Reaching "Selected" never creates a placement record; that is a separate
  operator action (see placement_service)
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from placement_cell.core.exceptions import (
    ConflictError, InvalidTransitionError, NotFoundError, ValidationError
)
from placement_cell.db.mongodb import COLLECTIONS, get_collection
from placement_cell.models.application import (
    Actor, ActorRole, Application, ApplicationStatus, Attachment
)
from placement_cell.models.eligibility import EligibilityVerdict
from placement_cell.models.posting import PostingRequirement, PostingType, posting_headline
from placement_cell.models.student import StudentProfile
from placement_cell.services.eligibility import evaluate
from placement_cell.services.mongo_service import to_object_id
from placement_cell.services.posting_service import (
    PostingService, get_posting_services, parse_posting_type
)
from placement_cell.services.student_service import StudentService

logger = logging.getLogger(__name__)

STUDENT_ACTOR_NAME = "Student"


def parse_status(value) -> ApplicationStatus:
    try:
        return ApplicationStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in ApplicationStatus)
        raise ValidationError(f"Invalid status value '{value}'. Must be one of: {valid}")


def history_entry(status: ApplicationStatus, when: datetime, updated_by: str,
                  role: Optional[ActorRole], notes: Optional[str]) -> dict:
    return {
        "status": status.value,
        "updated_at": when,
        "updated_by": updated_by,
        "actor_role": role.value if role else None,
        "notes": notes.strip() if notes else None,
    }


class ApplicationService:
    """
    Owns the ``applications`` collection.
    """

    def __init__(
        self,
        collection: Collection = None,
        students: StudentService = None,
        postings: Dict[PostingType, PostingService] = None,
    ):
        if collection is None:
            collection = get_collection(COLLECTIONS["applications"])
        self.collection = collection
        self.students = students if students is not None else StudentService()
        self.postings = postings if postings is not None else get_posting_services()

    # ============================================================
    # ELIGIBILITY
    # ============================================================

    def check_eligibility(self, student_id: str, posting_type, posting_id: str) -> EligibilityVerdict:
        """Recompute the verdict for a student against a stored posting."""
        posting_type = parse_posting_type(posting_type)
        profile = self.students.get_profile(student_id)
        _, requirement = self.postings[posting_type].get_with_requirement(posting_id)
        return evaluate(profile, requirement)

    # ============================================================
    # CREATE
    # ============================================================

    def create_application(
        self,
        student_id: str,
        posting_type,
        posting_id: str,
        eligibility_acknowledged: bool,
        cover_letter: str = None,
        additional_info: str = None,
        attachments: List[Attachment] = None,
        submission_ip: str = None,
        user_agent: str = None,
    ) -> Application:
        """
        Submit a student's application to a posting.

        The eligibility verdict is informational: a student who fails a check
        may still apply as long as they acknowledged the requirements.

        Raises:
            ValidationError: eligibility not acknowledged
            NotFoundError: unknown student or posting
            ConflictError: the student already applied to this posting
        """
        if eligibility_acknowledged is not True:
            raise ValidationError("You must acknowledge the eligibility requirements before applying.")

        posting_type = parse_posting_type(posting_type)
        student_doc = self.students.get(student_id)
        posting_doc = self.postings[posting_type].get(posting_id)

        verdict = evaluate(
            StudentProfile.from_document(student_doc),
            PostingRequirement.from_document(posting_doc, posting_type),
        )
        logger.info(
            "Student %s applying to %s %s: eligible=%s failed=[%s]",
            student_doc.get("student_id"), posting_type.value, posting_doc["_id"],
            verdict.eligible, ", ".join(r.criterion.value for r in verdict.failures),
        )

        now = datetime.utcnow()
        company_name, position = posting_headline(posting_doc, posting_type)
        doc = {
            "student_id": str(student_doc["_id"]),
            "posting_id": str(posting_doc["_id"]),
            "posting_type": posting_type.value,
            "company_name": company_name,
            "position": position,
            "applied_at": now,
            "current_status": ApplicationStatus.applied.value,
            "status_history": [
                history_entry(ApplicationStatus.applied, now, STUDENT_ACTOR_NAME,
                              ActorRole.student, "Application submitted")
            ],
            "cover_letter": cover_letter.strip() if cover_letter else "",
            "additional_info": additional_info.strip() if additional_info else "",
            "eligibility_acknowledged": True,
            "attachments": [
                {**a.model_dump(), "uploaded_at": a.uploaded_at or now} for a in (attachments or [])
            ],
            "submission_ip": submission_ip or "unknown",
            "user_agent": user_agent or "unknown",
            "version": 1,
            "updated_at": now,
        }

        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError(f"You have already applied for this {posting_type.value}.")

        doc["_id"] = result.inserted_id
        logger.info(
            "Application %s created: student %s -> %s %s",
            result.inserted_id, doc["student_id"], posting_type.value, doc["posting_id"],
        )
        return Application.from_document(doc)

    # ============================================================
    # READ
    # ============================================================

    def get(self, application_id: str) -> Application:
        doc = self.collection.find_one({"_id": to_object_id(application_id, "Application")})
        if doc is None:
            raise NotFoundError("Application not found.")
        return Application.from_document(doc)

    def list_for_student(self, student_id: str, posting_type=None) -> List[Application]:
        """Applications of one student, most recent first."""
        query = {"student_id": str(student_id)}
        if posting_type is not None:
            query["posting_type"] = parse_posting_type(posting_type).value
        cursor = self.collection.find(query).sort("applied_at", DESCENDING)
        return [Application.from_document(doc) for doc in cursor]

    def list_for_posting(self, posting_id: str, status=None) -> List[Application]:
        query = {"posting_id": str(posting_id)}
        if status is not None:
            query["current_status"] = parse_status(status).value
        cursor = self.collection.find(query).sort("applied_at", DESCENDING)
        return [Application.from_document(doc) for doc in cursor]

    def list_all(self) -> List[Application]:
        return [Application.from_document(doc) for doc in self.collection.find()]

    # ============================================================
    # TRANSITIONS
    # ============================================================

    def transition(
        self,
        application_id: str,
        new_status,
        actor: Actor,
        note: str = None,
        expected_version: int = None,
    ) -> Application:
        """
        Move an application to a new status and append it to the history.

        Args:
            application_id: Application to update
            new_status: Target status (exact string or ApplicationStatus)
            actor: Who is making the change
            note: Optional free-text note stored with the history entry
            expected_version: Version the caller last saw; a mismatch is a conflict

        Raises:
            ValidationError: unknown status
            NotFoundError: unknown application
            InvalidTransitionError: application already terminal
            ConflictError: concurrent modification
        """
        status = parse_status(new_status)
        application = self.get(application_id)

        if expected_version is not None and expected_version != application.version:
            raise ConflictError("Application was modified by someone else. Reload and try again.")

        if application.is_terminal and status != application.current_status:
            raise InvalidTransitionError(
                f"Application is already '{application.current_status.value}' "
                f"and cannot move to '{status.value}'."
            )

        now = datetime.utcnow()
        updated = self.collection.find_one_and_update(
            {
                "_id": to_object_id(application.id),
                "version": application.version,
                "current_status": application.current_status.value,
            },
            {
                "$set": {"current_status": status.value, "updated_at": now},
                "$push": {"status_history": history_entry(status, now, actor.name, actor.role, note)},
                "$inc": {"version": 1},
            },
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            raise ConflictError("Application was modified by someone else. Reload and try again.")

        logger.info(
            "Application %s: %s -> %s by %s (%s)",
            application.id, application.current_status.value, status.value,
            actor.name, actor.role.value,
        )
        return Application.from_document(updated)

    def withdraw(self, application_id: str, actor: Actor, note: str = None) -> Application:
        """Withdraw an application that is still open."""
        application = self.get(application_id)
        if application.is_terminal or application.current_status == ApplicationStatus.withdrawn:
            raise InvalidTransitionError(
                f"Application is already '{application.current_status.value}' and cannot be withdrawn."
            )
        return self.transition(
            application_id, ApplicationStatus.withdrawn, actor, note,
            expected_version=application.version,
        )


def get_application_service() -> ApplicationService:
    return ApplicationService()
