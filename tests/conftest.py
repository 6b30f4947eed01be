"""Shared fixtures: an in-memory MongoDB and account helpers."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("MONGODB_DB", "placement_cell_test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime

import mongomock
import pytest
from bson import ObjectId

from placement_cell.db import mongodb
from placement_cell.db.mongodb import COLLECTIONS, init_mongo_indexes
from placement_cell.models.application import Actor, ActorRole
from placement_cell.models.posting import PostingType
from placement_cell.services.application_service import ApplicationService
from placement_cell.services.placement_service import PlacementService
from placement_cell.services.posting_service import PostingService
from placement_cell.services.red_flag_service import RedFlagService
from placement_cell.services.student_service import StudentService


@pytest.fixture
def db(monkeypatch):
    """A fresh mongomock database installed as the application database."""
    database = mongomock.MongoClient()["placement_cell_test"]
    monkeypatch.setattr(mongodb, "_db", database)
    init_mongo_indexes()
    return database


@pytest.fixture
def students(db):
    return StudentService(db[COLLECTIONS["students"]])


@pytest.fixture
def postings(db):
    return {
        PostingType.job: PostingService(PostingType.job, db[COLLECTIONS["job_posts"]]),
        PostingType.internship: PostingService(PostingType.internship, db[COLLECTIONS["internship_posts"]]),
    }


@pytest.fixture
def applications(db, students, postings):
    return ApplicationService(db[COLLECTIONS["applications"]], students, postings)


@pytest.fixture
def placements(db):
    return PlacementService(db[COLLECTIONS["students"]], db[COLLECTIONS["applications"]])


@pytest.fixture
def red_flags(db):
    return RedFlagService(db[COLLECTIONS["students"]])


@pytest.fixture
def admin_actor():
    return Actor(name="Placement Officer", role=ActorRole.admin, id=str(ObjectId()))


@pytest.fixture
def student_actor():
    return Actor(name="Student", role=ActorRole.student)


def insert_student(db, **overrides) -> dict:
    """Insert a complete, available final-year CSE student."""
    now = datetime.utcnow()
    doc = {
        "student_id": "21CS001",
        "name": "Asha Rao",
        "email": "asha@college.edu",
        "password_hash": None,
        "degree": "B.Tech",
        "branch": "Computer Science & Engineering",
        "year": "4",
        "cgpa": {"overall": 7.2, "active_backlogs": 0, "total_backlogs": 0},
        "profile_completed": True,
        "available_for_placement": True,
        "placement_availability_updated_at": now,
        "is_spc": False,
        "redflags": [],
        "resume": None,
        "placements": {"final_job": None, "internships_completed": []},
        "created_at": now,
        "updated_at": now,
    }
    doc.update(overrides)
    doc["_id"] = db[COLLECTIONS["students"]].insert_one(doc).inserted_id
    return doc


def insert_posting(db, posting_type: str = "job", **overrides) -> dict:
    now = datetime.utcnow()
    doc = {
        "organization_name": "Acme Corp",
        "organization_type": "Private sector",
        "contact_person": "Priya",
        "email_address": "hr@acme.com",
        "required_programs": ["B.Tech"],
        "required_branches": {
            "btech": ["Computer Science & Engineering"],
            "all_branches_applicable": False,
        },
        "cgpa_requirements": "Minimum 7.0 CGPA",
        "any_other_requirement": "",
        "posting_type": posting_type,
        "recruiter_id": None,
        "is_announced": True,
        "date_submitted": now,
        "created_at": now,
        "updated_at": now,
    }
    if posting_type == "job":
        doc.update(job_designation="Software Engineer", job_description="Build things")
    else:
        doc.update(internship_profile="SDE Intern", student_passing_year_for_internship=["3rd year"])
    doc.update(overrides)
    collection = COLLECTIONS["job_posts"] if posting_type == "job" else COLLECTIONS["internship_posts"]
    doc["_id"] = db[collection].insert_one(doc).inserted_id
    return doc
