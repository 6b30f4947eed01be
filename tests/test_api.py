"""End-to-end API flows through FastAPI's TestClient."""

from datetime import datetime

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from placement_cell.core.auth import hash_password, token_for
from placement_cell.db.mongodb import COLLECTIONS
from placement_cell.main import app

from conftest import insert_posting, insert_student


@pytest.fixture
def client(db):
    return TestClient(app)


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(db):
    admin = {"email": "officer@college.edu", "name": "Placement Officer",
             "password_hash": hash_password("officer-pass"), "is_active": True}
    admin["_id"] = db[COLLECTIONS["admins"]].insert_one(admin).inserted_id
    return auth(token_for(admin, "admin"))


@pytest.fixture
def recruiter_headers(db):
    recruiter = {"email": "hr@acme.com", "name": "Acme HR", "is_active": True}
    recruiter["_id"] = db[COLLECTIONS["recruiters"]].insert_one(recruiter).inserted_id
    return auth(token_for(recruiter, "recruiter"))


@pytest.fixture
def student(db):
    return insert_student(db)


@pytest.fixture
def student_headers(student):
    return auth(token_for(student, "student"))


JOB_POST = {
    "organization_name": "Acme Corp",
    "organization_type": "Private sector",
    "job_designation": "Software Engineer",
    "job_description": "Build the placement portal",
    "required_programs": ["B.Tech"],
    "required_branches": {"btech": ["Computer Science & Engineering"]},
    "cgpa_requirements": "Minimum 7.0 CGPA",
    "contact_person": "Priya",
    "email_address": "hr@acme.com",
}


# ============================================================
# Auth
# ============================================================

def test_register_login_and_me(client):
    response = client.post("/api/auth/register", json={
        "student_id": "21CS050", "name": "Kiran", "email": "kiran@college.edu",
        "password": "secret-pass", "branch": "CSE", "year": "3rd",
    })
    assert response.status_code == 201

    response = client.post("/api/auth/login", json={"email": "kiran@college.edu", "password": "secret-pass"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/api/auth/me", headers=auth(token)).json()
    assert me["role"] == "student"
    assert me["email"] == "kiran@college.edu"


def test_login_with_wrong_password(client):
    client.post("/api/auth/register", json={
        "student_id": "21CS050", "name": "Kiran", "email": "kiran@college.edu", "password": "secret-pass",
    })
    response = client.post("/api/auth/login", json={"email": "kiran@college.edu", "password": "wrong-pass"})
    assert response.status_code == 401


def test_protected_routes_need_token(client):
    assert client.get("/api/students/me").status_code in (401, 403)
    response = client.get("/api/students/me", headers=auth("not-a-token"))
    assert response.status_code == 401


def test_student_cannot_use_admin_routes(client, student_headers):
    assert client.get("/api/admin/students", headers=student_headers).status_code == 403


# ============================================================
# Postings and applications
# ============================================================

def test_posting_to_selection_flow(client, db, student, student_headers, recruiter_headers, admin_headers):
    created = client.post("/api/postings/job", json=JOB_POST, headers=recruiter_headers)
    assert created.status_code == 201
    post_id = created.json()["post"]["_id"]

    # Not visible until announced
    assert client.get("/api/postings/announced/job", headers=student_headers).json()["posts"] == []
    toggled = client.patch(f"/api/admin/postings/job/{post_id}/toggle-announcement", headers=admin_headers)
    assert toggled.json()["is_announced"] is True

    feed = client.get("/api/postings/announced/job", headers=student_headers).json()["posts"]
    assert len(feed) == 1
    assert feed[0]["eligibility"]["eligible"] is True
    assert feed[0]["has_applied"] is False

    applied = client.post(f"/api/postings/job/{post_id}/apply", headers=student_headers,
                          json={"eligibility_acknowledged": True, "cover_letter": "Keen to join"})
    assert applied.status_code == 201
    application = applied.json()["application"]
    assert application["current_status"] == "Applied"

    again = client.post(f"/api/postings/job/{post_id}/apply", headers=student_headers,
                        json={"eligibility_acknowledged": True})
    assert again.status_code == 409
    assert again.json()["kind"] == "conflict"

    listed = client.get(f"/api/admin/postings/job/{post_id}/applications", headers=admin_headers).json()
    assert listed["total"] == 1

    selected = client.patch(f"/api/admin/applications/{application['id']}/status", headers=admin_headers,
                            json={"status": "Selected", "notes": "Offer made", "expected_version": 1})
    assert selected.status_code == 200
    assert selected.json()["application"]["version"] == 2

    blocked = client.patch(f"/api/admin/applications/{application['id']}/status", headers=admin_headers,
                           json={"status": "Rejected"})
    assert blocked.status_code == 409
    assert blocked.json()["kind"] == "invalid_transition"

    summary = client.get("/api/students/me/applications/summary", headers=student_headers).json()
    assert summary["by_status"]["Selected"] == 1

    stored = db[COLLECTIONS["students"]].find_one({"_id": student["_id"]})
    assert stored["placements"]["final_job"] is None


def test_apply_without_acknowledgement(client, db, student_headers):
    job = insert_posting(db, "job")
    response = client.post(f"/api/postings/job/{job['_id']}/apply", headers=student_headers, json={})
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "kind": "validation_error",
        "detail": "You must acknowledge the eligibility requirements before applying.",
    }


def test_apply_to_unannounced_posting_is_not_found(client, db, student_headers):
    job = insert_posting(db, "job", is_announced=False)
    response = client.post(f"/api/postings/job/{job['_id']}/apply", headers=student_headers,
                           json={"eligibility_acknowledged": True})
    assert response.status_code == 404


def test_eligibility_endpoint_reports_failures(client, db, student_headers):
    job = insert_posting(db, "job", cgpa_requirements="Minimum 8.5")
    verdict = client.get(f"/api/postings/job/{job['_id']}/eligibility", headers=student_headers).json()
    assert verdict["eligibility"]["eligible"] is False
    statuses = {r["criterion"]: r["status"] for r in verdict["eligibility"]["results"]}
    assert statuses["CGPA"] == "fail"
    assert statuses["Program/Branch"] == "pass"


def test_invalid_status_value(client, db, student, admin_headers):
    job = insert_posting(db, "job")
    app_id = db[COLLECTIONS["applications"]].insert_one({
        "student_id": str(student["_id"]), "posting_id": str(job["_id"]), "posting_type": "job",
        "applied_at": datetime.utcnow(), "current_status": "Applied",
        "status_history": [{"status": "Applied", "updated_at": datetime.utcnow(), "updated_by": "Student"}],
        "eligibility_acknowledged": True, "version": 1,
    }).inserted_id
    response = client.patch(f"/api/admin/applications/{app_id}/status", headers=admin_headers,
                            json={"status": "Offered"})
    assert response.status_code == 400


def test_student_withdraws_own_application(client, db, student, student_headers):
    job = insert_posting(db, "job")
    applied = client.post(f"/api/postings/job/{job['_id']}/apply", headers=student_headers,
                          json={"eligibility_acknowledged": True}).json()["application"]

    other = insert_student(db, student_id="21CS002", email="b@college.edu")
    response = client.post(f"/api/students/me/applications/{applied['id']}/withdraw",
                           headers=auth(token_for(other, "student")))
    assert response.status_code == 404

    response = client.post(f"/api/students/me/applications/{applied['id']}/withdraw",
                           headers=student_headers, json={"notes": "Changed my mind"})
    assert response.status_code == 200
    assert response.json()["application"]["current_status"] == "Withdrawn"


# ============================================================
# Students, placements, red flags
# ============================================================

def test_availability_toggle(client, db):
    student = insert_student(db, profile_completed=False, available_for_placement=False)
    headers = auth(token_for(student, "student"))
    response = client.patch("/api/students/me/placement-availability", headers=headers,
                            json={"available_for_placement": True})
    assert response.status_code == 400

    client.put("/api/students/me", headers=headers, json={"branch": "CSE", "year": "4"})
    response = client.patch("/api/students/me/placement-availability", headers=headers,
                            json={"available_for_placement": True})
    assert response.status_code == 200
    assert response.json()["available_for_placement"] is True


def test_profile_update_rejects_unknown_fields(client, student_headers):
    response = client.put("/api/students/me", headers=student_headers, json={"cgpa_overall": 9})
    assert response.status_code == 422


def test_placement_tracking_and_records(client, db, student, admin_headers):
    insert_student(db, student_id="21CS002", email="b@college.edu", name="Bhavna")

    response = client.patch(f"/api/admin/students/{student['_id']}/placements", headers=admin_headers, json={
        "action": "add_final_placement",
        "placement_data": {"company_name": "Acme Corp", "position": "Engineer", "ctc": 12},
    })
    assert response.status_code == 200

    missing = client.patch(f"/api/admin/students/{student['_id']}/placements", headers=admin_headers, json={
        "action": "add_final_placement", "placement_data": {"company_name": "Acme Corp"},
    })
    assert missing.status_code == 400

    tracking = client.get("/api/admin/students/placement-tracking", headers=admin_headers).json()
    assert tracking["stats"]["total_students"] == 2
    assert tracking["stats"]["placement_rate"] == 50

    response = client.patch(f"/api/admin/students/{student['_id']}/placements", headers=admin_headers,
                            json={"action": "remove_final_placement"})
    assert response.status_code == 200
    tracking = client.get("/api/admin/students/placement-tracking", headers=admin_headers).json()
    assert tracking["stats"]["placement_rate"] == 0


def test_placement_tracking_rejects_unknown_status(client, admin_headers):
    response = client.get("/api/admin/students/placement-tracking?status=placed", headers=admin_headers)
    assert response.status_code == 422


def test_spc_manages_red_flags(client, db, student, admin_headers):
    spc = insert_student(db, student_id="21CS099", email="spc@college.edu", name="Sana", is_spc=True)
    spc_headers = auth(token_for(spc, "student"))

    added = client.post(f"/api/spc/students/{student['_id']}/red-flags", headers=spc_headers,
                        json={"reason": "Skipped pre-placement talk"})
    assert added.status_code == 201
    flag = added.json()["red_flag"]
    assert flag["assigned_by"] == "Sana"

    updated = client.put(f"/api/spc/students/{student['_id']}/red-flags/{flag['_id']}", headers=admin_headers,
                         json={"reason": "Skipped two talks"})
    assert updated.json()["red_flag"]["reason"] == "Skipped two talks"

    deleted = client.delete(f"/api/spc/students/{student['_id']}/red-flags/{flag['_id']}", headers=spc_headers)
    assert deleted.status_code == 200

    missing = client.delete(f"/api/spc/students/{student['_id']}/red-flags/{ObjectId()}", headers=spc_headers)
    assert missing.status_code == 404
    assert missing.json()["kind"] == "not_found"


def test_regular_student_cannot_add_red_flags(client, student, student_headers):
    response = client.post(f"/api/spc/students/{student['_id']}/red-flags", headers=student_headers,
                           json={"reason": "x"})
    assert response.status_code == 403


def test_available_students_listing(client, db, admin_headers):
    insert_student(db)
    insert_student(db, student_id="21CS002", email="b@college.edu", available_for_placement=False)
    body = client.get("/api/admin/students/available", headers=admin_headers).json()
    assert body["stats"]["total"] == 1
    assert "password_hash" not in body["students"][0]


def test_health(client, monkeypatch):
    monkeypatch.setattr("placement_cell.main.test_mongo_connection", lambda: True)
    assert client.get("/health").json() == {"status": "healthy", "mongodb": "connected"}


# ============================================================
# Admin posting edits
# ============================================================

def test_posting_update_rejects_unknown_and_mistyped_fields(client, db, admin_headers):
    job = insert_posting(db, "job")
    url = f"/api/admin/postings/job/{job['_id']}"

    assert client.put(url, headers=admin_headers, json={"bogus_field": 1}).status_code == 422
    assert client.put(url, headers=admin_headers, json={"cgpa_requirements": 7.5}).status_code == 422
    assert client.put(url, headers=admin_headers,
                      json={"required_branches": {"btech": "Computer Science & Engineering"}}).status_code == 422
    assert client.put(url, headers=admin_headers, json={"internship_profile": "Intern"}).status_code == 422
    assert client.put(url, headers=admin_headers, json={}).status_code == 400

    stored = db[COLLECTIONS["job_posts"]].find_one({"_id": job["_id"]})
    assert "bogus_field" not in stored
    assert stored["cgpa_requirements"] == "Minimum 7.0 CGPA"


def test_posting_update_changes_eligibility(client, db, admin_headers, student_headers):
    job = insert_posting(db, "job")
    response = client.put(f"/api/admin/postings/job/{job['_id']}", headers=admin_headers,
                          json={"cgpa_requirements": "Minimum 8.5 CGPA", "is_announced": False})
    assert response.status_code == 422

    response = client.put(f"/api/admin/postings/job/{job['_id']}", headers=admin_headers,
                          json={"cgpa_requirements": "Minimum 8.5 CGPA", "organization_type": "Start-up"})
    assert response.status_code == 200
    post = response.json()["post"]
    assert post["organization_type"] == "Start-up"
    assert post["is_announced"] is True

    verdict = client.get(f"/api/postings/job/{job['_id']}/eligibility", headers=student_headers).json()
    statuses = {r["criterion"]: r["status"] for r in verdict["eligibility"]["results"]}
    assert statuses["CGPA"] == "fail"


def test_internship_update_validates_years(client, db, admin_headers):
    internship = insert_posting(db, "internship")
    url = f"/api/admin/postings/internship/{internship['_id']}"
    assert client.put(url, headers=admin_headers,
                      json={"student_passing_year_for_internship": ["6th year"]}).status_code == 422
    response = client.put(url, headers=admin_headers,
                          json={"student_passing_year_for_internship": ["4th year"]})
    assert response.json()["post"]["student_passing_year_for_internship"] == ["4th year"]


def test_badly_typed_stored_posting_is_still_served(client, db, student_headers):
    job = insert_posting(db, "job", cgpa_requirements=7.5, required_programs="B.Tech",
                         required_branches={"btech": "Computer Science & Engineering"})

    feed = client.get("/api/postings/announced/job", headers=student_headers)
    assert feed.status_code == 200
    statuses = {r["criterion"]: r["status"] for r in feed.json()["posts"][0]["eligibility"]["results"]}
    assert statuses["CGPA"] == "fail"

    applied = client.post(f"/api/postings/job/{job['_id']}/apply", headers=student_headers,
                          json={"eligibility_acknowledged": True})
    assert applied.status_code == 201


# ============================================================
# Recruiters, availability override, SPC listings
# ============================================================

def test_recruiter_roster_counts_posts(client, db, admin_headers, recruiter_headers):
    client.post("/api/postings/job", json=JOB_POST, headers=recruiter_headers)
    client.post("/api/postings/job", json={**JOB_POST, "job_designation": "Data Engineer"},
                headers=recruiter_headers)
    insert_posting(db, "internship")

    roster = client.get("/api/admin/recruiters", headers=admin_headers).json()
    assert roster["total"] == 1
    entry = roster["recruiters"][0]
    assert entry["email"] == "hr@acme.com"
    assert entry["job_post_count"] == 2
    assert entry["internship_post_count"] == 0
    assert "password_hash" not in entry

    detail = client.get(f"/api/admin/recruiters/{entry['_id']}/posts", headers=admin_headers).json()
    assert detail["stats"] == {"total_posts": 2, "job_posts": 2, "internship_posts": 0}
    assert {p["posting_type"] for p in detail["posts"]} == {"job"}

    missing = client.get(f"/api/admin/recruiters/{ObjectId()}/posts", headers=admin_headers)
    assert missing.status_code == 404


def test_admin_overrides_availability(client, db, admin_headers):
    student = insert_student(db, profile_completed=False, available_for_placement=False)
    url = f"/api/admin/students/{student['_id']}/placement-availability"

    assert client.patch(url, headers=admin_headers, json={"available_for_placement": "yes"}).status_code == 422

    response = client.patch(url, headers=admin_headers, json={"available_for_placement": True})
    assert response.status_code == 200
    assert response.json()["available_for_placement"] is True
    stored = db[COLLECTIONS["students"]].find_one({"_id": student["_id"]})
    assert stored["available_for_placement"] is True
    assert stored["placement_availability_updated_at"] is not None


def test_spc_lists_students_and_unannounced_postings(client, db, student, student_headers):
    spc = insert_student(db, student_id="21CS099", email="spc@college.edu", name="Sana", is_spc=True)
    spc_headers = auth(token_for(spc, "student"))
    insert_posting(db, "job", is_announced=False)

    students = client.get("/api/spc/students", headers=spc_headers).json()
    assert students["total"] == 2
    assert all("password_hash" not in s for s in students["students"])

    posts = client.get("/api/spc/postings/job", headers=spc_headers).json()
    assert posts["total"] == 1
    assert posts["posts"][0]["is_announced"] is False

    assert client.get("/api/spc/students", headers=student_headers).status_code == 403
