"""
Placement Cell Portal
Campus placement management: postings, eligibility, applications and placements.

Architecture:
- MongoDB: students, postings, applications, admin/recruiter accounts
- FastAPI: JSON API with JWT auth (student, SPC, admin, recruiter)
- Eligibility verdicts are computed on demand and never stored
"""

__version__ = "1.0.0"
