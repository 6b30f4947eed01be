"""
Placement Cell Portal - Main Application

FastAPI backend with:
- MongoDB for students, postings, applications and accounts
- JWT authentication (student, SPC, admin, recruiter)
- On-demand eligibility verdicts for every posting

Run: uvicorn placement_cell.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from placement_cell.api.routes import api_router
from placement_cell.db.mongodb import init_mongo_indexes, test_mongo_connection
from placement_cell.core.config import get_settings
from placement_cell.core.exceptions import PlacementError
from placement_cell.core.logging import setup_logging

settings = get_settings()
setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Placement Cell Portal",
    description="""
    Campus placement management for a college placement cell.

    ## Features
    - **Authentication**: JWT-based auth for students, SPCs, admins and recruiters
    - **Students**: Profile, placement availability, resume upload, applications
    - **Postings**: Recruiter job/internship submissions, admin announcement
    - **Eligibility**: Per-criterion verdict for every student/posting pair
    - **Applications**: Status lifecycle with append-only history
    - **Placement tracking**: Cohort statistics and placement records
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlacementError)
async def placement_error_handler(request: Request, exc: PlacementError):
    """Domain errors become {"success": false, "kind": ..., "detail": ...}."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "kind": "error", "detail": "Internal Server Error"},
    )


# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception as e:
        # /health still reports the database state
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Placement Cell Portal"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
