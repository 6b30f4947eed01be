"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from placement_cell.api.routes.auth_routes import router as auth_router
from placement_cell.api.routes.student_routes import router as student_router
from placement_cell.api.routes.posting_routes import router as posting_router
from placement_cell.api.routes.admin_routes import router as admin_router
from placement_cell.api.routes.spc_routes import router as spc_router
from placement_cell.api.routes.file_routes import router as file_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(student_router)
api_router.include_router(posting_router)
api_router.include_router(admin_router)
api_router.include_router(spc_router)
api_router.include_router(file_router)
