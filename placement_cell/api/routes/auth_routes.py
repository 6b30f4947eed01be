"""
Authentication Routes

POST /auth/register - Register new student account
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, status

from placement_cell.db.mongodb import get_collection
from placement_cell.core.auth import (
    ROLE_COLLECTIONS, get_current_user, hash_password, token_for, verify_password
)
from placement_cell.services.student_service import get_student_service
from placement_cell.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new student account.

    After registration, login to get access token, then complete the profile.
    """
    students = get_student_service()
    if students.get_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    students.create(
        student_id=request.student_id,
        name=request.name,
        email=request.email,
        password_hash=hash_password(request.password),
        degree=request.degree,
        branch=request.branch,
        year=request.year,
    )
    return MessageResponse(message="Registered successfully as student. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    account = get_collection(ROLE_COLLECTIONS[request.role]).find_one(
        {"email": request.email.strip().lower()}
    )
    if not account or not verify_password(request.password, account.get("password_hash")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if account.get("is_active") is False:
        raise HTTPException(status_code=403, detail="Account deactivated")

    logger.info("%s %s logged in", request.role, account["_id"])
    return TokenResponse(
        access_token=token_for(account, request.role),
        user_id=str(account["_id"]),
        role=request.role,
        is_spc=bool(account.get("is_spc", False)) if request.role == "student" else False,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current user info."""
    return UserResponse(**user)
