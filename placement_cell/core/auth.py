"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes

Accounts live in three collections (students, admins, recruiters). The token
subject is the account's MongoDB id and the ``role`` claim says which
collection it belongs to. An SPC is a student with ``is_spc`` set.
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from bson import ObjectId
from bson.errors import InvalidId

from placement_cell.core.config import get_settings
from placement_cell.db.mongodb import COLLECTIONS, get_collection
from placement_cell.models.application import Actor, ActorRole

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor
bearer_scheme = HTTPBearer()

# role claim -> account collection
ROLE_COLLECTIONS = {
    "student": COLLECTIONS["students"],
    "admin": COLLECTIONS["admins"],
    "recruiter": COLLECTIONS["recruiters"],
}


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def token_for(account: dict, role: str) -> str:
    return create_access_token({"sub": str(account["_id"]), "role": role})


def find_account(role: str, account_id: str) -> Optional[dict]:
    if role not in ROLE_COLLECTIONS:
        return None
    try:
        oid = ObjectId(account_id)
    except (InvalidId, TypeError):
        return None
    return get_collection(ROLE_COLLECTIONS[role]).find_one({"_id": oid}, {"password_hash": 0})


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @app.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise credentials_exception

    # Verify user exists
    account = find_account(role, user_id)
    if not account:
        raise credentials_exception

    if account.get("is_active") is False:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return {
        "user_id": str(account["_id"]),
        "email": account.get("email"),
        "name": account.get("name", ""),
        "role": role,
        "is_spc": bool(account.get("is_spc", False)) if role == "student" else False,
    }


async def get_current_student(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require student role."""
    if user["role"] != "student":
        raise HTTPException(status_code=403, detail="Students only")
    user["student_id"] = user["user_id"]
    return user


async def get_current_recruiter(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require recruiter role."""
    if user["role"] != "recruiter":
        raise HTTPException(status_code=403, detail="Recruiters only")
    return user


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require admin role."""
    if user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Unauthorized: Admin access required.")
    return user


async def require_spc_or_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require an admin or a student with SPC rights."""
    if user["role"] == "admin" or (user["role"] == "student" and user["is_spc"]):
        return user
    raise HTTPException(status_code=403, detail="Unauthorized: SPC or admin access required.")


def actor_from_user(user: dict) -> Actor:
    """The actor recorded in status history and red flags for this user."""
    if user["role"] == "student":
        role = ActorRole.spc if user.get("is_spc") else ActorRole.student
    else:
        role = ActorRole(user["role"])
    return Actor(name=user.get("name") or user.get("email") or role.value, role=role, id=user["user_id"])
