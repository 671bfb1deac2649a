from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.identity import Identity
from app.database import get_db
from app.dependencies import get_identity
from app.schemas.auth_schemas import (
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    SessionResponse,
    TokenResponse,
)
from app.services.auth_service import AuthService

router = APIRouter()
users_router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    register_data: RegisterRequest,
    db: Session = Depends(get_db),
):
    """
    Sign up a new business.

    The new user is the administrator (tenant root) of a fresh tenant,
    seeded with the default chart of accounts.
    """
    return AuthService(db).register(register_data)


@router.post("/login", response_model=TokenResponse)
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db),
):
    """Exchange email and password for a session token"""
    return AuthService(db).login(login_data)


@router.get("/session", response_model=SessionResponse)
def get_session(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """
    Current session.

    Never fails for anonymous callers: authenticated is false instead.
    """
    return AuthService(db).get_session(identity)


@users_router.patch("/me", response_model=TokenResponse)
def update_profile(
    profile_update: ProfileUpdate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Update the caller's own profile; returns a refreshed token"""
    return AuthService(db).update_profile(profile_update, identity)
