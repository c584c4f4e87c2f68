"""Auth Routes — account registration, login and the current profile.

Invariants:
    - Duplicate email (case-insensitive) → 409
    - New accounts start with REGISTRATION_XP and the matching level
    - Login failure never says which of email/password was wrong
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.api.deps import get_current_user
from hackshield.api.serializers import user_profile, user_public
from hackshield.core.errors import AuthenticationError, ConflictError
from hackshield.core.user_levels import REGISTRATION_XP, level_for_xp
from hackshield.infrastructure.database import get_db
from hackshield.models.user import User
from hackshield.schemas.auth import LoginRequest, RegisterRequest
from hackshield.services.auth import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    existing = await db.execute(select(User.id).where(User.email == body.email))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("User already exists")

    user = User(
        email=body.email,
        password_hash=hash_password(body.password),
        name=body.name,
        role=body.role.value,
        skills=body.skills,
        experience=body.experience.value,
        bio=body.bio,
        org_name=body.org_name,
        org_type=body.org_type,
        org_website=body.org_website,
        xp=REGISTRATION_XP,
        level=level_for_xp(REGISTRATION_XP),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Registered {user.role} account", extra={"user_id": user.id})
    return {"message": "User created successfully", "user": user_public(user)}


@router.post("/login")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(user.password_hash, body.password):
        raise AuthenticationError("Invalid email or password")
    return {
        "access_token": create_access_token(user.id, user.role),
        "token_type": "bearer",
        "user": user_public(user),
    }


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return user_profile(user)
