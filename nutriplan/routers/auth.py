# auth router — practitioner signup, login, profile and token refresh

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from bson import ObjectId

from nutriplan.models.user import (
    UserCreate,
    UserLogin,
    TokenResponse,
    RefreshRequest,
    UserResponse,
    ProfileUpdate,
)
from nutriplan.services.auth_service import (
    hash_password,
    verify_password,
    create_token_pair,
    decode_token,
)
from nutriplan.services.db import Database, get_db
from nutriplan.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _user_response(user: dict) -> UserResponse:
    return UserResponse(
        id=user["id"],
        email=user.get("email", ""),
        name=user.get("name", ""),
        registrationNumber=user.get("registration_number"),
        practiceName=user.get("practice_name"),
        phone=user.get("phone"),
        createdAt=user.get("created_at", ""),
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: UserCreate, db: Database = Depends(get_db)):
    """register a new practitioner and return a token pair"""
    email = body.email.strip().lower()
    if await db.users.find_one({"email": email}):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    user_doc = {
        "email": email,
        "hashed_password": hash_password(body.password),
        "name": body.name,
        "registration_number": body.registration_number,
        "practice_name": body.practice_name,
        "phone": body.phone,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    result = await db.users.insert_one(user_doc)
    user_id = str(result.inserted_id)
    logger.info(f"Practitioner registered: {email} (id: {user_id})")

    access, refresh = create_token_pair(user_id)
    return TokenResponse(accessToken=access, refreshToken=refresh)


@router.post("/login", response_model=TokenResponse)
async def login(body: UserLogin, db: Database = Depends(get_db)):
    """exchange email and password for a token pair"""
    user = await db.users.find_one({"email": body.email.strip().lower()})
    if not user or not verify_password(body.password, user.get("hashed_password", "")):
        logger.warning(f"Failed login attempt for {body.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    access, refresh = create_token_pair(str(user["_id"]))
    return TokenResponse(accessToken=access, refreshToken=refresh)


@router.get("/me", response_model=UserResponse)
async def me(current_user: dict = Depends(get_current_user)):
    """profile of the authenticated practitioner"""
    return _user_response(current_user)


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """update name and professional details"""
    updates = body.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No fields to update",
        )

    await db.users.update_one({"_id": ObjectId(current_user["id"])}, {"$set": updates})
    logger.info(f"Profile updated for {current_user['id']}: {sorted(updates)}")

    current_user.update(updates)
    return _user_response(current_user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest):
    """issue a new token pair from a valid refresh token"""
    payload = decode_token(body.refresh_token)
    if payload is None or payload.get("type") != "refresh" or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    access, new_refresh = create_token_pair(payload["sub"])
    return TokenResponse(accessToken=access, refreshToken=new_refresh)
