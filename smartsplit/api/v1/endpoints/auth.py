import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from smartsplit.core.auth import create_access_token, get_current_user
from smartsplit.core.config import settings
from smartsplit.core.exceptions import StorageFailure, UserAlreadyExists
from smartsplit.core.security import generate_reset_token, hash_reset_token, verify_password
from smartsplit.db.mongo import get_db
from smartsplit.models.user import UserCreate, UserInDB, UserResponse
from smartsplit.repositories.password_reset_repo import PasswordResetRepository
from smartsplit.repositories.user_repo import UserRepository
from smartsplit.schemas.auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    MessageResponse,
    ResetPasswordRequest,
    TokenResponse,
    UserLogin,
)
from smartsplit.api.deps import ledger_http_error

router = APIRouter()
logger = logging.getLogger(__name__)

ALREADY_REGISTERED = "Username or email already registered"


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db = Depends(get_db)):
    """Register a new user"""
    user_repo = UserRepository(db)

    try:
        existing_user = await user_repo.get_user_by_username_or_email(
            user_data.username, user_data.email
        )
        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=ALREADY_REGISTERED
            )
        user = await user_repo.create_user(user_data)
    except UserAlreadyExists:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=ALREADY_REGISTERED
        )
    except StorageFailure as exc:
        raise ledger_http_error(exc)

    logger.info("Registered user %s", user.id)
    return TokenResponse(
        access_token=create_access_token(str(user.id)),
        user=user.to_response()
    )


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, db = Depends(get_db)):
    """Login with email and password"""
    user_repo = UserRepository(db)

    try:
        user = await user_repo.get_user_by_email(credentials.email)
    except StorageFailure as exc:
        raise ledger_http_error(exc)
    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    return TokenResponse(
        access_token=create_access_token(str(user.id)),
        user=user.to_response()
    )


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(request: ForgotPasswordRequest, db = Depends(get_db)):
    """
    Issue a password reset token.

    The response never reveals whether the email is registered. The raw
    token is only returned when EXPOSE_RESET_TOKEN is set.
    """
    try:
        user = await UserRepository(db).get_user_by_email(request.email)
        if user is None:
            return ForgotPasswordResponse()

        token, token_hash = generate_reset_token()
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES
        )
        await PasswordResetRepository(db).store_token(str(user.id), token_hash, expires_at)
    except StorageFailure as exc:
        raise ledger_http_error(exc)

    logger.info("Issued password reset token for user %s", user.id)
    if settings.EXPOSE_RESET_TOKEN:
        return ForgotPasswordResponse(reset_token=token)
    return ForgotPasswordResponse()


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(request: ResetPasswordRequest, db = Depends(get_db)):
    """Set a new password using an unexpired reset token (single use)."""
    reset_repo = PasswordResetRepository(db)

    try:
        user_id = await reset_repo.find_user_for_token(hash_reset_token(request.token))
        if user_id is None or not await UserRepository(db).update_password(
            user_id, request.new_password
        ):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired reset token."
            )
        await reset_repo.delete_for_user(user_id)
    except StorageFailure as exc:
        raise ledger_http_error(exc)

    logger.info("Password reset for user %s", user_id)
    return MessageResponse(message="Password reset successfully.")


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserInDB = Depends(get_current_user)):
    """Get current user details."""
    return current_user.to_response()
