import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, Response
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from fleet_issues.core.config import Settings, get_settings
from fleet_issues.core.database import get_db
from fleet_issues.core.exceptions import Conflict, Unauthorized, ValidationFailed
from fleet_issues.core.security import (
    create_access_token,
    generate_reset_token,
    get_password_hash,
    verify_password,
)
from fleet_issues.models.enums import UserRole
from fleet_issues.models.password_reset import PasswordResetToken
from fleet_issues.models.user import User
from fleet_issues.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
)
from fleet_issues.services.email_service import send_password_reset_email

logger = logging.getLogger(__name__)
router = APIRouter()

FORGOT_PASSWORD_MESSAGE = "If an account exists, a reset link was sent to your email."


# --- LOGIN ---
@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalars().first()

    # Same answer for unknown email and wrong password
    if not user or not verify_password(credentials.password, user.password_hash):
        raise Unauthorized("Invalid email or password")

    role = UserRole(user.role)
    token = create_access_token(user.id, user.email, role, settings)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )
    logger.info(f"🔑 {user.email} signed in as {role.value}")
    return {"token": token, "user": {"id": user.id, "email": user.email, "role": role}}


# --- LOGOUT ---
@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
    return {"ok": True, "message": "Signed out."}


# --- REGISTER ---
@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Public sign-up always creates crew. An admin assigns vessels afterwards."""
    result = await db.execute(select(User).where(User.email == payload.email))
    if result.scalars().first():
        raise Conflict("An account with this email already exists")

    db.add(
        User(
            email=payload.email,
            password_hash=get_password_hash(payload.password),
            role=UserRole.CREW.value,
        )
    )
    await db.commit()

    logger.info(f"👤 Registered crew member {payload.email}")
    return {
        "ok": True,
        "message": "Account created. Ask your admin to assign you to vessels before you can report issues.",
    }


# --- FORGOT PASSWORD ---
@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalars().first()

    if user:
        # One live token per user
        await db.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user.id))

        token = generate_reset_token()
        db.add(
            PasswordResetToken(
                user_id=user.id,
                token=token,
                expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.RESET_TOKEN_EXPIRE_HOURS),
            )
        )
        await db.commit()

        reset_link = f"{settings.APP_URL.rstrip('/')}/reset-password?token={token}"
        background_tasks.add_task(send_password_reset_email, settings, user.email, reset_link)
        logger.info(f"📧 Password reset requested for {user.email}")

    return {"ok": True, "message": FORGOT_PASSWORD_MESSAGE}


# --- RESET PASSWORD ---
@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(payload: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(PasswordResetToken).where(PasswordResetToken.token == payload.token))
    record = result.scalars().first()

    if not record or _is_expired(record.expires_at):
        raise ValidationFailed("Invalid or expired reset link. Request a new one.")

    user = await db.get(User, record.user_id)
    user.password_hash = get_password_hash(payload.new_password)
    await db.delete(record)
    await db.commit()

    logger.info(f"🔐 Password updated for {user.email}")
    return {"ok": True, "message": "Password updated. You can sign in now."}


def _is_expired(expires_at: datetime) -> bool:
    # SQLite hands back naive datetimes
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < datetime.now(timezone.utc)
