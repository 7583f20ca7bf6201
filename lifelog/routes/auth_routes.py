# ---------- routes/auth_routes.py ----------
"""
Auth routes over the Session Controller.
Each request gets its own controller (and auth session) via get_session_controller.
"""
from fastapi import APIRouter, Depends, HTTPException

from lifelog.auth import get_context, get_current_user, get_session_controller
from lifelog.config import PROFILES_TABLE
from lifelog.context import AppContext
from lifelog.errors import LifelogError
from lifelog.models.user import ResetPasswordRequest, SignInRequest, SignUpRequest, VerifyEmailRequest
from lifelog.services.session_service import SessionController

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


# ── Routes ────────────────────────────────────────────────────────
@router.post("/signup")
async def signup(body: SignUpRequest, session: SessionController = Depends(get_session_controller)):
    """Create an account; the user must verify their email before signing in."""
    try:
        identity = await session.sign_up(body.email, body.password, body.name)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {
        "status": "success",
        "data": {
            "uid": identity.uid,
            "verification_email_sent": session.verification_email_sent,
            "message": "Account created. Please check your inbox to verify your email.",
        },
    }


@router.post("/login")
async def login(body: SignInRequest, session: SessionController = Depends(get_session_controller)):
    """Authenticate with email + password; only verified accounts get a token."""
    try:
        identity = await session.sign_in(body.email, body.password)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {
        "status": "success",
        "data": {
            "token": session.auth.access_token(),
            "user": identity.model_dump(),
        },
    }


@router.post("/logout")
async def logout(
    user_id: str = Depends(get_current_user),
    session: SessionController = Depends(get_session_controller),
):
    """Clears the server-side session; the client should discard its token."""
    try:
        await session.sign_out()
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"status": "success", "data": {"message": "Logged out"}}


@router.post("/reset-password")
async def reset_password(body: ResetPasswordRequest, session: SessionController = Depends(get_session_controller)):
    try:
        await session.reset_password(body.email)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"status": "success", "data": {"message": "Password reset email sent"}}


@router.post("/verify-email")
async def verify_email(body: VerifyEmailRequest, session: SessionController = Depends(get_session_controller)):
    try:
        identity = await session.verify_email(body.code)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {
        "status": "success",
        "data": {"email_verified": bool(identity and identity.email_verified)},
    }


@router.get("/me")
async def me(user_id: str = Depends(get_current_user), ctx: AppContext = Depends(get_context)):
    """Return the current user's profile document."""
    try:
        profile = await ctx.store.get(PROFILES_TABLE, user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return {
        "status": "success",
        "data": {
            "id": user_id,
            "email": profile.get("email"),
            "name": profile.get("name"),
            "created_at": str(profile.get("created_at", "")),
            "last_login": str(profile.get("last_login", "")),
        },
    }
