import hmac

from fastapi import Depends, HTTPException, Request, status
from jose import jwt, JWTError

from lifelog.config import JWT_ALGORITHM, JWT_AUDIENCE
from lifelog.context import AppContext
from lifelog.services.session_service import SessionController


def get_context(request: Request) -> AppContext:
    """FastAPI dependency: the AppContext the app was built with."""
    return request.app.state.context


async def get_session_controller(ctx: AppContext = Depends(get_context)):
    """
    FastAPI dependency: yields a started SessionController and tears its
    auth subscription down after the request.
    """
    controller = ctx.session_controller()
    try:
        yield controller
    finally:
        await controller.aclose()


def verify_token(token: str, secret: str) -> dict | None:
    """Decode and verify a Supabase access token. Returns the payload or None on failure."""
    try:
        return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], audience=JWT_AUDIENCE)
    except JWTError:
        return None


def _bearer(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_header.split(" ", 1)[1]


async def get_current_user(request: Request, ctx: AppContext = Depends(get_context)) -> str:
    """
    FastAPI dependency: extracts the Bearer token from the Authorization
    header, verifies it, and returns the user id (the token's `sub`).
    Raises HTTP 401 if the token is missing or invalid.
    """
    payload = verify_token(_bearer(request), ctx.jwt_secret)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token payload missing required claims",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return str(user_id)


async def require_cron_secret(request: Request, ctx: AppContext = Depends(get_context)) -> None:
    """FastAPI dependency for scheduler endpoints, checks the static bearer secret."""
    auth_header = request.headers.get("Authorization", "")
    expected = f"Bearer {ctx.cron_secret}"
    if not ctx.cron_secret or not hmac.compare_digest(auth_header.encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
