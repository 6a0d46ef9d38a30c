"""OTP login, logout and the admin guard dependency (require_admin)."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import Forbidden, Unauthorized
from app.core.security import create_session_token, decode_session_token
from app.schemas.auth import (
    AuthStatusResponse,
    CurrentUser,
    MessageResponse,
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    TokenResponse,
)
from app.services import otp_auth, users
from app.services.notifier import Notifier, get_notifier

router = APIRouter()
security = HTTPBearer(auto_error=False)

SESSION_COOKIE_NAME = "adminToken"


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    # Cookie and token expire together.
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


@router.post("/request-otp", response_model=OtpRequestResponse)
def request_otp(
    body: OtpRequest,
    db: Annotated[Session, Depends(get_db)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
) -> OtpRequestResponse:
    """
    First login step: check username and password, then email a one-time code.
    Echo the returned requestId together with the code to /verify-otp.
    """
    result = otp_auth.request_otp(
        db, notifier, body.username, body.password, get_settings()
    )
    return OtpRequestResponse(email=result.masked_email, requestId=result.request_id)


@router.post("/verify-otp", response_model=TokenResponse)
def verify_otp(
    body: OtpVerifyRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Second login step: consume the emailed code and issue a 24h session token.
    The token is returned in the body and set as the HTTP-only adminToken cookie.
    """
    user = otp_auth.verify_otp(db, body.requestId, body.otp, get_settings())
    token = create_session_token(user.id, user.username, user.is_admin)
    _set_session_cookie(response, token)
    return TokenResponse(token=token)


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    """Clear the session cookie. Previously issued tokens stay valid until they expire."""
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")
    return MessageResponse(message="Logout successful")


def get_session_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """Session token from the adminToken cookie, else from the Bearer header."""
    cookie_token = request.cookies.get(SESSION_COOKIE_NAME)
    if cookie_token:
        return cookie_token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return None


def require_admin(
    request: Request,
    token: Annotated[str | None, Depends(get_session_token)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """
    Dependency: require a valid session token whose user is still an admin.

    Raises 401 when the token is missing, forged or expired and 403 when the
    account no longer exists or has lost its admin flag since the token was issued.
    """
    if not token:
        raise Unauthorized("Unauthorized: No token provided")
    try:
        payload = decode_session_token(token)
    except jwt.PyJWTError:
        raise Unauthorized("Unauthorized: Invalid token")
    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise Unauthorized("Unauthorized: Invalid token")

    user = users.get_user_by_id(db, user_id)
    if user is None or not user.is_admin:
        raise Forbidden()
    request.state.user = user
    return CurrentUser.model_validate(user)


@router.get("/check-auth", response_model=AuthStatusResponse)
def check_auth(
    current_user: Annotated[CurrentUser, Depends(require_admin)],
) -> AuthStatusResponse:
    """Report whether the caller holds a valid admin session."""
    return AuthStatusResponse(authenticated=True, username=current_user.username)
