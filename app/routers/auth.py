import logging
from datetime import timedelta, timezone

from fastapi import APIRouter, Cookie, Response, status
from fastapi.responses import RedirectResponse

from app.config import Settings
from app.database import utcnow
from app.dependencies import (
    SESSION_COOKIE_NAME,
    AppSettings,
    Codec,
    CurrentSession,
    DbSession,
    IpHash,
    Limiter,
)
from app.errors import InvalidCredential, RateLimitExceeded
from app.models.invitation import Invitation
from app.models.session import AuthSession
from app.schemas.auth import InvitationRead, LoginRequest, SessionRead
from app.services import invitations, sessions
from app.services.invitations import MODE_CODE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _cookie_flags(settings: Settings) -> dict:
    return {
        "httponly": True,
        "secure": not settings.is_development,
        "samesite": "lax" if settings.is_development else "strict",
        "path": "/",
    }


def set_session_cookie(
    response: Response, token: str, session: AuthSession, settings: Settings
) -> None:
    max_age = int((session.expires_at - utcnow()).total_seconds())
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=max(max_age, 0),
        expires=session.expires_at.replace(tzinfo=timezone.utc),
        **_cookie_flags(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=SESSION_COOKIE_NAME, **_cookie_flags(settings))


def _session_read(session: AuthSession, invitation: Invitation) -> SessionRead:
    return SessionRead(
        invitation=InvitationRead.model_validate(invitation),
        created_at=session.created_at,
        expires_at=session.expires_at,
    )


def _authenticate(
    raw_key: str,
    db,
    settings: Settings,
    limiter,
    ip_hash: str,
) -> tuple[Invitation, AuthSession]:
    if settings.invitation_mode == MODE_CODE:
        limiter.record_attempt(db, ip_hash)
        if limiter.is_rate_limited(db, ip_hash):
            logger.info("Rate limited invitation code attempt")
            raise RateLimitExceeded(retry_after=settings.rate_limit_window_seconds)

    invitation = invitations.resolve_invitation(
        db,
        raw_key,
        mode=settings.invitation_mode,
        default_max_guests=settings.default_max_guests,
        ip_hash=ip_hash,
    )
    invitations.touch_last_access(db, invitation.key)

    session = sessions.create_session(
        db,
        invitation,
        duration=timedelta(days=settings.session_duration_days),
        ip_hash=ip_hash,
    )
    return invitation, session


@router.post("/login", response_model=SessionRead)
def login(
    request: LoginRequest,
    response: Response,
    db: DbSession,
    settings: AppSettings,
    codec: Codec,
    limiter: Limiter,
    ip_hash: IpHash,
):
    invitation, session = _authenticate(request.key, db, settings, limiter, ip_hash)
    set_session_cookie(response, codec.create(session.id), session, settings)
    return _session_read(session, invitation)


@router.get("/invite/{code}")
def invite_link(
    code: str,
    db: DbSession,
    settings: AppSettings,
    codec: Codec,
    limiter: Limiter,
    ip_hash: IpHash,
):
    try:
        _, session = _authenticate(code, db, settings, limiter, ip_hash)
    except RateLimitExceeded:
        return RedirectResponse("/?error=rate_limit", status_code=status.HTTP_302_FOUND)
    except InvalidCredential:
        return RedirectResponse("/?error=invalid_code", status_code=status.HTTP_302_FOUND)

    response = RedirectResponse("/rsvp", status_code=status.HTTP_302_FOUND)
    set_session_cookie(response, codec.create(session.id), session, settings)
    return response


@router.get("/me", response_model=SessionRead)
def me(session: CurrentSession, db: DbSession):
    invitation = invitations.get_invitation(db, session.invitation_key)
    return _session_read(session, invitation)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    response: Response,
    db: DbSession,
    settings: AppSettings,
    codec: Codec,
    token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
):
    session_id, valid = codec.verify(token)
    if valid:
        sessions.delete_session(db, session_id)
    clear_session_cookie(response, settings)
