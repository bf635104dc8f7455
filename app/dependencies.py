from datetime import timedelta
from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.config import Settings
from app.database import SessionLocal
from app.models.session import AuthSession
from app.security import SecretMaterial
from app.services.rate_limit import RateLimiter
from app.services.roster import RosterManager
from app.services.sessions import get_session_from_token
from app.tokens import TokenCodec

SESSION_COOKIE_NAME = "wedding_session"


def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


DbSession = Annotated[Session, Depends(get_db)]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_secret(request: Request) -> SecretMaterial:
    return request.app.state.secret


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


AppSettings = Annotated[Settings, Depends(get_settings)]
Secret = Annotated[SecretMaterial, Depends(get_secret)]
Codec = Annotated[TokenCodec, Depends(get_token_codec)]


def get_rate_limiter(settings: AppSettings) -> RateLimiter:
    return RateLimiter(
        limit=settings.rate_limit_count,
        window=timedelta(seconds=settings.rate_limit_window_seconds),
    )


def get_roster(settings: AppSettings) -> RosterManager:
    return RosterManager(meal_options=settings.meal_options)


Limiter = Annotated[RateLimiter, Depends(get_rate_limiter)]
Roster = Annotated[RosterManager, Depends(get_roster)]


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_ip_hash(request: Request, secret: Secret) -> str:
    return secret.hash_ip(client_ip(request))


IpHash = Annotated[str, Depends(get_ip_hash)]


def get_current_session(
    request: Request,
    db: DbSession,
    codec: Codec,
    token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> AuthSession:
    """Resolve the cookie to a live session for this request only."""
    session = get_session_from_token(db, codec, token)
    request.state.session = session
    return session


CurrentSession = Annotated[AuthSession, Depends(get_current_session)]


def require_admin(session: CurrentSession, settings: AppSettings) -> AuthSession:
    if session.invitation_key not in settings.admin_keys:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
    return session


AdminSession = Annotated[AuthSession, Depends(require_admin)]
