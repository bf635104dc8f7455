"""Server-side session lifecycle: created, active, then expired or logged out."""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.database import utcnow
from app.errors import SessionExpired
from app.models.invitation import Invitation
from app.models.session import AuthSession
from app.security import generate_session_id
from app.tokens import TokenCodec

logger = logging.getLogger(__name__)


def create_session(
    db: Session,
    invitation: Invitation,
    duration: timedelta,
    ip_hash: str | None = None,
    now: datetime | None = None,
) -> AuthSession:
    now = now or utcnow()
    session = AuthSession(
        id=generate_session_id(),
        invitation_key=invitation.key,
        created_at=now,
        expires_at=now + duration,
        ip_address_hash=ip_hash,
    )
    db.add(session)
    db.flush()
    return session


def get_session(
    db: Session, session_id: str, now: datetime | None = None
) -> AuthSession:
    """Return a live session or raise SessionExpired.

    A lapsed session is purged here; there is no background sweep. The purge
    is committed before raising so the failed request does not roll it back.
    """
    session = db.get(AuthSession, session_id)
    if session is None:
        raise SessionExpired()

    if session.is_expired(now or utcnow()):
        db.delete(session)
        db.commit()
        raise SessionExpired()
    return session


def get_session_from_token(
    db: Session, codec: TokenCodec, token: str | None
) -> AuthSession:
    session_id, valid = codec.verify(token)
    if not valid:
        raise SessionExpired()
    return get_session(db, session_id)


def delete_session(db: Session, session_id: str) -> bool:
    session = db.get(AuthSession, session_id)
    if session is None:
        return False
    db.delete(session)
    db.flush()
    return True
