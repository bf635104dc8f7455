"""Invitation lookup, lazy creation and capacity accounting."""

import logging
import re

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import utcnow
from app.errors import InvalidCredential, InvalidSubmission
from app.models.guest import Guest
from app.models.invitation import Invitation

logger = logging.getLogger(__name__)

MODE_CODE = "code"
MODE_EMAIL = "email"

_CODE_PATTERN = re.compile(r"^[A-Za-z0-9]{4,64}$")


def normalize_key(raw: str, mode: str) -> str:
    """Clean up a submitted invitation key or raise InvalidCredential."""
    key = (raw or "").strip()
    if mode == MODE_EMAIL:
        key = key.lower()
        if len(key) < 5 or "@" not in key or "." not in key:
            raise InvalidCredential()
        return key
    if not _CODE_PATTERN.match(key):
        raise InvalidCredential()
    return key


def get_invitation(db: Session, key: str) -> Invitation | None:
    return db.get(Invitation, key)


def lock_invitation(db: Session, key: str) -> Invitation | None:
    """Load the invitation with a row lock held until the transaction ends.

    SQLite has no row locks; its transactions start with BEGIN IMMEDIATE
    instead (see app.database), which holds the database write lock.
    """
    return db.execute(
        select(Invitation).where(Invitation.key == key).with_for_update()
    ).scalar_one_or_none()


def create_invitation(
    db: Session,
    key: str,
    max_guests: int,
    display_name: str | None = None,
    contact_email: str | None = None,
    contact_phone: str | None = None,
    registration_ip_hash: str | None = None,
) -> Invitation:
    if max_guests < 1:
        raise InvalidSubmission("An invitation must allow at least one guest.")
    invitation = Invitation(
        key=key,
        max_guests=max_guests,
        display_name=display_name,
        contact_email=contact_email,
        contact_phone=contact_phone,
        registration_ip_hash=registration_ip_hash,
    )
    db.add(invitation)
    db.flush()
    return invitation


def resolve_invitation(
    db: Session,
    raw_key: str,
    mode: str,
    default_max_guests: int,
    ip_hash: str | None = None,
) -> Invitation:
    """Find the invitation a guest is logging in with.

    Codes must already exist. Unknown emails get a fresh invitation with the
    default capacity; the requester's hashed address is kept for audit only.
    """
    key = normalize_key(raw_key, mode)
    invitation = get_invitation(db, key)
    if invitation is not None:
        return invitation

    if mode != MODE_EMAIL:
        raise InvalidCredential()

    logger.info("Creating invitation on first login")
    return create_invitation(
        db,
        key=key,
        max_guests=default_max_guests,
        contact_email=key,
        registration_ip_hash=ip_hash,
    )


def touch_last_access(db: Session, key: str) -> None:
    """Record the login time. Failures never block authentication."""
    try:
        with db.begin_nested():
            db.execute(
                update(Invitation)
                .where(Invitation.key == key)
                .values(last_access_at=utcnow())
            )
    except SQLAlchemyError:
        logger.warning("Could not update last access for invitation", exc_info=True)


def guest_count(db: Session, key: str) -> int:
    return db.execute(
        select(func.count()).select_from(Guest).where(Guest.invitation_key == key)
    ).scalar_one()


def capacity_remaining(db: Session, key: str) -> int:
    invitation = get_invitation(db, key)
    if invitation is None:
        return 0
    return invitation.max_guests - guest_count(db, key)


def check_can_add_guest(db: Session, key: str) -> bool:
    return capacity_remaining(db, key) > 0

