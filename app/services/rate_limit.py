"""Per-address throttling of invitation code guesses."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import utcnow
from app.models.login_attempt import LoginAttempt

logger = logging.getLogger(__name__)


class RateLimiter:
    def __init__(self, limit: int, window: timedelta):
        self.limit = limit
        self.window = window

    def record_attempt(
        self, db: Session, ip_hash: str, now: datetime | None = None
    ) -> None:
        """Store a marker for one validation attempt.

        Committed right away: a failed login rolls back the request, the
        marker must outlive it.
        """
        now = now or utcnow()
        try:
            db.execute(
                delete(LoginAttempt).where(
                    LoginAttempt.ip_address_hash == ip_hash,
                    LoginAttempt.attempted_at < now - self.window,
                )
            )
            db.add(LoginAttempt(ip_address_hash=ip_hash, attempted_at=now))
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.warning("Could not record login attempt", exc_info=True)

    def is_rate_limited(
        self, db: Session, ip_hash: str, now: datetime | None = None
    ) -> bool:
        """True once the attempts inside the trailing window exceed the limit.

        Lookup errors fail open.
        """
        now = now or utcnow()
        try:
            with db.begin_nested():
                count = db.execute(
                    select(func.count())
                    .select_from(LoginAttempt)
                    .where(
                        LoginAttempt.ip_address_hash == ip_hash,
                        LoginAttempt.attempted_at > now - self.window,
                    )
                ).scalar_one()
        except SQLAlchemyError:
            logger.warning("Rate limit check failed, allowing attempt", exc_info=True)
            return False
        return count > self.limit
