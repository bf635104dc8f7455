from datetime import datetime

from sqlalchemy import ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class AuthSession(Base):
    """Server-side record behind the session cookie."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    invitation_key: Mapped[str] = mapped_column(
        ForeignKey("invitations.key"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    expires_at: Mapped[datetime] = mapped_column()
    ip_address_hash: Mapped[str | None] = mapped_column(String(64), default=None)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
