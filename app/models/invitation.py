from datetime import datetime

from sqlalchemy import Boolean, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Invitation(Base):
    __tablename__ = "invitations"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(255), default=None)
    max_guests: Mapped[int] = mapped_column(default=2)
    contact_email: Mapped[str | None] = mapped_column(String(255), default=None)
    contact_phone: Mapped[str | None] = mapped_column(String(50), default=None)
    approved: Mapped[bool] = mapped_column(Boolean, default=False)
    registration_ip_hash: Mapped[str | None] = mapped_column(String(64), default=None)
    attendance_decision: Mapped[bool | None] = mapped_column(default=None)
    attendance_recorded_at: Mapped[datetime | None] = mapped_column(default=None)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    last_access_at: Mapped[datetime | None] = mapped_column(default=None)
