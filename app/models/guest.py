from datetime import datetime

from sqlalchemy import ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Guest(Base):
    __tablename__ = "guests"

    id: Mapped[int] = mapped_column(primary_key=True)
    invitation_key: Mapped[str] = mapped_column(
        ForeignKey("invitations.key"), index=True
    )
    name: Mapped[str] = mapped_column(String(255), default="")
    attending: Mapped[bool | None] = mapped_column(default=None)
    meal_preference: Mapped[str | None] = mapped_column(String(100), default=None)
    dietary_restrictions: Mapped[str | None] = mapped_column(String(1000), default=None)
    last_updated: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )
