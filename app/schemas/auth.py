from datetime import datetime

from pydantic import BaseModel


class LoginRequest(BaseModel):
    key: str


class InvitationRead(BaseModel):
    key: str
    display_name: str | None
    max_guests: int
    attendance_decision: bool | None

    model_config = {"from_attributes": True}


class SessionRead(BaseModel):
    invitation: InvitationRead
    created_at: datetime
    expires_at: datetime
