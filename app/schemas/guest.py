from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.auth import InvitationRead


class GuestCreate(BaseModel):
    name: str = Field(default="", max_length=255)


class GuestUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    attending: bool | None = None
    meal_preference: str | None = None
    dietary_restrictions: str | None = Field(default=None, max_length=1000)


class GuestRead(BaseModel):
    id: int
    name: str
    attending: bool | None
    meal_preference: str | None
    dietary_restrictions: str | None
    last_updated: datetime

    model_config = {"from_attributes": True}


class AdminGuestRead(GuestRead):
    invitation_key: str


class RosterRead(BaseModel):
    invitation: InvitationRead
    guests: list[GuestRead]
    can_add_more: bool
    max_guests: int
    meal_options: list[str]


class GuestSubmissionIn(BaseModel):
    id: int
    name: str = Field(default="", max_length=255)
    meal_preference: str | None = None
    dietary_restrictions: str | None = Field(default=None, max_length=1000)


class RSVPSubmit(BaseModel):
    party_attending: bool
    guests: list[GuestSubmissionIn] = []


class RSVPSubmitResult(BaseModel):
    created: list[int]
    updated: list[int]
    deleted: list[int]


class AttendanceUpdate(BaseModel):
    attending: bool
