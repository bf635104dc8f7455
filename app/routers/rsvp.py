from fastapi import APIRouter, status

from app.dependencies import CurrentSession, DbSession, Roster
from app.schemas.auth import InvitationRead
from app.schemas.guest import (
    AttendanceUpdate,
    GuestCreate,
    GuestRead,
    GuestUpdate,
    RosterRead,
    RSVPSubmit,
    RSVPSubmitResult,
)
from app.services import invitations
from app.services.roster import GuestSubmission

router = APIRouter(prefix="/rsvp", tags=["rsvp"])


@router.get("", response_model=RosterRead)
def get_roster(session: CurrentSession, db: DbSession, roster: Roster):
    key = session.invitation_key
    invitation = invitations.get_invitation(db, key)
    return RosterRead(
        invitation=InvitationRead.model_validate(invitation),
        guests=roster.list_guests(db, key),
        can_add_more=invitations.check_can_add_guest(db, key),
        max_guests=invitation.max_guests,
        meal_options=roster.meal_options,
    )


@router.post("/guests", response_model=GuestRead, status_code=status.HTTP_201_CREATED)
def add_guest(
    request: GuestCreate, session: CurrentSession, db: DbSession, roster: Roster
):
    return roster.create_guest(db, session.invitation_key, request.name)


@router.put("/guests/{guest_id}", response_model=GuestRead)
def update_guest(
    guest_id: int,
    updates: GuestUpdate,
    session: CurrentSession,
    db: DbSession,
    roster: Roster,
):
    key = session.invitation_key
    guest = roster.get_owned_guest(db, guest_id, key)
    fields = updates.model_dump(exclude_unset=True)

    if fields.get("name") is not None:
        guest = roster.update_guest_name(db, guest_id, key, fields["name"])

    rsvp_fields = {"attending", "meal_preference", "dietary_restrictions"}
    if rsvp_fields & fields.keys():
        guest = roster.update_guest_rsvp(
            db,
            guest_id,
            key,
            attending=fields.get("attending", guest.attending),
            meal_preference=fields.get("meal_preference", guest.meal_preference),
            dietary_restrictions=fields.get(
                "dietary_restrictions", guest.dietary_restrictions
            ),
        )
    return guest


@router.delete("/guests/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_guest(guest_id: int, session: CurrentSession, db: DbSession, roster: Roster):
    roster.delete_guest(db, guest_id, session.invitation_key)


@router.post("/submit", response_model=RSVPSubmitResult)
def submit_rsvp(
    request: RSVPSubmit, session: CurrentSession, db: DbSession, roster: Roster
):
    submitted = [GuestSubmission(**row.model_dump()) for row in request.guests]
    return roster.reconcile_roster(
        db, session.invitation_key, request.party_attending, submitted
    )


@router.post("/attendance", response_model=InvitationRead)
def record_attendance(
    request: AttendanceUpdate, session: CurrentSession, db: DbSession, roster: Roster
):
    return roster.record_attendance_status(db, session.invitation_key, request.attending)
