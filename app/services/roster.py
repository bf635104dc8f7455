"""Guest roster mutations scoped to one invitation.

Every write path that can grow the roster takes the invitation row lock
first and re-counts under it, so capacity holds under concurrent requests.
Every write path that touches an existing guest filters by the owning
invitation key; a guest belonging to someone else looks exactly like a
missing one.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.database import utcnow
from app.errors import CapacityExceeded, InvalidCredential, InvalidSubmission, Unauthorized
from app.models.guest import Guest
from app.models.invitation import Invitation
from app.services.invitations import guest_count, lock_invitation

logger = logging.getLogger(__name__)


@dataclass
class GuestSubmission:
    """One row of a resubmitted RSVP form.

    Non-positive ids are temporary placeholders for guests added client-side.
    """

    id: int
    name: str = ""
    meal_preference: str | None = None
    dietary_restrictions: str | None = None

    @property
    def is_new(self) -> bool:
        return self.id <= 0


@dataclass
class ReconcileResult:
    created: list[int] = field(default_factory=list)
    updated: list[int] = field(default_factory=list)
    deleted: list[int] = field(default_factory=list)


class RosterManager:
    def __init__(self, meal_options: list[str]):
        self.meal_options = list(meal_options)

    def list_guests(self, db: Session, invitation_key: str) -> list[Guest]:
        return list(
            db.execute(
                select(Guest)
                .where(Guest.invitation_key == invitation_key)
                .order_by(Guest.id)
            ).scalars()
        )

    def list_all_guests(self, db: Session) -> list[Guest]:
        return list(
            db.execute(
                select(Guest).order_by(Guest.invitation_key, Guest.id)
            ).scalars()
        )

    def create_guest(self, db: Session, invitation_key: str, name: str = "") -> Guest:
        invitation = self._lock(db, invitation_key)
        if guest_count(db, invitation_key) >= invitation.max_guests:
            raise CapacityExceeded()

        guest = Guest(invitation_key=invitation_key, name=(name or "").strip())
        db.add(guest)
        db.flush()
        logger.info("Added guest %s to invitation", guest.id)
        return guest

    def get_owned_guest(self, db: Session, guest_id: int, invitation_key: str) -> Guest:
        guest = db.execute(
            select(Guest).where(
                Guest.id == guest_id, Guest.invitation_key == invitation_key
            )
        ).scalar_one_or_none()
        if guest is None:
            raise Unauthorized()
        return guest

    def update_guest_name(
        self, db: Session, guest_id: int, invitation_key: str, name: str
    ) -> Guest:
        guest = self.get_owned_guest(db, guest_id, invitation_key)
        guest.name = name.strip()
        db.flush()
        return guest

    def update_guest_rsvp(
        self,
        db: Session,
        guest_id: int,
        invitation_key: str,
        attending: bool | None,
        meal_preference: str | None,
        dietary_restrictions: str | None,
    ) -> Guest:
        guest = self.get_owned_guest(db, guest_id, invitation_key)
        self._apply_rsvp(guest, attending, meal_preference, dietary_restrictions)
        db.flush()
        return guest

    def delete_guest(self, db: Session, guest_id: int, invitation_key: str) -> None:
        result = db.execute(
            delete(Guest).where(
                Guest.id == guest_id, Guest.invitation_key == invitation_key
            )
        )
        if result.rowcount == 0:
            raise Unauthorized()
        logger.info("Deleted guest %s", guest_id)

    def record_attendance_status(
        self, db: Session, invitation_key: str, attending: bool
    ) -> Invitation:
        invitation = self._lock(db, invitation_key)
        invitation.attendance_decision = attending
        invitation.attendance_recorded_at = utcnow()
        db.flush()
        return invitation

    def reconcile_roster(
        self,
        db: Session,
        invitation_key: str,
        party_attending: bool,
        submitted: list[GuestSubmission],
    ) -> ReconcileResult:
        """Make the stored roster match a resubmitted form.

        Stored guests missing from the submission are deleted, placeholder
        ids become new guests and the rest are updated. Validation happens
        before anything is written, and the whole diff runs under the
        invitation lock.
        """
        invitation = self._lock(db, invitation_key)
        stored = {guest.id: guest for guest in self.list_guests(db, invitation_key)}

        seen: set[int] = set()
        for row in submitted:
            if row.is_new:
                continue
            if row.id not in stored:
                raise Unauthorized()
            if row.id in seen:
                raise InvalidSubmission("Guest listed more than once.")
            seen.add(row.id)
        for row in submitted:
            self._check_meal(row.meal_preference)

        new_rows = [row for row in submitted if row.is_new]
        if len(seen) + len(new_rows) > invitation.max_guests:
            raise CapacityExceeded()

        result = ReconcileResult()
        for guest_id, guest in stored.items():
            if guest_id not in seen:
                db.delete(guest)
                result.deleted.append(guest_id)
        db.flush()

        for row in submitted:
            if row.is_new:
                guest = Guest(invitation_key=invitation_key, name=row.name.strip())
                db.add(guest)
                self._apply_rsvp(
                    guest, party_attending, row.meal_preference, row.dietary_restrictions
                )
                db.flush()
                result.created.append(guest.id)
            else:
                guest = stored[row.id]
                if row.name.strip():
                    guest.name = row.name.strip()
                self._apply_rsvp(
                    guest, party_attending, row.meal_preference, row.dietary_restrictions
                )
                result.updated.append(guest.id)

        invitation.attendance_decision = party_attending
        invitation.attendance_recorded_at = utcnow()
        db.flush()
        logger.info(
            "Reconciled roster: %d created, %d updated, %d deleted",
            len(result.created),
            len(result.updated),
            len(result.deleted),
        )
        return result

    def _lock(self, db: Session, invitation_key: str) -> Invitation:
        invitation = lock_invitation(db, invitation_key)
        if invitation is None:
            raise InvalidCredential()
        return invitation

    def _check_meal(self, meal_preference: str | None) -> None:
        if meal_preference and meal_preference not in self.meal_options:
            raise InvalidSubmission("Unknown meal option.")

    def _apply_rsvp(
        self,
        guest: Guest,
        attending: bool | None,
        meal_preference: str | None,
        dietary_restrictions: str | None,
    ) -> None:
        self._check_meal(meal_preference)
        guest.attending = attending
        guest.meal_preference = meal_preference or None
        guest.dietary_restrictions = (dietary_restrictions or "").strip() or None
        guest.last_updated = utcnow()
