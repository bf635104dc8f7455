from fastapi import APIRouter

from app.dependencies import AdminSession, DbSession, Roster
from app.schemas.guest import AdminGuestRead

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/guests", response_model=list[AdminGuestRead])
def list_all_guests(admin: AdminSession, db: DbSession, roster: Roster):
    return roster.list_all_guests(db)
