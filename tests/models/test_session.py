from datetime import datetime, timedelta

from app.models.session import AuthSession


def test_session_expiry(db, invitation):
    created = datetime(2024, 1, 1, 12, 0)
    session = AuthSession(
        id="a" * 48,
        invitation_key=invitation.key,
        created_at=created,
        expires_at=created + timedelta(days=30),
    )
    db.add(session)
    db.flush()

    assert session.ip_address_hash is None
    assert session.is_expired(created) is False
    assert session.is_expired(created + timedelta(days=30)) is False
    assert session.is_expired(created + timedelta(days=30, seconds=1)) is True
