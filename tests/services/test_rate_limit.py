from datetime import timedelta

from sqlalchemy import func, select, text

from app.database import utcnow
from app.models.login_attempt import LoginAttempt
from app.models.session import AuthSession
from app.services.rate_limit import RateLimiter
from app.services.sessions import create_session

IP_HASH = "c" * 64


def limiter():
    return RateLimiter(limit=5, window=timedelta(minutes=1))


def test_five_attempts_are_allowed(db):
    rl = limiter()
    now = utcnow()
    for _ in range(5):
        rl.record_attempt(db, IP_HASH, now=now)
        assert rl.is_rate_limited(db, IP_HASH, now=now) is False


def test_sixth_attempt_is_limited(db):
    rl = limiter()
    now = utcnow()
    for _ in range(6):
        rl.record_attempt(db, IP_HASH, now=now)
    assert rl.is_rate_limited(db, IP_HASH, now=now) is True


def test_limit_is_per_address(db):
    rl = limiter()
    now = utcnow()
    for _ in range(6):
        rl.record_attempt(db, IP_HASH, now=now)
    rl.record_attempt(db, "d" * 64, now=now)
    assert rl.is_rate_limited(db, "d" * 64, now=now) is False


def test_window_elapses(db):
    rl = limiter()
    start = utcnow()
    for _ in range(6):
        rl.record_attempt(db, IP_HASH, now=start)
    assert rl.is_rate_limited(db, IP_HASH, now=start) is True

    later = start + timedelta(seconds=61)
    rl.record_attempt(db, IP_HASH, now=later)
    assert rl.is_rate_limited(db, IP_HASH, now=later) is False


def test_old_markers_are_pruned(db):
    rl = limiter()
    start = utcnow()
    for _ in range(3):
        rl.record_attempt(db, IP_HASH, now=start)
    rl.record_attempt(db, IP_HASH, now=start + timedelta(minutes=5))

    count = db.execute(
        select(func.count()).select_from(LoginAttempt).where(
            LoginAttempt.ip_address_hash == IP_HASH
        )
    ).scalar_one()
    assert count == 1


def test_lookup_failure_fails_open(db, invitation):
    db.execute(text("DROP TABLE login_attempts"))

    assert limiter().is_rate_limited(db, IP_HASH) is False

    # the request transaction is still usable afterwards
    session = create_session(db, invitation, timedelta(days=30))
    assert db.get(AuthSession, session.id) is not None
