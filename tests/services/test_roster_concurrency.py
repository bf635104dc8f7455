import threading

import pytest
from sqlalchemy.orm import sessionmaker

from app.database import Base, make_engine
from app.errors import CapacityExceeded
from app.models.guest import Guest
from app.models.invitation import Invitation
from app.services import roster as roster_module
from app.services.invitations import guest_count


@pytest.fixture
def file_sessions(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'rsvp.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


def test_concurrent_adds_respect_capacity(file_sessions, roster, monkeypatch):
    with file_sessions() as setup:
        setup.add(Invitation(key="race0001", max_guests=2))
        setup.add(Guest(invitation_key="race0001", name="Alice"))
        setup.commit()

    # hold each request between its count and its insert
    barrier = threading.Barrier(2)

    def count_then_pause(db, key):
        count = guest_count(db, key)
        try:
            barrier.wait(timeout=0.5)
        except threading.BrokenBarrierError:
            pass
        return count

    monkeypatch.setattr(roster_module, "guest_count", count_then_pause)

    outcomes = []

    def add(name):
        with file_sessions() as db:
            try:
                roster.create_guest(db, "race0001", name)
                db.commit()
                outcomes.append("added")
            except CapacityExceeded:
                db.rollback()
                outcomes.append("full")

    threads = [threading.Thread(target=add, args=(name,)) for name in ("Bob", "Carol")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert sorted(outcomes) == ["added", "full"]
    with file_sessions() as db:
        assert guest_count(db, "race0001") == 2


def test_reads_after_commit_see_new_guest(file_sessions, roster):
    with file_sessions() as setup:
        setup.add(Invitation(key="race0002", max_guests=1))
        setup.commit()

    with file_sessions() as first:
        roster.create_guest(first, "race0002", "Alice")
        first.commit()

    with file_sessions() as second:
        with pytest.raises(CapacityExceeded):
            roster.create_guest(second, "race0002", "Bob")
