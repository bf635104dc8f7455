from app.models.guest import Guest


def test_create_guest(db, invitation):
    guest = Guest(invitation_key=invitation.key, name="Alice")
    db.add(guest)
    db.flush()
    db.refresh(guest)

    assert guest.id is not None
    assert guest.attending is None
    assert guest.meal_preference is None
    assert guest.dietary_restrictions is None
    assert guest.last_updated is not None


def test_guest_ids_increase(db, invitation):
    first = Guest(invitation_key=invitation.key, name="Alice")
    second = Guest(invitation_key=invitation.key, name="Bob")
    db.add_all([first, second])
    db.flush()

    assert second.id > first.id


def test_guest_name_defaults_to_empty(db, invitation):
    guest = Guest(invitation_key=invitation.key)
    db.add(guest)
    db.flush()

    assert guest.name == ""
