"""Two-phase lookup: membership first, contact details only on a phone match."""
import pytest

from app.errors import NotOnGuestlist, PhoneAlreadyUsed, ValidationFailed
from app.models.event_guest import EventGuest
from app.models.guest import Guest
from app.services.guest_lookup import lookup_phone, verify_username


def test_verify_username_reveals_only_membership(db, seed):
    check = verify_username(db, seed.event_id, "Ola.Nordmann")
    assert check.on_guestlist is True
    assert check.sm_username == "ola.nordmann"


def test_verify_username_not_on_list(db, seed):
    with pytest.raises(NotOnGuestlist) as exc:
        verify_username(db, seed.event_id, "nils.nobody")
    assert exc.value.status_code == 404
    assert exc.value.to_body()["on_guestlist"] is False


def test_verify_username_is_event_scoped(db, seed):
    with pytest.raises(NotOnGuestlist):
        verify_username(db, seed.other_event_id, "ola.nordmann")


def test_verify_username_rejects_invalid_input(db, seed):
    with pytest.raises(ValidationFailed) as exc:
        verify_username(db, seed.event_id, "ola nordmann", "no")
    assert "mellomrom" in exc.value.detail


def test_unknown_phone_returns_empty_prefill(db, seed):
    prefill = lookup_phone(db, seed.event_id, "ola.nordmann", "4746427042")

    assert prefill.prefill_source == "none"
    assert prefill.guest_exists is False
    assert (prefill.first_name, prefill.last_name, prefill.email, prefill.location) == ("", "", "", "")
    assert prefill.phone == "4746427042"


def test_phone_on_another_guest_list_entry_is_rejected(db, seed):
    # kari.nordmann already holds this phone on the same event
    with pytest.raises(PhoneAlreadyUsed) as exc:
        lookup_phone(db, seed.event_id, "ola.nordmann", "+47 900 00 001")
    assert exc.value.code == "phone_already_used"
    assert exc.value.to_body()["phone_already_used"] is True


def test_guestlist_phone_match_prefills_from_the_list(db, seed):
    prefill = lookup_phone(db, seed.event_id, "kari.nordmann", "4790000001")

    assert prefill.prefill_source == "guestlist"
    assert prefill.guest_exists is False
    assert prefill.first_name == "Kari"
    assert prefill.email == "kari@example.com"
    assert prefill.location == ""


def test_previous_registration_prefills_from_the_directory(db, seed):
    db.add(Guest(
        phone="4746427042",
        first_name="Ola",
        last_name="Nordmann",
        sm_username="ola.nordmann",
        email="ola@example.com",
        location="Bergen",
    ))
    db.commit()

    prefill = lookup_phone(db, seed.event_id, "ola.nordmann", "47 46 42 70 42")

    assert prefill.prefill_source == "previous_registration"
    assert prefill.guest_exists is True
    assert prefill.location == "Bergen"
    assert prefill.email == "ola@example.com"


def test_directory_phone_from_another_event_without_list_conflict(db, seed):
    """A phone known from an earlier event prefills, but only that record's own fields."""
    db.add(Guest(phone="4798765432", first_name="Kari", last_name="Hansen", sm_username="kari.hansen"))
    db.add(EventGuest(event_id=seed.other_event_id, sm_username="kari.hansen", phone="4798765432"))
    db.commit()

    prefill = lookup_phone(db, seed.event_id, "ola.nordmann", "4798765432")
    assert prefill.prefill_source == "previous_registration"
    assert prefill.first_name == "Kari"

    # Without the phone the username alone discloses nothing
    blank = lookup_phone(db, seed.event_id, "ola.nordmann", "4711111111")
    assert blank.prefill_source == "none"
    assert blank.first_name == ""
