"""Claim-and-verify and the pending list."""
import pytest

from app.database import SessionLocal
from app.errors import AccessDenied, AlreadyVerified, NotFound
from app.models.audit_log import AuditLog
from app.models.event_guest import EventGuest, EventGuestStatus
from app.models.guest import Guest
from app.models.nda_signature import NdaSignature
from app.schemas.signature import SignatureSubmitRequest
from app.services.attestation import list_pending, verify_signature
from app.services.kiosk_sessions import issue_session
from app.services.signatures import submit_signature


@pytest.fixture
def signature_id(db, seed, make_payload):
    token = issue_session(db, seed.crew, seed.event_id).kiosk_token
    return submit_signature(db, token, SignatureSubmitRequest(**make_payload(seed.event_id))).signature_id


def test_verify_sets_verifier_and_propagates_status(db, seed, signature_id):
    result = verify_signature(db, seed.crew, signature_id)

    assert result.verified_by == seed.crew.user_id
    assert result.status_propagated is True
    db.expire_all()
    sig = db.query(NdaSignature).filter(NdaSignature.id == signature_id).one()
    assert sig.verified_at is not None
    assert sig.verified_by == seed.crew.user_id
    event_guest = db.query(EventGuest).filter(EventGuest.sm_username == "ola.nordmann").one()
    assert event_guest.status == EventGuestStatus.verified
    assert db.query(AuditLog).filter(AuditLog.action == "nda_verified").count() == 1


def test_second_verifier_loses(db, seed, signature_id):
    verify_signature(db, seed.crew, signature_id)

    with pytest.raises(AlreadyVerified) as exc:
        verify_signature(db, seed.crew2, signature_id)
    assert exc.value.code == "already_verified"
    db.expire_all()
    assert db.query(NdaSignature).filter(NdaSignature.id == signature_id).one().verified_by == seed.crew.user_id


def test_concurrent_claims_have_exactly_one_winner(db, seed, signature_id):
    """Both crew members load the pending row before either writes."""
    first, second = SessionLocal(), SessionLocal()
    try:
        assert first.query(NdaSignature).filter(NdaSignature.id == signature_id).one().verified_at is None
        assert second.query(NdaSignature).filter(NdaSignature.id == signature_id).one().verified_at is None

        outcomes = []
        for session, staff in ((first, seed.crew), (second, seed.crew2)):
            try:
                verify_signature(session, staff, signature_id)
                outcomes.append("won")
            except AlreadyVerified:
                outcomes.append("lost")
    finally:
        first.close()
        second.close()

    assert outcomes == ["won", "lost"]
    db.expire_all()
    sig = db.query(NdaSignature).filter(NdaSignature.id == signature_id).one()
    assert sig.verified_by == seed.crew.user_id
    assert db.query(AuditLog).filter(AuditLog.action == "nda_verified").count() == 1


def test_verify_requires_event_access(db, seed, signature_id):
    with pytest.raises(AccessDenied):
        verify_signature(db, seed.outsider, signature_id)


def test_verify_unknown_signature(db, seed):
    with pytest.raises(NotFound):
        verify_signature(db, seed.admin, 12345)


def test_missing_guest_list_entry_does_not_undo_verification(db, seed, signature_id):
    db.query(EventGuest).filter(EventGuest.sm_username == "ola.nordmann").delete()
    db.commit()

    result = verify_signature(db, seed.crew, signature_id)

    assert result.status_propagated is False
    db.expire_all()
    assert db.query(NdaSignature).filter(NdaSignature.id == signature_id).one().verified_at is not None


def test_verification_follows_the_entry_signed_against_after_a_username_edit(db, seed, signature_id):
    guest_id = db.query(NdaSignature).filter(NdaSignature.id == signature_id).one().guest_id
    db.query(Guest).filter(Guest.id == guest_id).update({Guest.sm_username: "ola.renamed"})
    db.commit()

    assert list_pending(db, seed.crew)[0]["guest_type"] == "par"
    result = verify_signature(db, seed.crew, signature_id)

    assert result.status_propagated is True
    db.expire_all()
    event_guest = db.query(EventGuest).filter(EventGuest.sm_username == "ola.nordmann").one()
    assert event_guest.status == EventGuestStatus.verified


def test_pending_list_is_scoped_and_carries_guest_type(db, seed, signature_id):
    rows = list_pending(db, seed.crew)
    assert [r["signature_id"] for r in rows] == [signature_id]
    assert rows[0]["guest_type"] == "par"
    assert rows[0]["event_name"] == "Sommerfest"
    assert rows[0]["sm_username"] == "ola.nordmann"

    assert list_pending(db, seed.outsider) == []
    assert len(list_pending(db, seed.organizer)) == 1
    assert len(list_pending(db, seed.admin)) == 1
    assert list_pending(db, seed.admin, event_id=seed.other_event_id) == []

    verify_signature(db, seed.crew, signature_id)
    assert list_pending(db, seed.admin) == []


def test_pending_list_is_oldest_first(db, seed, signature_id, make_payload):
    token = issue_session(db, seed.crew, seed.event_id).kiosk_token
    later = submit_signature(db, token, SignatureSubmitRequest(**make_payload(
        seed.event_id, sm_username="kari.nordmann", phone="4790000001", first_name="Kari",
    ))).signature_id

    assert [r["signature_id"] for r in list_pending(db, seed.crew)] == [signature_id, later]
    assert list_pending(db, seed.crew)[1]["guest_type"] == "vip"
