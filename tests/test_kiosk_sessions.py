"""Kiosk session issue, scoping, expiry and revocation."""
from datetime import datetime, timedelta, timezone

import pytest

from app.errors import AccessDenied, KIOSK_SESSION_INVALID, NotFound, SessionInvalid
from app.models.audit_log import AuditLog
from app.models.kiosk_session import KioskSession
from app.services.kiosk_sessions import hash_kiosk_token, issue_session, revoke_session, validate_session


def test_issue_stores_only_the_token_hash(db, seed):
    issued = issue_session(db, seed.crew, seed.event_id)

    assert len(issued.kiosk_token) == 64
    assert issued.event_name == "Sommerfest"
    row = db.query(KioskSession).filter(KioskSession.id == issued.session_id).one()
    assert row.token_hash == hash_kiosk_token(issued.kiosk_token)
    assert row.token_hash != issued.kiosk_token
    assert row.crew_user_id == seed.crew.user_id
    audit = db.query(AuditLog).filter(AuditLog.action == "kiosk_session_started").one()
    assert audit.entity_id == str(issued.session_id)


def test_issue_expires_after_twelve_hours(db, seed):
    before = datetime.now(timezone.utc)
    issued = issue_session(db, seed.crew, seed.event_id)
    assert timedelta(hours=11, minutes=59) < issued.expires_at - before <= timedelta(hours=12, seconds=5)


def test_crew_without_grant_cannot_issue(db, seed):
    with pytest.raises(AccessDenied):
        issue_session(db, seed.outsider, seed.event_id)


def test_crew_without_grant_cannot_probe_missing_events(db, seed):
    with pytest.raises(AccessDenied):
        issue_session(db, seed.crew, 9999)


def test_organizer_and_admin_can_issue(db, seed):
    assert issue_session(db, seed.organizer, seed.other_event_id).event_id == seed.other_event_id
    assert issue_session(db, seed.admin, seed.event_id).event_id == seed.event_id


def test_admin_gets_not_found_for_missing_event(db, seed):
    with pytest.raises(NotFound):
        issue_session(db, seed.admin, 9999)


def test_token_is_scoped_to_its_event(db, seed):
    issued = issue_session(db, seed.crew, seed.event_id)

    assert validate_session(db, issued.kiosk_token, seed.event_id).id == issued.session_id
    with pytest.raises(SessionInvalid) as exc:
        validate_session(db, issued.kiosk_token, seed.other_event_id)
    assert exc.value.detail == KIOSK_SESSION_INVALID


def test_expired_token_is_rejected(db, seed):
    issued = issue_session(db, seed.crew, seed.event_id)
    db.query(KioskSession).filter(KioskSession.id == issued.session_id).update(
        {KioskSession.expires_at: datetime.now(timezone.utc) - timedelta(minutes=1)}
    )
    db.commit()

    with pytest.raises(SessionInvalid):
        validate_session(db, issued.kiosk_token, seed.event_id)


@pytest.mark.parametrize("token", [None, "", "not-a-real-token"])
def test_unknown_tokens_get_the_same_error(db, seed, token):
    with pytest.raises(SessionInvalid) as exc:
        validate_session(db, token, seed.event_id)
    assert str(exc.value) == KIOSK_SESSION_INVALID


def test_revoke_is_terminal_and_idempotent(db, seed):
    issued = issue_session(db, seed.crew, seed.event_id)

    first = revoke_session(db, seed.crew, issued.session_id)
    revoked_at = first.revoked_at
    assert revoked_at is not None
    with pytest.raises(SessionInvalid):
        validate_session(db, issued.kiosk_token, seed.event_id)

    second = revoke_session(db, seed.crew, issued.session_id)
    assert second.revoked_at == revoked_at
    assert db.query(AuditLog).filter(AuditLog.action == "kiosk_session_revoked").count() == 1


def test_other_crew_cannot_revoke(db, seed):
    issued = issue_session(db, seed.crew, seed.event_id)
    with pytest.raises(AccessDenied):
        revoke_session(db, seed.crew2, issued.session_id)


def test_event_organizer_can_revoke_crew_session(db, seed):
    issued = issue_session(db, seed.crew, seed.event_id)
    assert revoke_session(db, seed.organizer, issued.session_id).revoked_at is not None
