"""Lazy PDF rendering with the document and checksum cached on the signature row."""
import hashlib

import pytest

from app.errors import AccessDenied
from app.models.audit_log import AuditLog
from app.models.nda_signature import NdaSignature
from app.schemas.signature import SignatureSubmitRequest
from app.services.kiosk_sessions import issue_session
from app.services.nda_pdf import get_or_create_pdf
from app.services.signatures import submit_signature


@pytest.fixture
def signature_id(db, seed, make_payload):
    token = issue_session(db, seed.crew, seed.event_id).kiosk_token
    return submit_signature(db, token, SignatureSubmitRequest(**make_payload(seed.event_id))).signature_id


def test_first_call_renders_and_caches(db, seed, signature_id):
    pdf = get_or_create_pdf(db, seed.crew, signature_id)

    assert pdf.cached is False
    assert pdf.content.startswith(b"%PDF")
    db.expire_all()
    sig = db.query(NdaSignature).filter(NdaSignature.id == signature_id).one()
    assert sig.signed_pdf_bytes == pdf.content
    assert sig.pdf_sha256 == hashlib.sha256(pdf.content).hexdigest() == pdf.pdf_sha256

    again = get_or_create_pdf(db, seed.admin, signature_id)
    assert again.cached is True
    assert again.content == pdf.content
    assert again.pdf_sha256 == pdf.pdf_sha256
    assert db.query(AuditLog).filter(AuditLog.action == "nda_pdf_generated").count() == 1


def test_pdf_requires_event_access(db, seed, signature_id):
    with pytest.raises(AccessDenied):
        get_or_create_pdf(db, seed.outsider, signature_id)
    db.expire_all()
    assert db.query(NdaSignature).filter(NdaSignature.id == signature_id).one().signed_pdf_bytes is None
