"""Render a signed NDA to PDF from its frozen snapshots and stored signature image.

The first call stores the PDF bytes and their SHA-256 on the signature row;
later calls return the stored document without rendering again.
"""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

from sqlalchemy.orm import Session

from app.errors import NotFound
from app.models.event import Event
from app.models.guest import Guest
from app.models.nda_signature import NdaSignature
from app.services.access import StaffContext, require_event_access
from app.services.audit_log import ACTION_NDA_PDF_GENERATED, ENTITY_NDA_SIGNATURE, create_log

logger = logging.getLogger(__name__)

_LABELS = {
    "no": {
        "title": "Taushetserklæring",
        "event": "Arrangement",
        "name": "Navn",
        "username": "Brukernavn",
        "phone": "Mobil",
        "signed": "Signert",
        "verified": "Verifisert",
        "not_verified": "Ikke verifisert",
        "privacy": "Personvern",
        "signature": "Signatur",
    },
    "en": {
        "title": "Non-disclosure agreement",
        "event": "Event",
        "name": "Name",
        "username": "Username",
        "phone": "Mobile",
        "signed": "Signed",
        "verified": "Verified",
        "not_verified": "Not verified",
        "privacy": "Privacy",
        "signature": "Signature",
    },
}


@dataclass(frozen=True)
class NdaPdf:
    signature_id: int
    content: bytes
    pdf_sha256: str
    cached: bool


def _escape_for_reportlab(s: str) -> str:
    """Escape text for ReportLab Paragraph (XML-like markup)."""
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def _fmt(dt: datetime | None) -> str:
    return dt.strftime("%Y-%m-%d %H:%M UTC") if dt else ""


def render_nda_pdf(
    *,
    language: str,
    event_name: str,
    guest_name: str,
    sm_username: str,
    phone: str,
    nda_text: str,
    privacy_text: str,
    privacy_version: int,
    signed_at: datetime | None,
    verified_at: datetime | None,
    signature_png: bytes,
) -> bytes:
    """Generate the signed NDA document. Text wraps to page width and is justified."""
    from reportlab.lib.enums import TA_JUSTIFY
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.lib.units import inch
    from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer

    labels = _LABELS.get(language, _LABELS["en"])
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title=f"{labels['title']} - {event_name}",
    )
    styles = getSampleStyleSheet()
    body_style = styles["Normal"].clone("JustifiedBody", alignment=TA_JUSTIFY, spaceAfter=6)
    small_style = styles["Normal"].clone("Small", fontSize=8, leading=10, spaceAfter=4)

    story = [
        Paragraph(_escape_for_reportlab(labels["title"]), styles["Title"]),
        Paragraph(_escape_for_reportlab(f"{labels['event']}: {event_name}"), styles["Heading3"]),
        Spacer(1, 0.2 * inch),
    ]
    for line in (nda_text or "").splitlines():
        line = line.strip()
        if line:
            story.append(Paragraph(_escape_for_reportlab(line), body_style))
        else:
            story.append(Spacer(1, 0.12 * inch))

    story.append(Spacer(1, 0.2 * inch))
    story.append(Paragraph(_escape_for_reportlab(f"{labels['privacy']} (v{privacy_version})"), styles["Heading4"]))
    for line in (privacy_text or "").splitlines():
        if line.strip():
            story.append(Paragraph(_escape_for_reportlab(line.strip()), small_style))

    story.append(Spacer(1, 0.3 * inch))
    for label, value in (
        (labels["name"], guest_name),
        (labels["username"], sm_username),
        (labels["phone"], phone),
        (labels["signed"], _fmt(signed_at)),
        (labels["verified"], _fmt(verified_at) if verified_at else labels["not_verified"]),
    ):
        story.append(Paragraph(_escape_for_reportlab(f"{label}: {value}"), body_style))

    story.append(Spacer(1, 0.15 * inch))
    story.append(Paragraph(_escape_for_reportlab(labels["signature"]), styles["Heading4"]))
    image = Image(BytesIO(signature_png))
    # Keep aspect ratio inside a 3in x 1.2in box
    scale = min((3 * inch) / image.imageWidth, (1.2 * inch) / image.imageHeight)
    image.drawWidth = image.imageWidth * scale
    image.drawHeight = image.imageHeight * scale
    image.hAlign = "LEFT"
    story.append(image)

    doc.build(story)
    return buf.getvalue()


def get_or_create_pdf(
    db: Session,
    staff: StaffContext,
    signature_id: int,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> NdaPdf:
    signature = db.query(NdaSignature).filter(NdaSignature.id == signature_id).first()
    if signature is None:
        raise NotFound("Signature not found")
    require_event_access(db, staff, signature.event_id)

    if signature.signed_pdf_bytes and signature.pdf_sha256:
        return NdaPdf(
            signature_id=signature.id,
            content=signature.signed_pdf_bytes,
            pdf_sha256=signature.pdf_sha256,
            cached=True,
        )

    guest = db.query(Guest).filter(Guest.id == signature.guest_id).first()
    event = db.query(Event).filter(Event.id == signature.event_id).first()
    if guest is None or event is None:
        raise NotFound("Signature is missing its guest or event")

    pdf_bytes = render_nda_pdf(
        language=signature.language.value,
        event_name=event.name,
        guest_name=f"{guest.first_name} {guest.last_name}".strip(),
        sm_username=guest.sm_username or "",
        phone=guest.phone,
        nda_text=signature.nda_text_snapshot,
        privacy_text=signature.privacy_text_snapshot,
        privacy_version=signature.privacy_version,
        signed_at=signature.signed_at,
        verified_at=signature.verified_at,
        signature_png=signature.signature_png,
    )
    digest = hashlib.sha256(pdf_bytes).hexdigest()
    signature.signed_pdf_bytes = pdf_bytes
    signature.pdf_sha256 = digest
    create_log(
        db,
        ACTION_NDA_PDF_GENERATED,
        ENTITY_NDA_SIGNATURE,
        signature.id,
        actor_user_id=staff.user_id,
        ip_address=ip_address,
        user_agent=user_agent,
        meta={"event_id": event.id, "pdf_sha256": digest},
    )
    db.commit()
    logger.info("pdf generated for signature %s", signature_id)

    return NdaPdf(
        signature_id=signature_id,
        content=pdf_bytes,
        pdf_sha256=digest,
        cached=False,
    )
