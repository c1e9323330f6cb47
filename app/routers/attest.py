"""Crew attestation: pending list, claim-and-verify, delete/reset and PDF."""
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import client_info, require_staff
from app.schemas.signature import PendingSignatureItem, VerifyResponse
from app.services.access import StaffContext
from app.services.attestation import list_pending, verify_signature
from app.services.nda_pdf import get_or_create_pdf
from app.services.signatures import delete_signature

router = APIRouter(prefix="/attest", tags=["attest"])


@router.get("/pending", response_model=list[PendingSignatureItem])
def pending_signatures(
    event_id: int | None = Query(None),
    db: Session = Depends(get_db),
    staff: StaffContext = Depends(require_staff),
):
    return [PendingSignatureItem(**row) for row in list_pending(db, staff, event_id)]


@router.post("/signatures/{signature_id}/verify", response_model=VerifyResponse)
def verify(
    signature_id: int,
    request: Request,
    db: Session = Depends(get_db),
    staff: StaffContext = Depends(require_staff),
):
    ip, ua = client_info(request)
    result = verify_signature(db, staff, signature_id, ip_address=ip, user_agent=ua)
    return VerifyResponse(
        signature_id=result.signature_id,
        verified_at=result.verified_at,
        verified_by=result.verified_by,
        status_propagated=result.status_propagated,
    )


@router.delete("/signatures/{signature_id}")
def delete(
    signature_id: int,
    request: Request,
    db: Session = Depends(get_db),
    staff: StaffContext = Depends(require_staff),
):
    ip, ua = client_info(request)
    delete_signature(db, staff, signature_id, ip_address=ip, user_agent=ua)
    return {"status": "deleted", "signature_id": signature_id}


@router.get("/signatures/{signature_id}/pdf")
def signature_pdf(
    signature_id: int,
    request: Request,
    db: Session = Depends(get_db),
    staff: StaffContext = Depends(require_staff),
):
    ip, ua = client_info(request)
    pdf = get_or_create_pdf(db, staff, signature_id, ip_address=ip, user_agent=ua)
    return Response(
        content=pdf.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="NDA-{pdf.signature_id}.pdf"',
            "X-PDF-SHA256": pdf.pdf_sha256,
            "X-PDF-Cached": "true" if pdf.cached else "false",
        },
    )
