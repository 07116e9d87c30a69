"""
Public Endpoints
Certificate verification for anyone holding a certificate or its QR code
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from fomcert.dependencies import get_certificate_manager
from fomcert.schemas.certificate import VerifyResponse
from fomcert.services.certificate_manager import CertificateManager

router = APIRouter()


@router.get("/verify-certificate", response_model=VerifyResponse)
async def verify_certificate(
    id: str = Query(..., min_length=1),
    sig: Optional[str] = Query(default=None),
    manager: CertificateManager = Depends(get_certificate_manager)
):
    """
    Verify a certificate by ID and, when present, its signature

    The `t` query parameter in verification URLs is informational and ignored.
    """
    result = await manager.verify(id, sig)
    certificate = result.certificate
    if not certificate:
        return VerifyResponse(valid=result.valid, reason=result.reason, certificate_id=id)

    return VerifyResponse(
        valid=result.valid,
        reason=result.reason,
        certificate_id=certificate.id,
        recipient_name=certificate.recipient_name,
        template_name=certificate.template_name,
        issue_date=certificate.issue_date,
        status=certificate.effective_status(),
        security_level=certificate.security_data.level,
    )
