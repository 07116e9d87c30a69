"""
Certificate Routes
Issue, download, preview, revoke and report on certificates
"""

import logging
from io import BytesIO
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse, StreamingResponse

from fomcert.dependencies import get_certificate_manager, get_render_bridge
from fomcert.exceptions import RenderError
from fomcert.schemas.certificate import (
    AnalyticsResponse,
    IssueCertificateRequest,
    IssueCertificateResponse,
    IssuedCertificate,
    RevokeRequest,
    RevokeResponse,
)
from fomcert.services.certificate_manager import CertificateManager
from fomcert.services.html_renderer import render_html, render_preview
from fomcert.services.render_bridge import CONTENT_TYPES, RenderBridge

logger = logging.getLogger(__name__)

router = APIRouter()

RENDER_ATTEMPTS = 2


@router.post("/issue", response_model=IssueCertificateResponse, status_code=status.HTTP_201_CREATED)
async def issue_certificate(
    request: IssueCertificateRequest,
    manager: CertificateManager = Depends(get_certificate_manager)
):
    """
    Issue a certificate from a template

    - **template_id**: Template to issue from (required)
    - **recipient_name**: Full name of the recipient (required)
    - **issued_by**: Authorizing official, defaults to the organization's leadership
    - **validity_months**: Months until expiry, leave empty for no expiry

    Returns: Certificate ID, verification URL and QR payload
    """
    certificate = await manager.issue(request)
    return IssueCertificateResponse(
        id=certificate.id,
        verification_url=certificate.verification_url,
        qr_payload=certificate.qr_payload,
        security_level=certificate.security_data.level,
    )


@router.get("/analytics", response_model=AnalyticsResponse)
async def certificate_analytics(
    organization_id: Optional[str] = Query(default=None),
    manager: CertificateManager = Depends(get_certificate_manager)
):
    """Counts by template, status and security level, plus the 10 newest"""
    return await manager.analytics(organization_id)


@router.get("/{certificate_id}", response_model=IssuedCertificate)
async def get_certificate(
    certificate_id: str,
    manager: CertificateManager = Depends(get_certificate_manager)
):
    return await manager.get(certificate_id)


@router.get("/{certificate_id}/download")
async def download_certificate(
    certificate_id: str,
    format: str = Query(default="png", pattern="^(png|pdf)$"),
    manager: CertificateManager = Depends(get_certificate_manager),
    bridge: RenderBridge = Depends(get_render_bridge)
):
    """
    Render a certificate to PNG or PDF

    Multi-page documents are printed on A4 pages; everything else uses
    the template's own page size.
    """
    document = await manager.build_document(certificate_id, format)
    layout = document.layout
    html = render_html(layout, title=document.title, font_urls=document.font_urls)
    height = layout.height if format == "pdf" else layout.document_height

    content = None
    for attempt in range(1, RENDER_ATTEMPTS + 1):
        try:
            content = await bridge.render(html, layout.width, height, format)
            break
        except RenderError as e:
            logger.warning("Render attempt %d for %s failed: %s", attempt, certificate_id, e.detail)

    if content is None:
        raise RenderError("could not generate file, try again")

    filename = f"{certificate_id}.{format}"
    return StreamingResponse(
        BytesIO(content),
        media_type=CONTENT_TYPES[format],
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/{certificate_id}/preview", response_class=HTMLResponse)
async def preview_certificate(
    certificate_id: str,
    manager: CertificateManager = Depends(get_certificate_manager)
):
    """HTML fragment of the certificate for in-page previews"""
    document = await manager.build_document(certificate_id, "preview")
    return HTMLResponse(content=render_preview(document.layout, font_urls=document.font_urls))


@router.post("/{certificate_id}/revoke", response_model=RevokeResponse)
async def revoke_certificate(
    certificate_id: str,
    request: Optional[RevokeRequest] = None,
    manager: CertificateManager = Depends(get_certificate_manager)
):
    reason = request.reason if request else None
    revoked = await manager.revoke(certificate_id, reason)
    return RevokeResponse(id=certificate_id, revoked=revoked)
