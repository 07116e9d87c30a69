"""
Certificate Manager
Issuance, verification, revocation and analytics for certificates and cards
"""

import asyncio
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from fomcert.exceptions import NotFound, ValidationError
from fomcert.schemas.certificate import (
    AnalyticsResponse,
    CertificateStatus,
    CertificateSummary,
    IssueCertificateRequest,
    IssuedCertificate,
    SecurityLevel,
    SignatureFields,
    VerificationResult,
)
from fomcert.schemas.organization import Organization
from fomcert.schemas.template import CertificateTemplate
from fomcert.services.certificate_id import generate_certificate_id
from fomcert.services.layout_service import PageLayout, build_layout
from fomcert.services.persistence import Persistence
from fomcert.services.placeholder_service import ResolvedDocument, customize_template, resolve_template
from fomcert.services.qr_service import QRPayloadEncoder
from fomcert.services.security_service import SecurityPackageGenerator

logger = logging.getLogger(__name__)


DAYS_PER_MONTH = 30
RECENT_LIMIT = 10
NO_SIGNATURE = "no-sig"


@dataclass
class CertificateDocument:
    """Everything needed to render one certificate"""
    certificate: IssuedCertificate
    template: CertificateTemplate
    document: ResolvedDocument
    layout: PageLayout

    @property
    def title(self) -> str:
        return f"{self.template.name} - {self.certificate.recipient_name}"

    @property
    def font_urls(self) -> List[str]:
        return [font.url for font in self.template.fonts if font.url]


def parse_issue_date(value: Optional[str]) -> datetime:
    """Issue date from YYYY-MM-DD, or now"""
    if not value:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.strptime(value.strip(), "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid issue date '{value}', expected YYYY-MM-DD") from e
    return parsed.replace(tzinfo=timezone.utc)


class CertificateManager:
    """Certificate service object, built once at startup"""

    def __init__(
        self,
        persistence: Persistence,
        security: SecurityPackageGenerator,
        qr_encoder: QRPayloadEncoder,
        default_organization_id: str = "fom",
    ):
        self.persistence = persistence
        self.security = security
        self.qr_encoder = qr_encoder
        self.default_organization_id = default_organization_id
        self._issue_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def seed(self, organizations: Iterable[Organization], templates: Iterable[CertificateTemplate]) -> None:
        for organization in organizations:
            await self.persistence.save_organization(organization)
        for template in templates:
            await self.persistence.save_template(template)

    async def get_template(self, template_id: str) -> CertificateTemplate:
        template = await self.persistence.get_template(template_id)
        if not template:
            raise NotFound(f"Template '{template_id}' not found")
        return template

    async def list_templates(self, organization_id: Optional[str] = None) -> List[CertificateTemplate]:
        return await self.persistence.list_templates(organization_id)

    async def get_organization(self, organization_id: Optional[str] = None) -> Organization:
        organization_id = organization_id or self.default_organization_id
        organization = await self.persistence.get_organization(organization_id)
        if not organization:
            raise NotFound(f"Organization '{organization_id}' not found")
        return organization

    async def issue(self, request: IssueCertificateRequest) -> IssuedCertificate:
        """
        Issue a certificate from a template

        Raises:
            NotFound: If the template or organization does not exist
            ValidationError: If the recipient or issue date is invalid
        """
        recipient_name = request.recipient_name.strip()
        if not recipient_name:
            raise ValidationError("Recipient name is required")

        template = await self.get_template(request.template_id)
        organization = await self.get_organization(request.organization_id)
        issue_date = parse_issue_date(request.issue_date)
        expiry_date = None
        if request.validity_months:
            expiry_date = issue_date + timedelta(days=request.validity_months * DAYS_PER_MONTH)

        issuer_name = (request.issued_by or "").strip() or organization.default_issuer()

        if request.certificate_id:
            certificate_id = request.certificate_id.strip()
            if await self.persistence.get_issued_certificate(certificate_id):
                raise ValidationError(f"Certificate ID '{certificate_id}' is already in use")
        else:
            sequence = await self.persistence.next_sequence(organization.id, template.id)
            certificate_id = generate_certificate_id(
                template.name,
                sequence,
                organization_prefix=organization.prefix,
                year=issue_date.year,
            )

        fields = SignatureFields(
            certificate_id=certificate_id,
            recipient_name=recipient_name,
            template_name=template.name,
            issue_date=issue_date.isoformat(),
            issuer_name=issuer_name,
        )

        # Chain lookup and save must not interleave within an organization
        async with self._issue_locks[organization.id]:
            previous_hash = None
            if self.security.security_level(template.name) == SecurityLevel.HIGH:
                previous_hash = await self.persistence.latest_chain_hash(organization.id)

            now = datetime.now(timezone.utc)
            package = self.security.generate(fields, previous_hash=previous_hash, timestamp=now)
            qr_payload = self.qr_encoder.build_payload(
                certificate_id=certificate_id,
                recipient_name=recipient_name,
                template_name=template.name,
                issuer_name=issuer_name,
                issue_date=issue_date.date().isoformat(),
                verification_url=package.verification_url,
                recipient_email=request.custom_fields.get("recipientEmail"),
            )

            certificate = IssuedCertificate(
                id=certificate_id,
                template_id=template.id,
                template_name=template.name,
                organization_id=organization.id,
                recipient_name=recipient_name,
                issuer_name=issuer_name,
                issue_date=issue_date,
                expiry_date=expiry_date,
                status=CertificateStatus.ACTIVE,
                custom_fields=dict(request.custom_fields),
                security_data=package,
                verification_url=package.verification_url,
                qr_payload=qr_payload,
                created_at=now,
                last_modified=now,
            )
            await self.persistence.save_issued_certificate(certificate)

        logger.info("Issued %s certificate %s for template %s", package.level.value, certificate_id, template.id)
        return certificate

    async def get(self, certificate_id: str) -> IssuedCertificate:
        certificate = await self.persistence.get_issued_certificate(certificate_id)
        if not certificate:
            raise NotFound(f"Certificate '{certificate_id}' not found")
        return certificate.model_copy(update={"status": certificate.effective_status()})

    async def verify(self, certificate_id: str, signature: Optional[str] = None) -> VerificationResult:
        """Check existence, status, expiry and (when given) the signature; never raises for a bad certificate"""
        certificate = await self.persistence.get_issued_certificate(certificate_id)
        if not certificate:
            return VerificationResult(valid=False, reason="Certificate not found")

        if certificate.status != CertificateStatus.ACTIVE:
            return VerificationResult(valid=False, certificate=certificate,
                                      reason=f"Certificate is {certificate.status.value}")
        if certificate.is_expired():
            return VerificationResult(
                valid=False,
                certificate=certificate.model_copy(update={"status": CertificateStatus.EXPIRED}),
                reason="Certificate has expired",
            )

        if signature:
            if signature == NO_SIGNATURE:
                signature_ok = certificate.security_data.signature is None
            else:
                signature_ok = self.security.verify_signature(certificate.signature_fields(), signature)
            if not signature_ok:
                logger.warning("Possible tampering: signature mismatch for certificate %s", certificate_id)
                return VerificationResult(valid=False, certificate=certificate, reason="Invalid signature")

        return VerificationResult(valid=True, certificate=certificate)

    async def check_integrity(self, certificate_id: str) -> IssuedCertificate:
        """
        Recompute the stored signature

        Raises:
            NotFound: If the certificate does not exist
            SecurityError: If the stored fields no longer match the signature
        """
        certificate = await self.get(certificate_id)
        if certificate.security_data.signature:
            self.security.verify_or_raise(certificate.signature_fields(), certificate.security_data.signature)
        return certificate

    async def revoke(self, certificate_id: str, reason: Optional[str] = None) -> bool:
        certificate = await self.persistence.get_issued_certificate(certificate_id)
        if not certificate:
            return False
        if certificate.status == CertificateStatus.REVOKED:
            return True
        if certificate.effective_status() == CertificateStatus.EXPIRED:
            return False

        await self.persistence.update_status(
            certificate_id,
            CertificateStatus.REVOKED,
            {
                "revocation_reason": reason or "",
                "revoked_at": datetime.now(timezone.utc).isoformat(),
            },
        )
        logger.info("Revoked certificate %s", certificate_id)
        return True

    async def analytics(self, organization_id: Optional[str] = None) -> AnalyticsResponse:
        certificates = await self.persistence.list_issued_certificates(organization_id)
        now = datetime.now(timezone.utc)

        by_template = Counter(c.template_name for c in certificates)
        by_status = Counter(c.effective_status(now).value for c in certificates)
        by_security_level = Counter(c.security_data.level.value for c in certificates)

        recent = sorted(certificates, key=lambda c: c.created_at, reverse=True)[:RECENT_LIMIT]
        return AnalyticsResponse(
            total=len(certificates),
            by_template=dict(by_template),
            by_status=dict(by_status),
            by_security_level=dict(by_security_level),
            recent_issued=[
                CertificateSummary(
                    id=c.id,
                    template_name=c.template_name,
                    recipient_name=c.recipient_name,
                    issue_date=c.issue_date,
                    status=c.effective_status(now),
                )
                for c in recent
            ],
        )

    def certificate_data(
        self,
        certificate: IssuedCertificate,
        organization: Optional[Organization],
        qr_data_uri: str,
    ) -> Dict[str, Any]:
        """Data map for placeholder resolution; identity fields override custom fields"""
        data: Dict[str, Any] = dict(certificate.custom_fields)
        data.update({
            "recipientName": certificate.recipient_name,
            "issuerName": certificate.issuer_name,
            "pastorName": certificate.issuer_name,
            "issueDate": certificate.issue_date,
            "expiryDate": certificate.expiry_date,
            "certificateId": certificate.id,
            "verificationUrl": certificate.verification_url,
            "templateName": certificate.template_name,
            "qrCode": qr_data_uri,
            "createdAt": certificate.created_at,
        })
        if organization:
            data["organizationName"] = organization.name
        return data

    async def build_document(self, certificate_id: str, format: str = "png") -> CertificateDocument:
        """
        Resolve a certificate's template into a laid out document

        Raises:
            NotFound: If the certificate or its template no longer exists
            SecurityError: If the stored record fails the integrity check
        """
        certificate = await self.check_integrity(certificate_id)
        template = await self.get_template(certificate.template_id)
        organization = await self.persistence.get_organization(certificate.organization_id)
        if organization and organization.id != self.default_organization_id:
            template = customize_template(template, organization)

        qr_image = self.qr_encoder.encode(certificate.qr_payload, format)
        data = self.certificate_data(certificate, organization, qr_image.data_uri)
        document = resolve_template(template, data)

        background = template.page_settings.background
        layout = build_layout(
            document,
            background_color=background.color,
            background_image=background.image,
            watermark=certificate.security_data.watermark,
        )
        return CertificateDocument(certificate=certificate, template=template, document=document, layout=layout)
