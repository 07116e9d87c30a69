"""
Certificate Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from enum import Enum


class SecurityLevel(str, Enum):
    """How many security features a certificate carries"""
    BASIC = "BASIC"
    STANDARD = "STANDARD"
    HIGH = "HIGH"


class CertificateStatus(str, Enum):
    ACTIVE = "active"
    REVOKED = "revoked"
    EXPIRED = "expired"


class WatermarkPosition(BaseModel):
    x: float
    y: float
    rotation: float


class Watermark(BaseModel):
    """Faint marker drawn over the certificate"""
    text: str
    hash: str
    position: WatermarkPosition


class SecurityPackage(BaseModel):
    """Security data generated once at issuance"""
    level: SecurityLevel
    timestamp: datetime
    signature: Optional[str] = None
    watermark: Optional[Watermark] = None
    blockchain_hash: Optional[str] = None
    verification_url: Optional[str] = None


class SignatureFields(BaseModel):
    """Identity fields covered by the signature and the hash chain"""
    certificate_id: str
    recipient_name: str
    template_name: str
    issue_date: str
    issuer_name: str


class IssueCertificateRequest(BaseModel):
    """Request to issue a certificate from a template"""
    template_id: str = Field(..., min_length=1, description="Template to issue from")
    recipient_name: str = Field(..., max_length=200, description="Full name of the recipient")
    organization_id: Optional[str] = Field(default=None, description="Issuing organization, defaults to the configured one")
    certificate_id: Optional[str] = Field(default=None, description="Use this ID instead of generating one")
    issued_by: Optional[str] = Field(default=None, description="Authorizing official shown on the certificate")
    issue_date: Optional[str] = Field(default=None, description="Custom issue date (YYYY-MM-DD)")
    validity_months: Optional[int] = Field(default=None, ge=1, description="Months until expiry, empty for never")
    custom_fields: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {
                "template_id": "fom-appreciation",
                "recipient_name": "Jane Doe",
                "issued_by": "Mr. Enoch Kwateh Dongbo",
                "custom_fields": {"customMessage": "For faithful service"}
            }
        }


class IssuedCertificate(BaseModel):
    """Issued certificate or card record"""
    id: str
    template_id: str
    template_name: str
    organization_id: str
    recipient_name: str
    issuer_name: str
    issue_date: datetime
    expiry_date: Optional[datetime] = None
    status: CertificateStatus = CertificateStatus.ACTIVE
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    security_data: SecurityPackage
    verification_url: str
    qr_payload: str
    created_at: datetime
    last_modified: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if not self.expiry_date:
            return False
        now = now or datetime.now(timezone.utc)
        return now > self.expiry_date

    def effective_status(self, now: Optional[datetime] = None) -> CertificateStatus:
        """Stored status, with active read as expired once past the expiry date"""
        if self.status == CertificateStatus.ACTIVE and self.is_expired(now):
            return CertificateStatus.EXPIRED
        return self.status

    def signature_fields(self) -> SignatureFields:
        return SignatureFields(
            certificate_id=self.id,
            recipient_name=self.recipient_name,
            template_name=self.template_name,
            issue_date=self.issue_date.isoformat(),
            issuer_name=self.issuer_name,
        )


class IssueCertificateResponse(BaseModel):
    """Result of an issuance"""
    id: str
    verification_url: str
    qr_payload: str
    security_level: SecurityLevel


class VerificationResult(BaseModel):
    """Outcome of a verification; invalid unless every check passed"""
    valid: bool
    certificate: Optional[IssuedCertificate] = None
    reason: Optional[str] = None


class VerifyResponse(BaseModel):
    """Public verification answer"""
    valid: bool
    reason: Optional[str] = None
    certificate_id: Optional[str] = None
    recipient_name: Optional[str] = None
    template_name: Optional[str] = None
    issue_date: Optional[datetime] = None
    status: Optional[CertificateStatus] = None
    security_level: Optional[SecurityLevel] = None


class RevokeRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class RevokeResponse(BaseModel):
    id: str
    revoked: bool


class CertificateSummary(BaseModel):
    id: str
    template_name: str
    recipient_name: str
    issue_date: datetime
    status: CertificateStatus


class AnalyticsResponse(BaseModel):
    """Aggregate counts; every breakdown sums to total"""
    total: int
    by_template: Dict[str, int]
    by_status: Dict[str, int]
    by_security_level: Dict[str, int]
    recent_issued: List[CertificateSummary]
