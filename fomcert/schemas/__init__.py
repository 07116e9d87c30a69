"""
Pydantic schemas for request/response validation
"""

from fomcert.schemas.certificate import (
    IssueCertificateRequest,
    IssueCertificateResponse,
    IssuedCertificate,
    SecurityLevel,
    SecurityPackage,
    CertificateStatus,
    VerifyResponse,
    AnalyticsResponse,
)
from fomcert.schemas.template import CertificateTemplate, TemplateElement, TemplateResponse
from fomcert.schemas.organization import Organization
from fomcert.schemas.roster import RosterRecord

__all__ = [
    "IssueCertificateRequest",
    "IssueCertificateResponse",
    "IssuedCertificate",
    "SecurityLevel",
    "SecurityPackage",
    "CertificateStatus",
    "VerifyResponse",
    "AnalyticsResponse",
    "CertificateTemplate",
    "TemplateElement",
    "TemplateResponse",
    "Organization",
    "RosterRecord",
]
