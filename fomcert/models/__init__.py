"""
Database Models
Import all models here so metadata.create_all sees every table
"""

from fomcert.models.organization import Organization
from fomcert.models.template import CertificateTemplate
from fomcert.models.certificate import IssuedCertificate, SequenceCounter, ChainHead

__all__ = [
    "Organization",
    "CertificateTemplate",
    "IssuedCertificate",
    "SequenceCounter",
    "ChainHead",
]
