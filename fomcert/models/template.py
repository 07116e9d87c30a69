"""
Certificate Template Model
Stores published template definitions as JSON
"""

from sqlalchemy import Column, String, Text, DateTime, func
from fomcert.database import Base


class CertificateTemplate(Base):
    __tablename__ = "certificate_templates"

    id = Column(String(100), primary_key=True)
    organization_id = Column(String(50), nullable=True, index=True)

    # Template info
    name = Column(String(100), nullable=False)
    category = Column(String(50), nullable=True)

    # Full definition (elements, page settings, fonts) as JSON
    payload = Column(Text, nullable=False)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
