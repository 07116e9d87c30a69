"""
Issued Certificate Models
Issued records, per-template sequence counters and hash chain heads
"""

from sqlalchemy import Column, String, Integer, Text, DateTime, func
from fomcert.database import Base


class IssuedCertificate(Base):
    __tablename__ = "issued_certificates"

    id = Column(String(50), primary_key=True)
    template_id = Column(String(100), nullable=False, index=True)
    template_name = Column(String(100), nullable=False)
    organization_id = Column(String(50), nullable=False, index=True)
    recipient_name = Column(String(200), nullable=False, index=True)

    # Lifecycle
    status = Column(String(20), nullable=False, default="active")
    security_level = Column(String(20), nullable=False)

    # Complete record (security package, custom fields, dates) as JSON
    payload = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    organization_id = Column(String(50), primary_key=True)
    template_id = Column(String(100), primary_key=True)
    value = Column(Integer, nullable=False, default=0)


class ChainHead(Base):
    __tablename__ = "hash_chain_heads"

    organization_id = Column(String(50), primary_key=True)
    last_hash = Column(String(64), nullable=False)
    certificate_id = Column(String(50), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
