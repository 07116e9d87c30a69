"""
Organization Model
Issuing organizations with branding and leadership
"""

from sqlalchemy import Column, String, Text, DateTime, func
from fomcert.database import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String(50), primary_key=True)
    name = Column(String(100), nullable=False)
    prefix = Column(String(6), nullable=False)

    # Branding, verse and leadership as JSON
    payload = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
