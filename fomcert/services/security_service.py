"""
Security Service
Signatures, watermarks, hash chain and verification URLs for issued certificates
"""

import hmac
import hashlib
import random
import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

from fomcert.exceptions import SecurityError
from fomcert.schemas.certificate import (
    SecurityLevel,
    SecurityPackage,
    SignatureFields,
    Watermark,
    WatermarkPosition,
)

logger = logging.getLogger(__name__)


HIGH_SECURITY_KEYWORDS = ("Pastor", "Leadership", "Baptism")
STANDARD_SECURITY_KEYWORDS = ("Excellence", "Achievement", "Mission")

WATERMARK_PREFIX = "FOM-"
GENESIS_HASH = "0"


class SecurityPackageGenerator:
    """Builds the security package attached to a certificate at issuance"""

    def __init__(self, secret_key: str, base_url: str):
        if not secret_key:
            raise ValueError("A signing secret is required")
        self._secret = secret_key.encode("utf-8")
        self._secret_text = secret_key
        self.base_url = base_url.rstrip("/")
        self._random = random.SystemRandom()

    @staticmethod
    def security_level(template_name: str) -> SecurityLevel:
        """Pick the level from keywords in the template name (case-sensitive)"""
        if any(keyword in template_name for keyword in HIGH_SECURITY_KEYWORDS):
            return SecurityLevel.HIGH
        if any(keyword in template_name for keyword in STANDARD_SECURITY_KEYWORDS):
            return SecurityLevel.STANDARD
        return SecurityLevel.BASIC

    def sign(self, fields: SignatureFields) -> str:
        message = "|".join([
            fields.certificate_id,
            fields.recipient_name,
            fields.template_name,
            fields.issue_date,
            fields.issuer_name,
        ])
        return hmac.new(self._secret, message.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify_signature(self, fields: SignatureFields, signature: Optional[str]) -> bool:
        """Constant-time comparison; malformed signatures are simply invalid"""
        if not signature or not isinstance(signature, str):
            return False
        try:
            signature.encode("ascii")
        except UnicodeEncodeError:
            return False
        return hmac.compare_digest(self.sign(fields), signature.lower())

    def verify_or_raise(self, fields: SignatureFields, signature: Optional[str]) -> None:
        if not self.verify_signature(fields, signature):
            logger.warning("Signature mismatch for certificate %s", fields.certificate_id)
            raise SecurityError(f"Certificate {fields.certificate_id} failed the integrity check")

    def watermark(self, certificate_id: str) -> Watermark:
        digest = hashlib.md5((certificate_id + self._secret_text).encode("utf-8")).hexdigest()[:8]
        return Watermark(
            text=WATERMARK_PREFIX + digest.upper(),
            hash=digest,
            position=WatermarkPosition(
                x=self._random.random() * 200 + 300,
                y=self._random.random() * 100 + 250,
                rotation=self._random.random() * 30 - 15,
            ),
        )

    @staticmethod
    def chain_hash(fields: SignatureFields, previous_hash: Optional[str] = None) -> str:
        message = "|".join([
            previous_hash or GENESIS_HASH,
            fields.certificate_id,
            fields.recipient_name,
            fields.template_name,
            fields.issue_date,
        ])
        return hashlib.sha256(message.encode("utf-8")).hexdigest()

    def verification_url(self, certificate_id: str, signature: Optional[str], timestamp: datetime) -> str:
        query = urlencode({
            "id": certificate_id,
            "sig": signature or "no-sig",
            "t": int(timestamp.timestamp() * 1000),
        })
        return f"{self.base_url}/verify-certificate?{query}"

    def generate(
        self,
        fields: SignatureFields,
        previous_hash: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> SecurityPackage:
        """
        Generate the security package for a certificate

        BASIC carries only the verification URL, STANDARD adds the signature
        and watermark, HIGH also links into the organization's hash chain.
        """
        level = self.security_level(fields.template_name)
        timestamp = timestamp or datetime.now(timezone.utc)

        signature = None
        watermark = None
        blockchain_hash = None

        if level in (SecurityLevel.STANDARD, SecurityLevel.HIGH):
            signature = self.sign(fields)
            watermark = self.watermark(fields.certificate_id)
        if level == SecurityLevel.HIGH:
            blockchain_hash = self.chain_hash(fields, previous_hash)

        return SecurityPackage(
            level=level,
            timestamp=timestamp,
            signature=signature,
            watermark=watermark,
            blockchain_hash=blockchain_hash,
            verification_url=self.verification_url(fields.certificate_id, signature, timestamp),
        )
