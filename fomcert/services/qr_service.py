"""
QR Code Service
Builds certificate QR payloads and renders them as PNG images
"""

import base64
import ipaddress
import json
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional
from urllib.parse import urlparse

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_M
from PIL import Image

from fomcert.exceptions import ValidationError

logger = logging.getLogger(__name__)


MAX_PAYLOAD_LENGTH = 2000
DEV_PORTS = {3000, 3001, 8000, 8080}

CERTIFICATE_JSON_MARKERS = (
    '"t":"CERT"',
    '"t": "CERT"',
    '"type":"CERTIFICATE_INFO"',
    '"type": "CERTIFICATE_INFO"',
    '"environment":"development"',
    '"environment": "development"',
    '"env":"dev"',
    '"env": "dev"',
)


@dataclass(frozen=True)
class QRProfile:
    scale: int
    width: int
    error_correction: str
    margin: int = 1


CERTIFICATE_JSON_PROFILE = QRProfile(scale=120, width=600, error_correction="H")
URL_PROFILE = QRProfile(scale=48, width=400, error_correction="M")
PDF_PROFILE = QRProfile(scale=80, width=400, error_correction="H")
IMAGE_PROFILE = QRProfile(scale=100, width=600, error_correction="H")

ERROR_CORRECTION_LEVELS = {
    "H": ERROR_CORRECT_H,
    "M": ERROR_CORRECT_M,
}


@dataclass(frozen=True)
class QRImage:
    png: bytes
    error_correction: str
    width: int

    @property
    def data_uri(self) -> str:
        return f"data:image/png;base64,{base64.b64encode(self.png).decode('ascii')}"


def is_local_base_url(base_url: str) -> bool:
    """True for localhost, private network addresses and common dev ports"""
    parsed = urlparse(base_url if "://" in base_url else f"http://{base_url}")
    host = parsed.hostname or ""
    try:
        port = parsed.port
    except ValueError:
        port = None
    if port in DEV_PORTS:
        return True
    if host == "localhost":
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_loopback or address.is_private


class QRPayloadEncoder:
    """Chooses QR content and image profile for certificates"""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def build_payload(
        self,
        certificate_id: str,
        recipient_name: str,
        template_name: str,
        issuer_name: str,
        issue_date: str,
        verification_url: str,
        recipient_email: Optional[str] = None,
    ) -> str:
        """
        Build the text embedded in a certificate QR code

        Production deployments embed the verification URL. Local deployments
        embed compact JSON since a phone cannot reach the verification page.
        """
        if not is_local_base_url(self.base_url):
            return verification_url

        if "service" in template_name.lower():
            data = {
                "certificateId": certificate_id,
                "recipientName": recipient_name,
                "issueDate": issue_date,
                "pastorName": issuer_name,
            }
        else:
            tpl = template_name[:20] + ("..." if len(template_name) > 20 else "")
            data = {
                "t": "CERT",
                "id": certificate_id,
                "n": recipient_name,
                "e": f"{recipient_email[:10]}..." if recipient_email else "",
                "tpl": tpl,
                "iss": issuer_name,
                "d": issue_date,
                "v": f"{self.base_url}/verify-certificate?id={certificate_id}",
            }
        return json.dumps(data, separators=(",", ":"))

    @staticmethod
    def select_profile(payload: str, format: str = "png") -> QRProfile:
        if any(marker in payload for marker in CERTIFICATE_JSON_MARKERS):
            return CERTIFICATE_JSON_PROFILE
        if payload.startswith("{") and ("certificateId" in payload or '"id":' in payload):
            return CERTIFICATE_JSON_PROFILE
        if payload.startswith(("http://", "https://")):
            return URL_PROFILE
        if format == "pdf":
            return PDF_PROFILE
        return IMAGE_PROFILE

    def encode(self, payload: str, format: str = "png") -> QRImage:
        """
        Render a payload as a PNG QR code

        Raises:
            ValidationError: If the payload is empty or too long
        """
        if not payload:
            raise ValidationError("QR payload is empty")
        if len(payload) > MAX_PAYLOAD_LENGTH:
            raise ValidationError(f"QR payload exceeds {MAX_PAYLOAD_LENGTH} characters")

        profile = self.select_profile(payload, format)
        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECTION_LEVELS[profile.error_correction],
            box_size=profile.scale,
            border=profile.margin,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        # Module size capped so the bitmap never exceeds the target width before resizing
        modules = qr.modules_count + 2 * profile.margin
        qr.box_size = max(1, min(profile.scale, profile.width // modules))

        image = qr.make_image(fill_color="black", back_color="white").get_image()
        image = image.convert("RGB").resize((profile.width, profile.width), Image.NEAREST)

        buffer = BytesIO()
        image.save(buffer, format="PNG")
        logger.debug("Encoded %d character QR payload at level %s", len(payload), profile.error_correction)
        return QRImage(png=buffer.getvalue(), error_correction=profile.error_correction, width=profile.width)
