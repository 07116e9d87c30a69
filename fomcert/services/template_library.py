"""
Template Library
Stock certificate and card templates seeded at startup
"""

from typing import Dict, List

from fomcert.schemas.template import A4_HEIGHT, A4_WIDTH, CertificateTemplate
from fomcert.templating import env


def _element(element_id: str, content: str, x: float, y: float, width: float, height: float,
             type: str = "text", **style) -> dict:
    return {
        "id": element_id,
        "type": type,
        "content": content,
        "position": {"x": x, "y": y, "width": width, "height": height},
        "style": style,
    }


def default_template_data() -> dict:
    """Blank 800x600 certificate layout used when a template starts from scratch"""
    width, height = 800, 600
    return {
        "elements": [
            _element("title", "Certificate of Achievement", width * 0.25, height * 0.15, width * 0.5, height * 0.08,
                     fontSize=36, fontFamily="serif", color="#1f2937", fontWeight="bold", textAlign="center"),
            _element("subtitle", "This is to certify that", width * 0.3, height * 0.28, width * 0.4, height * 0.05,
                     fontSize=18, fontFamily="serif", color="#374151", textAlign="center"),
            _element("recipient", "{{recipientName}}", width * 0.25, height * 0.38, width * 0.5, height * 0.08,
                     fontSize=28, fontFamily="serif", color="#059669", fontWeight="bold", textAlign="center"),
            _element("achievement", "has successfully completed", width * 0.3, height * 0.5, width * 0.4, height * 0.05,
                     fontSize=16, fontFamily="serif", color="#374151", textAlign="center"),
            _element("course", "{{course}}", width * 0.25, height * 0.58, width * 0.5, height * 0.06,
                     fontSize=20, fontFamily="serif", color="#1f2937", fontWeight="bold", textAlign="center"),
            _element("date", "Date: {{issueDate}}", width * 0.1, height * 0.8, width * 0.3, height * 0.04,
                     fontSize=14, fontFamily="sans-serif", color="#6b7280"),
            _element("signature", "Authorized by: {{issuerName}}", width * 0.6, height * 0.8, width * 0.3, height * 0.04,
                     fontSize=14, fontFamily="sans-serif", color="#6b7280", textAlign="right"),
        ],
        "pageSettings": {
            "width": width,
            "height": height,
            "margin": {"top": 20, "right": 20, "bottom": 20, "left": 20},
            "background": {"color": "#ffffff"},
        },
        "fonts": [
            {"family": "serif", "variants": ["normal", "bold"]},
            {"family": "sans-serif", "variants": ["normal"]},
            {"family": "monospace", "variants": ["normal"]},
        ],
    }


def _certificate(template_id: str, name: str, title: str, category: str = "certificate") -> dict:
    """Branded landscape certificate sharing one layout"""
    return {
        "id": template_id,
        "name": name,
        "category": category,
        "elements": [
            _element("border", "", 20, 20, 760, 560, type="shape",
                     border="4px double #0c436a", borderRadius="8px", zIndex=0),
            _element("logo", "/Logo.png", 360, 40, 80, 60, type="image", objectFit="contain", zIndex=1),
            _element("organization", "FISHERS OF MEN", 200, 105, 400, 30,
                     fontSize=20, fontFamily="serif", color="#0c436a", fontWeight="bold", textAlign="center", zIndex=1),
            _element("tagline", "Bringing Jesus to the World", 250, 135, 300, 20,
                     fontSize=12, fontFamily="serif", fontStyle="italic", color="#436c87", textAlign="center", zIndex=1),
            _element("title", title, 150, 170, 500, 50,
                     fontSize=34, fontFamily="serif", color="#0c436a", fontWeight="bold", textAlign="center", zIndex=1),
            _element("subtitle", "This certificate is proudly presented to", 200, 230, 400, 25,
                     fontSize=16, fontFamily="serif", color="#374151", textAlign="center", zIndex=1),
            _element("recipient", "{{recipientName}}", 150, 260, 500, 50,
                     fontSize=32, fontFamily="serif", color="#2596be", fontWeight="bold", textAlign="center", zIndex=1),
            _element("message", "{{customMessage}}", 150, 320, 500, 60,
                     fontSize=15, fontFamily="serif", color="#374151", textAlign="center", zIndex=1),
            _element("verse", '"Do not be afraid, for those who are with us are more than those who are with them"',
                     175, 390, 450, 35, fontSize=12, fontFamily="serif", fontStyle="italic", color="#436c87",
                     textAlign="center", zIndex=1),
            _element("verse-reference", "2 Kings 6:16", 300, 425, 200, 20,
                     fontSize=11, fontFamily="serif", color="#436c87", textAlign="center", zIndex=1),
            _element("date", "Date: {{issueDate}}", 60, 480, 240, 25,
                     fontSize=14, fontFamily="sans-serif", color="#374151", zIndex=1),
            _element("signature", "{{issuerName}}", 500, 470, 240, 25,
                     fontSize=15, fontFamily="serif", color="#1f2937", fontWeight="bold", textAlign="center", zIndex=1),
            _element("signature-title", "Authorized Signature", 500, 495, 240, 20,
                     fontSize=11, fontFamily="sans-serif", color="#6b7280", textAlign="center", zIndex=1),
            _element("certificate-id", "Certificate ID: {{certificateId}}", 60, 530, 300, 18,
                     fontSize=10, fontFamily="monospace", color="#6b7280", zIndex=1),
            _element("qr", "", 660, 460, 90, 90, type="qr", zIndex=2),
        ],
        "pageSettings": {"width": 800, "height": 600, "background": {"color": "#ffffff"}},
        "fonts": [{"family": "serif", "variants": ["normal", "bold", "italic"]}],
    }


def _card(template_id: str, name: str, elements: List[dict], width: float = 400, height: float = 600,
          background: str = "#0c436a", **extra) -> dict:
    data = {
        "id": template_id,
        "name": name,
        "category": "card",
        "elements": elements,
        "pageSettings": {"width": width, "height": height, "background": {"color": background}},
    }
    data.update(extra)
    return data


def get_template_library() -> Dict[str, CertificateTemplate]:
    """Pre-designed certificate and card templates keyed by id"""
    definitions = [
        _certificate("fom-appreciation", "FOM Certificate of Appreciation", "Certificate of Appreciation"),
        _certificate("fom-excellence", "Certificate of Excellence", "Certificate of Excellence"),
        _certificate("fom-mission", "Mission Achievement Certificate", "Mission Achievement"),
        _certificate("fom-pastoral-leadership", "Pastoral Leadership Certificate", "Pastoral Leadership"),
        _certificate("fom-baptism", "Baptism Certificate", "Certificate of Baptism"),
        _certificate("jicf-service", "JICF Certificate of Service", "Certificate of Service"),
        _card("jicf-service-outline", "JICF Service Outline Card", [
            _element("event-name", "{{eventName}}", 20, 20, 360, 40,
                     fontSize=22, fontFamily="Georgia, serif", color="#fbbf24", fontWeight="bold", textAlign="center"),
            _element("event-date", "{{eventDate}}", 20, 60, 360, 20,
                     fontSize=12, fontFamily="Georgia, serif", color="#ffffff", textAlign="center"),
            _element("outline", "{{serviceOutlineItems}}", 30, 95, 340, 400,
                     fontSize=12, fontFamily="Arial, sans-serif", color="#ffffff"),
            _element("mc", "MC: {{mcName}}", 20, 520, 360, 24,
                     fontSize=13, fontFamily="Georgia, serif", color="#ffffff", textAlign="center"),
            _element("footer", "Date: {{date}}", 20, 560, 360, 20,
                     fontSize=10, fontFamily="Arial, sans-serif", color="#ccdce3", textAlign="center"),
        ]),
        _card("jicf-graduates-list", "JICF Graduates List Card", [
            _element("title", "Congratulations to Our Graduates", 20, 20, 360, 50,
                     fontSize=22, fontFamily="Georgia, serif", color="#fbbf24", fontWeight="bold", textAlign="center"),
            _element("graduates", "{{graduatesList}}", 25, 85, 350, 460,
                     fontSize=11, fontFamily="Arial, sans-serif", color="#ffffff"),
            _element("message", "{{customMessage}}", 20, 555, 360, 30,
                     fontSize=12, fontFamily="Georgia, serif", fontStyle="italic", color="#ffffff", textAlign="center"),
        ]),
        _card("jicf-meet-our-graduates", "JICF Meet Our Graduates", [
            _element("pages", "{{meetOurGraduatesContent}}", 0, 0, A4_WIDTH, A4_HEIGHT),
        ], width=A4_WIDTH, height=A4_HEIGHT, multiPage={
            "placeholder": "meetOurGraduatesContent",
            "dataKey": "meetOurGraduatesData",
            "coverPages": [
                env.get_template("pages/church_info.html").render(),
                env.get_template("pages/graduation_blessing.html").render(),
            ],
        }),
    ]
    return {data["id"]: CertificateTemplate.model_validate(data) for data in definitions}


def default_template(template_id: str = "default", name: str = "Certificate of Achievement") -> CertificateTemplate:
    return CertificateTemplate.model_validate({"id": template_id, "name": name, **default_template_data()})
