"""
Certificate ID Generation
Human-readable IDs of the form ORG-YYYY-TYPE-NNNN-XX
"""

import re
import secrets
import time
from datetime import datetime
from typing import Optional

# No 0/O, 1/I to keep IDs readable when typed by hand
ID_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"

TYPE_CODES = [
    (("APPRECIATION",), "APP"),
    (("EXCELLENCE",), "EXC"),
    (("OUTSTANDING",), "OUT"),
    (("CONTRIBUTION",), "CON"),
    (("LEADERSHIP",), "LED"),
    (("SERVICE", "FAITHFUL"), "SRV"),
    (("VOLUNTEER",), "VOL"),
    (("MISSION",), "MSN"),
    (("BAPTISM",), "BAP"),
    (("YOUTH",), "YTH"),
    (("EXECUTIVE", "DIRECTOR"), "EXD"),
    (("CHAIRPERSON",), "CHR"),
    (("COMPLETION",), "CMP"),
    (("RECOGNITION",), "REC"),
]


def _random_chars(length: int) -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def organization_code(template_name: str) -> str:
    upper = template_name.upper()
    if "JULS" in upper:
        return "JULS"
    if "JICF" in upper or "SERVICE" in upper:
        return "JICF"
    return "FOM"


def type_code(template_name: str) -> str:
    upper = template_name.upper()
    for keywords, code in TYPE_CODES:
        if any(keyword in upper for keyword in keywords):
            return code
    letters = re.sub(r"[^A-Z]", "", upper)
    return letters[:3].ljust(3, "X")


def generate_certificate_id(
    template_name: str,
    sequence: Optional[int] = None,
    organization_prefix: Optional[str] = None,
    year: Optional[int] = None,
) -> str:
    """
    Build a certificate ID like FOM-2025-APP-0001-K7

    Without a sequence the last four digits of the current millisecond
    timestamp are used, which is not collision free.
    """
    org = (organization_prefix or organization_code(template_name)).upper()
    year = year or datetime.now().year
    if sequence is None:
        sequence = int(time.time() * 1000) % 10000
    return f"{org}-{year}-{type_code(template_name)}-{sequence:04d}-{_random_chars(2)}"


def generate_verification_id() -> str:
    """Short code like 7KD-Q2MX"""
    return f"{_random_chars(3)}-{_random_chars(4)}"
