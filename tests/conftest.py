"""
Shared fixtures: settings env, security, QR encoder and a seeded manager
"""

import os

os.environ.setdefault("CERTIFICATE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_URL", "https://fom.example.org")

import pytest

from fomcert.schemas.organization import FOM_ORGANIZATION, Organization
from fomcert.services.certificate_manager import CertificateManager
from fomcert.services.persistence import InMemoryPersistence
from fomcert.services.qr_service import QRPayloadEncoder
from fomcert.services.security_service import SecurityPackageGenerator
from fomcert.services.template_library import default_template, get_template_library

SECRET = "test-secret-key"
BASE_URL = "https://fom.example.org"

JICF_ORGANIZATION = Organization(
    id="jicf",
    name="JINAN INTERNATIONAL CHRISTIAN FELLOWSHIP",
    prefix="JICF",
    tagline="Worshipping together in Jinan",
    logo="/JICF_LOGO1.png",
    leadership={"chairperson": "Pastor John"},
)


@pytest.fixture
def security():
    return SecurityPackageGenerator(SECRET, BASE_URL)


@pytest.fixture
def qr_encoder():
    return QRPayloadEncoder(BASE_URL)


def make_manager(persistence=None):
    return CertificateManager(
        persistence=persistence or InMemoryPersistence(),
        security=SecurityPackageGenerator(SECRET, BASE_URL),
        qr_encoder=QRPayloadEncoder(BASE_URL),
        default_organization_id="fom",
    )


def library_templates():
    return list(get_template_library().values()) + [default_template()]


@pytest.fixture
async def manager():
    manager = make_manager()
    await manager.seed([FOM_ORGANIZATION, JICF_ORGANIZATION], library_templates())
    return manager
