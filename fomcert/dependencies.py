"""
Request Dependencies
Service objects shared through app.state
"""

from fastapi import Request

from fomcert.services.certificate_manager import CertificateManager
from fomcert.services.render_bridge import RenderBridge


def get_certificate_manager(request: Request) -> CertificateManager:
    """Certificate manager built at startup"""
    return request.app.state.certificate_manager


def get_render_bridge(request: Request) -> RenderBridge:
    """Render service client built at startup"""
    return request.app.state.render_bridge
