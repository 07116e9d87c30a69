"""
Certificate Errors
Typed failures raised by the certificate services
"""


class CertificateError(Exception):
    """Base class for certificate service failures"""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(CertificateError):
    """Template, certificate or organization does not exist"""

    status_code = 404


class ValidationError(CertificateError):
    """Missing required field or malformed reference"""

    status_code = 422


class RenderError(CertificateError):
    """The render service failed, timed out or returned unusable bytes"""

    status_code = 502


class SecurityError(CertificateError):
    """Signature mismatch on a stored certificate"""

    status_code = 409
