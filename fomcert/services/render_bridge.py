"""
Render Bridge
Client for the headless browser render service that turns HTML into PNG/PDF
"""

import logging
from typing import Optional

import httpx

from fomcert.exceptions import RenderError

logger = logging.getLogger(__name__)


PNG_SIGNATURE = b"\x89PNG"
PDF_SIGNATURE = b"%PDF"

CONTENT_TYPES = {
    "png": "image/png",
    "pdf": "application/pdf",
}


class RenderBridge:
    """Sends HTML documents to the render service"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def _check_output(content: bytes, format: str) -> None:
        expected = PNG_SIGNATURE if format == "png" else PDF_SIGNATURE
        if not content:
            raise RenderError("Render service returned an empty file")
        if not content.startswith(expected):
            raise RenderError(f"Render service did not return a {format.upper()} file")

    async def render(self, html: str, width: float, height: float, format: str = "png") -> bytes:
        """
        Render HTML at the given page size

        Raises:
            RenderError: On timeout, transport failure, non-200 status or bad output
        """
        if format not in CONTENT_TYPES:
            raise RenderError(f"Unsupported output format: {format}")

        payload = {
            "html": html,
            "width": int(width),
            "height": int(height),
            "format": format,
            "deviceScaleFactor": 2,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(f"{self.base_url}/render", json=payload)
        except httpx.TimeoutException as e:
            logger.error("Render service timed out after %ss", self.timeout)
            raise RenderError("Render service timed out") from e
        except httpx.HTTPError as e:
            logger.error("Render service request failed: %s", e)
            raise RenderError("Render service is unavailable") from e

        if resp.status_code != 200:
            logger.error("Render service answered %s: %s", resp.status_code, resp.text[:200])
            raise RenderError(f"Render service failed with status {resp.status_code}")

        self._check_output(resp.content, format)
        return resp.content
