"""
FastAPI Application Entry Point
Main application setup and route registration
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from fomcert.config import settings
from fomcert.database import connect_db, database, disconnect_db, engine, metadata
from fomcert.exceptions import CertificateError
from fomcert.schemas.organization import FOM_ORGANIZATION
from fomcert.services.certificate_manager import CertificateManager
from fomcert.services.persistence import DatabasePersistence
from fomcert.services.qr_service import QRPayloadEncoder
from fomcert.services.render_bridge import RenderBridge
from fomcert.services.security_service import SecurityPackageGenerator
from fomcert.services.template_library import default_template, get_template_library
import fomcert.models  # noqa: F401  registers the tables on metadata

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Prevent browser from caching HTML previews"""
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        ct = response.headers.get("content-type", "")
        if "text/html" in ct:
            response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Certificate and card issuing, rendering and verification",
    version="1.0.0",
    debug=settings.DEBUG
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# No-cache middleware for HTML previews
app.add_middleware(NoCacheMiddleware)


@app.exception_handler(CertificateError)
async def certificate_error_handler(request: Request, exc: CertificateError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def build_certificate_manager(persistence) -> CertificateManager:
    base_url = settings.verification_base_url
    return CertificateManager(
        persistence=persistence,
        security=SecurityPackageGenerator(settings.CERTIFICATE_SECRET_KEY, base_url),
        qr_encoder=QRPayloadEncoder(base_url),
        default_organization_id=settings.DEFAULT_ORGANIZATION_ID,
    )


# Startup event
@app.on_event("startup")
async def startup():
    """Run on application startup"""
    if settings.DATABASE_URL.startswith("sqlite"):
        metadata.create_all(engine)
    await connect_db()

    manager = build_certificate_manager(DatabasePersistence(database))
    library = list(get_template_library().values()) + [default_template()]
    await manager.seed([FOM_ORGANIZATION], library)
    app.state.certificate_manager = manager
    app.state.render_bridge = RenderBridge(settings.RENDER_SERVICE_URL, timeout=settings.RENDER_TIMEOUT_SECONDS)
    print(f"[START] {settings.APP_NAME} started in {settings.APP_ENV} mode")


# Shutdown event
@app.on_event("shutdown")
async def shutdown():
    """Run on application shutdown"""
    await disconnect_db()
    print("[OK] Shutdown complete")


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "1.0.0"
    }


# Import and include routers
from fomcert.routes import certificates, templates, public  # noqa: E402

app.include_router(certificates.router, prefix="/certificates", tags=["Certificates"])
app.include_router(templates.router, prefix="/templates", tags=["Templates"])
app.include_router(public.router, tags=["Public"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "fomcert.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True  # Auto-reload on code changes
    )
