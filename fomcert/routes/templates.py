"""
Template Routes
Browse published certificate and card templates
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from fomcert.dependencies import get_certificate_manager
from fomcert.schemas.template import CertificateTemplate, TemplateResponse
from fomcert.services.certificate_manager import CertificateManager

router = APIRouter()


@router.get("", response_model=List[TemplateResponse])
async def list_templates(
    organization_id: Optional[str] = Query(default=None),
    manager: CertificateManager = Depends(get_certificate_manager)
):
    templates = await manager.list_templates(organization_id)
    return [TemplateResponse.from_template(t) for t in templates]


@router.get("/{template_id}", response_model=CertificateTemplate, response_model_by_alias=False)
async def get_template(
    template_id: str,
    manager: CertificateManager = Depends(get_certificate_manager)
):
    return await manager.get_template(template_id)
