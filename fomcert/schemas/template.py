"""
Certificate Template Models
Declarative layout: page settings, positioned elements and fonts
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union
from enum import Enum


class ElementType(str, Enum):
    """Kind of visual unit on a template"""
    TEXT = "text"
    IMAGE = "image"
    SHAPE = "shape"
    QR = "qr"


class TemplateModel(BaseModel):
    """Accepts camelCase keys from the template catalog and snake_case from the API"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class Position(TemplateModel):
    """Box of an element in page-pixel units"""
    x: float = Field(default=0, ge=0, description="Left offset in pixels")
    y: float = Field(default=0, ge=0, description="Top offset in pixels")
    width: float = Field(..., ge=0, description="Box width in pixels")
    height: float = Field(..., ge=0, description="Box height in pixels")


class ElementStyle(TemplateModel):
    """Visual style of an element; unknown CSS properties are kept as given"""
    font_size: Optional[Union[float, str]] = None
    font_family: Optional[str] = None
    font_weight: Optional[str] = None
    font_style: Optional[str] = None
    color: Optional[str] = None
    background_color: Optional[str] = None
    text_align: Optional[str] = None
    line_height: Optional[Union[float, str]] = None
    letter_spacing: Optional[str] = None
    transform: Optional[str] = None
    rotation: Optional[float] = None
    opacity: Optional[float] = Field(default=None, ge=0, le=1)
    z_index: Optional[int] = None
    border: Optional[str] = None
    border_width: Optional[str] = None
    border_style: Optional[str] = None
    border_color: Optional[str] = None
    border_radius: Optional[str] = None
    padding: Optional[str] = None
    display: Optional[str] = None
    object_fit: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True
        extra = "allow"

    @property
    def hidden(self) -> bool:
        return self.display == "none"


class TemplateElement(TemplateModel):
    """One positioned visual unit within a template"""
    id: str = Field(..., min_length=1, description="Unique within the template")
    type: ElementType
    content: str = Field(default="", description="Text, asset path, URL or placeholder token")
    position: Position
    style: ElementStyle = Field(default_factory=ElementStyle)

    @property
    def hidden(self) -> bool:
        return self.style.hidden


class Margin(TemplateModel):
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0


class Background(TemplateModel):
    color: Optional[str] = None
    image: Optional[str] = None


class PageSettings(TemplateModel):
    """Nominal page box of the template"""
    width: float = Field(default=800, gt=0)
    height: float = Field(default=600, gt=0)
    margin: Margin = Field(default_factory=Margin)
    background: Background = Field(default_factory=lambda: Background(color="#ffffff"))


class FontSettings(TemplateModel):
    family: str
    variants: List[str] = Field(default_factory=lambda: ["normal"])
    url: Optional[str] = None


# A4 at 72 dpi, the page size used for multi-page documents
A4_WIDTH = 595
A4_HEIGHT = 842


class MultiPageSettings(TemplateModel):
    """Expands one placeholder into cover pages plus one page per roster record"""
    placeholder: str = Field(default="meetOurGraduatesContent")
    data_key: str = Field(default="meetOurGraduatesData", description="Data map key holding the roster")
    page_width: float = Field(default=A4_WIDTH, gt=0)
    page_height: float = Field(default=A4_HEIGHT, gt=0)
    cover_pages: List[str] = Field(default_factory=list, description="Static HTML of leading pages")


class CertificateTemplate(TemplateModel):
    """Certificate or card template"""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = None
    organization_id: Optional[str] = None
    elements: List[TemplateElement] = Field(default_factory=list)
    page_settings: PageSettings = Field(default_factory=PageSettings)
    fonts: List[FontSettings] = Field(default_factory=list)
    multi_page: Optional[MultiPageSettings] = None

    def element(self, element_id: str) -> Optional[TemplateElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None


class TemplateResponse(BaseModel):
    """Template summary for API listings"""
    id: str
    name: str
    category: Optional[str] = None
    organization_id: Optional[str] = None
    width: float
    height: float
    element_count: int
    multi_page: bool = False

    @classmethod
    def from_template(cls, template: CertificateTemplate) -> "TemplateResponse":
        return cls(
            id=template.id,
            name=template.name,
            category=template.category,
            organization_id=template.organization_id,
            width=template.page_settings.width,
            height=template.page_settings.height,
            element_count=len(template.elements),
            multi_page=template.multi_page is not None,
        )
