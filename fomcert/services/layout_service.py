"""
Layout Service
Turns a resolved document into positioned boxes with resolved CSS
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fomcert.schemas.certificate import Watermark
from fomcert.schemas.template import ElementStyle, ElementType, TemplateElement
from fomcert.services.layout_fitter import fit_text
from fomcert.services.placeholder_service import ResolvedDocument

WATERMARK_ID = "__watermark__"
WATERMARK_Z_INDEX = 9999

STYLE_PROPERTIES = [
    ("font_family", "font-family"),
    ("font_weight", "font-weight"),
    ("font_style", "font-style"),
    ("color", "color"),
    ("background_color", "background-color"),
    ("text_align", "text-align"),
    ("letter_spacing", "letter-spacing"),
    ("border", "border"),
    ("border_width", "border-width"),
    ("border_style", "border-style"),
    ("border_color", "border-color"),
    ("border_radius", "border-radius"),
    ("padding", "padding"),
    ("object_fit", "object-fit"),
]


@dataclass
class RenderBox:
    """One absolutely positioned box of the rendered page"""
    element_id: str
    kind: str
    x: float
    y: float
    width: float
    height: float
    z_index: int
    order: int
    content: str = ""
    css: Dict[str, str] = field(default_factory=dict)

    @property
    def style(self) -> str:
        return "; ".join(f"{name}: {value}" for name, value in self.css.items())


@dataclass
class PageLayout:
    width: float
    height: float
    document_height: float
    multi_page: bool
    boxes: List[RenderBox]
    background_color: Optional[str] = None
    background_image: Optional[str] = None


def _px(value: float) -> str:
    return f"{value:g}px"


def _kebab(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "-", name).replace("_", "-").lower()


def build_css(element: TemplateElement, fit: bool = True) -> Dict[str, str]:
    """CSS for an element box, with the fitted font size for text"""
    position = element.position
    style: ElementStyle = element.style
    css = {
        "left": _px(position.x),
        "top": _px(position.y),
        "width": _px(position.width),
        "height": _px(position.height),
    }

    for attribute, name in STYLE_PROPERTIES:
        value = getattr(style, attribute)
        if value not in (None, ""):
            css[name] = str(value)

    if element.type == ElementType.TEXT and fit:
        fitted = fit_text(style.font_size, position.width, position.height, element.content, style.line_height)
        css["font-size"] = _px(fitted.font_size)
        css["line-height"] = fitted.line_height
        css["display"] = "flex"
        css["flex-direction"] = "column"
        css["align-items"] = "stretch"
        css["justify-content"] = fitted.align_items
    else:
        if style.font_size not in (None, ""):
            size = style.font_size
            css["font-size"] = _px(size) if isinstance(size, (int, float)) else str(size)
        if style.line_height not in (None, ""):
            css["line-height"] = str(style.line_height)

    transforms = []
    if style.transform:
        transforms.append(style.transform)
    if style.rotation:
        transforms.append(f"rotate({style.rotation:g}deg)")
    if transforms:
        css["transform"] = " ".join(transforms)
    if style.opacity is not None:
        css["opacity"] = f"{style.opacity:g}"
    if style.z_index is not None:
        css["z-index"] = str(style.z_index)

    for name, value in (style.model_extra or {}).items():
        if value not in (None, ""):
            css[_kebab(name)] = str(value)
    return css


def watermark_box(watermark: Watermark, order: int) -> RenderBox:
    position = watermark.position
    return RenderBox(
        element_id=WATERMARK_ID,
        kind="watermark",
        x=position.x,
        y=position.y,
        width=0,
        height=0,
        z_index=WATERMARK_Z_INDEX,
        order=order,
        content=watermark.text,
        css={
            "left": _px(position.x),
            "top": _px(position.y),
            "transform": f"rotate({position.rotation:.2f}deg)",
            "opacity": "0.08",
            "font-size": "48px",
            "font-weight": "bold",
            "color": "#000000",
            "white-space": "nowrap",
            "pointer-events": "none",
        },
    )


def build_layout(
    document: ResolvedDocument,
    background_color: Optional[str] = None,
    background_image: Optional[str] = None,
    watermark: Optional[Watermark] = None,
) -> PageLayout:
    """
    Lay out visible elements in paint order

    Boxes are ordered by z-index, ties broken by template order. Hidden
    elements produce no box.
    """
    boxes = []
    for order, element in enumerate(document.elements):
        if element.hidden:
            continue
        expanded = element.id in document.expanded_ids
        boxes.append(RenderBox(
            element_id=element.id,
            kind=element.type.value,
            x=element.position.x,
            y=element.position.y,
            width=element.position.width,
            height=element.position.height,
            z_index=element.style.z_index or 0,
            order=order,
            content=element.content,
            css=build_css(element, fit=not expanded),
        ))
    boxes.sort(key=lambda box: (box.z_index, box.order))

    if watermark:
        boxes.append(watermark_box(watermark, len(document.elements)))

    return PageLayout(
        width=document.page_width,
        height=document.page_height,
        document_height=document.document_height,
        multi_page=document.multi_page,
        boxes=boxes,
        background_color=background_color,
        background_image=background_image,
    )
