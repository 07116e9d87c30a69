"""
Placeholder Service
Resolves {{field}} / {field} tokens in template elements against a data map
"""

import re
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from markupsafe import Markup

from fomcert.schemas.organization import (
    DEFAULT_LOGO,
    DEFAULT_ORGANIZATION_NAME,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_TAGLINE,
    DEFAULT_VERSE_MARKER,
    DEFAULT_VERSE_REFERENCE,
    Organization,
)
from fomcert.schemas.roster import RosterRecord
from fomcert.schemas.template import (
    CertificateTemplate,
    ElementType,
    MultiPageSettings,
    TemplateElement,
)
from fomcert.services.roster_parser import RosterFormatError, RosterParser
from fomcert.templating import escape_text, render_block

logger = logging.getLogger(__name__)


# Double brace first so "{{name}}" is never read as "{" + "{name}" + "}"
TOKEN_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}|\{([A-Za-z_][A-Za-z0-9_]*)\}")

DEFAULT_EVENT_NAME = "SERVICE OUTLINE"
NO_DATA_MESSAGE = "No data available"
DATA_ERROR_MESSAGE = "Error loading data"
PROFILE_HEADING = "Meet Our Graduate"
MAX_PROFILE_PHOTOS = 3

# Fields that hide their element when missing
KNOWN_FIELDS = {
    "recipientName",
    "customMessage",
    "mcName",
    "pastorName",
    "issuerName",
    "issueDate",
    "expiryDate",
    "certificateId",
    "verificationUrl",
    "qrCode",
    "templateName",
    "organizationName",
    "achievement",
    "course",
    "serviceOutline",
    "serviceOutlineItems",
    "graduatesList",
}

BUILTIN_FIELDS = {"date", "eventDate", "eventName"}


@dataclass(frozen=True)
class ResolvedDocument:
    """Template elements with every token resolved, plus the final page box"""
    elements: List[TemplateElement]
    page_width: float
    page_height: float
    document_height: float
    multi_page: bool = False
    expanded_ids: Tuple[str, ...] = ()

    @property
    def page_count(self) -> int:
        return max(1, round(self.document_height / self.page_height))


class _Hide(Exception):
    """Raised while resolving an element whose data is missing"""


def format_date(value: date) -> str:
    """Long US style, e.g. June 13, 2025"""
    return f"{value:%B} {value.day}, {value.year}"


def _is_date_field(name: str) -> bool:
    return name == "date" or name.endswith("Date")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _text_value(name: str, value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return format_date(value)
    if isinstance(value, str) and _is_date_field(name):
        try:
            return format_date(date.fromisoformat(value.strip()[:10]))
        except ValueError:
            return value.strip()
    return str(value).strip() if isinstance(value, str) else str(value)


def notice(message: str, error: bool = False) -> Markup:
    return render_block("blocks/notice.html", message=message, error=error)


def outline_items_html(outline: str) -> Markup:
    items = [line.strip() for line in outline.splitlines() if line.strip()]
    return render_block("blocks/outline_items.html", items=items)


def roster_html(raw: Any) -> Markup:
    try:
        records = RosterParser.parse(raw)
    except RosterFormatError as e:
        logger.warning("Could not parse roster data: %s", e)
        return notice(DATA_ERROR_MESSAGE, error=True)
    if not records:
        return notice(NO_DATA_MESSAGE)
    return render_block("blocks/roster_list.html", records=records)


def profile_page(record: RosterRecord, number: int) -> Markup:
    return render_block(
        "pages/profile.html",
        record=record,
        number=number,
        heading=PROFILE_HEADING,
        photo_count=min(record.picture_count, MAX_PROFILE_PHOTOS),
    )


def document_pages(settings: MultiPageSettings, records: List[RosterRecord]) -> Tuple[Markup, int]:
    """Cover pages plus one profile page per record, joined by page breaks"""
    pages = [Markup(cover) for cover in settings.cover_pages]
    pages.extend(profile_page(record, index) for index, record in enumerate(records, start=1))
    html = render_block(
        "blocks/pages.html",
        pages=pages,
        width=settings.page_width,
        height=settings.page_height,
    )
    return html, len(pages)


class PlaceholderEngine:
    """
    Single-pass placeholder resolution

    Each token is looked up once and its value is written to the output
    without being scanned again.
    """

    def __init__(self, data: Dict[str, Any], now: Optional[datetime] = None):
        self.data = data
        self.now = now or datetime.now()

    def _builtin(self, name: str) -> str:
        if name == "date":
            created = self.data.get("createdAt") or self.now
            return format_date(created if isinstance(created, (date, datetime)) else self.now)
        if name == "eventDate":
            return format_date(self.now)
        return DEFAULT_EVENT_NAME

    def resolve_token(self, name: str, as_text: bool = True) -> str:
        """
        Resolve one token to its output text

        Raises:
            _Hide: If the token's field is known but has no usable value
        """
        if name in BUILTIN_FIELDS and _is_blank(self.data.get(name)):
            return self._builtin(name)
        if name in self.data:
            value = self.data[name]
            if _is_blank(value):
                raise _Hide(name)
        elif name == "serviceOutlineItems" and not _is_blank(self.data.get("serviceOutline")):
            value = self.data["serviceOutline"]
        elif name in KNOWN_FIELDS:
            raise _Hide(name)
        else:
            return ""

        if name == "serviceOutlineItems":
            return str(outline_items_html(str(value)))
        if name == "graduatesList":
            return str(roster_html(value))
        text = _text_value(name, value)
        return str(escape_text(text)) if as_text else text

    def substitute(self, content: str, as_text: bool = True) -> str:
        parts = []
        position = 0
        for match in TOKEN_PATTERN.finditer(content):
            parts.append(content[position:match.start()])
            parts.append(self.resolve_token(match.group(1) or match.group(2), as_text))
            position = match.end()
        parts.append(content[position:])
        return "".join(parts)

    def resolve_element(self, element: TemplateElement) -> TemplateElement:
        if element.hidden:
            return hide_element(element)

        has_tokens = TOKEN_PATTERN.search(element.content) is not None
        try:
            if element.type == ElementType.QR and not has_tokens:
                content = str(self.data.get("qrCode") or element.content)
            else:
                content = self.substitute(element.content, as_text=element.type in (ElementType.TEXT, ElementType.SHAPE))
        except _Hide as hidden:
            logger.debug("Hiding element %s, no value for %s", element.id, hidden)
            return hide_element(element)

        if element.type in (ElementType.IMAGE, ElementType.QR) and not content.strip():
            return hide_element(element)
        return element.model_copy(update={"content": content})

    def expand_pages(self, element: TemplateElement, settings: MultiPageSettings) -> Tuple[TemplateElement, int]:
        raw = self.data.get(settings.data_key)
        if _is_blank(raw):
            html, pages = notice(NO_DATA_MESSAGE), 0
        else:
            try:
                records = RosterParser.parse(raw)
            except RosterFormatError as e:
                logger.warning("Could not parse multi-page data for %s: %s", element.id, e)
                records = None
            if records is None:
                html, pages = notice(DATA_ERROR_MESSAGE, error=True), 0
            elif not records:
                html, pages = notice(NO_DATA_MESSAGE), 0
            else:
                html, pages = document_pages(settings, records)

        before, after = _split_at_token(element.content, settings.placeholder)
        content = self.substitute(before) + str(html) + self.substitute(after)
        if not pages:
            return element.model_copy(update={"content": content}), 0

        position = element.position.model_copy(update={"height": pages * settings.page_height})
        return element.model_copy(update={"content": content, "position": position}), pages

    def resolve(self, template: CertificateTemplate) -> ResolvedDocument:
        page_width = template.page_settings.width
        page_height = template.page_settings.height
        settings = template.multi_page
        page_count = 0
        elements = []
        expanded = []

        for element in template.elements:
            if settings and not element.hidden and _contains_token(element.content, settings.placeholder):
                try:
                    resolved, pages = self.expand_pages(element, settings)
                except _Hide:
                    resolved, pages = hide_element(element), 0
                page_count = max(page_count, pages)
                if pages:
                    expanded.append(element.id)
                elements.append(resolved)
            else:
                elements.append(self.resolve_element(element))

        if settings and page_count:
            return ResolvedDocument(
                elements=elements,
                page_width=settings.page_width,
                page_height=settings.page_height,
                document_height=page_count * settings.page_height,
                multi_page=True,
                expanded_ids=tuple(expanded),
            )
        return ResolvedDocument(
            elements=elements,
            page_width=page_width,
            page_height=page_height,
            document_height=page_height,
        )


def _contains_token(content: str, name: str) -> bool:
    return any((match.group(1) or match.group(2)) == name for match in TOKEN_PATTERN.finditer(content))


def _split_at_token(content: str, name: str) -> Tuple[str, str]:
    for match in TOKEN_PATTERN.finditer(content):
        if (match.group(1) or match.group(2)) == name:
            return content[:match.start()], content[match.end():]
    return content, ""


def hide_element(element: TemplateElement) -> TemplateElement:
    style = element.style.model_copy(update={"display": "none"})
    return element.model_copy(update={"content": "", "style": style})


def resolve_template(
    template: CertificateTemplate,
    data: Dict[str, Any],
    now: Optional[datetime] = None,
) -> ResolvedDocument:
    return PlaceholderEngine(data, now=now).resolve(template)


def customize_template(template: CertificateTemplate, organization: Organization) -> CertificateTemplate:
    """Swap the stock branding in a template for an organization's own"""
    verse = organization.covenant_verse
    elements = []
    for element in template.elements:
        content = element.content
        style = element.style
        if DEFAULT_ORGANIZATION_NAME in content and organization.name != DEFAULT_ORGANIZATION_NAME:
            content = content.replace(DEFAULT_ORGANIZATION_NAME, organization.name)
        elif DEFAULT_TAGLINE in content and organization.tagline:
            content = content.replace(DEFAULT_TAGLINE, organization.tagline)
        elif element.type == ElementType.IMAGE and content == DEFAULT_LOGO and organization.logo:
            content = organization.logo
        elif DEFAULT_VERSE_MARKER in content and verse:
            content = f'"{verse.text}"'
        elif DEFAULT_VERSE_REFERENCE in content and verse:
            content = verse.reference
        if style.color == DEFAULT_PRIMARY_COLOR:
            style = style.model_copy(update={"color": organization.colors.primary})
        elements.append(element.model_copy(update={"content": content, "style": style}))
    return template.model_copy(update={"elements": elements, "organization_id": organization.id})
