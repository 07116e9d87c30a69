import json
from datetime import datetime

import pydantic
import pytest

from fomcert.schemas.template import CertificateTemplate, ElementType, TemplateElement
from fomcert.services.placeholder_service import (
    DATA_ERROR_MESSAGE,
    NO_DATA_MESSAGE,
    TOKEN_PATTERN,
    PlaceholderEngine,
    customize_template,
    resolve_template,
)
from fomcert.services.template_library import get_template_library

from conftest import JICF_ORGANIZATION

NOW = datetime(2025, 6, 13, 10, 0)

GRADUATES = [
    {"Name": "Jane Doe", "Country": "USA", "University": "Shandong University", "Major": "Computer Science",
     "Number of Pictures": "2", "Message from the Graduates": "Thank you JICF!"},
    {"Name": "John Mensah", "Country": "Ghana", "University": "University of Jinan", "Major": "Civil Engineering"},
    {"Name": "Li Wei", "Country": "China", "University": "Shandong Normal", "Major": "Music"},
]


def text_element(content, element_id="el", type="text", **style):
    return TemplateElement.model_validate({
        "id": element_id,
        "type": type,
        "content": content,
        "position": {"x": 0, "y": 0, "width": 300, "height": 40},
        "style": style,
    })


def resolve(content, data, type="text"):
    return PlaceholderEngine(data, now=NOW).resolve_element(text_element(content, type=type))


@pytest.fixture
def library():
    return get_template_library()


def test_double_and_single_brace_tokens():
    element = resolve("To {{recipientName}} from {issuerName}", {"recipientName": "Jane", "issuerName": "Enoch"})

    assert element.content == "To Jane from Enoch"
    assert not element.hidden


def test_whitespace_inside_braces():
    assert resolve("{{ recipientName }}", {"recipientName": "Jane"}).content == "Jane"


def test_values_are_html_escaped():
    element = resolve("{{recipientName}}", {"recipientName": "<b>Jane & John</b>"})

    assert element.content == "&lt;b&gt;Jane &amp; John&lt;/b&gt;"


def test_substituted_values_are_not_rescanned():
    element = resolve("{{recipientName}}", {"recipientName": "{{customMessage}}", "customMessage": "oops"})

    assert element.content == "&#123;&#123;customMessage&#125;&#125;"
    assert "oops" not in element.content


def test_missing_known_field_hides_element():
    element = resolve("Message: {{customMessage}}", {"recipientName": "Jane"})

    assert element.hidden
    assert element.content == ""


def test_blank_value_hides_element():
    assert resolve("{{customMessage}}", {"customMessage": "   "}).hidden
    assert resolve("{{mcName}}", {"mcName": None}).hidden


def test_unknown_token_resolves_to_empty_text():
    element = resolve("Hello {{favoriteHymn}}!", {})

    assert element.content == "Hello !"
    assert not element.hidden


def test_unknown_field_present_in_data_is_substituted():
    assert resolve("{{favoriteHymn}}", {"favoriteHymn": "Amazing Grace"}).content == "Amazing Grace"


def test_builtin_defaults():
    assert resolve("{{eventName}}", {}).content == "SERVICE OUTLINE"
    assert resolve("{{eventDate}}", {}).content == "June 13, 2025"
    assert resolve("{{date}}", {}).content == "June 13, 2025"
    assert resolve("{{eventName}}", {"eventName": "  "}).content == "SERVICE OUTLINE"


def test_date_uses_creation_time_when_known():
    assert resolve("{{date}}", {"createdAt": datetime(2025, 1, 2)}).content == "January 2, 2025"


def test_builtin_value_from_data_wins():
    assert resolve("{{eventName}}", {"eventName": "EASTER SERVICE"}).content == "EASTER SERVICE"


def test_dates_are_formatted():
    assert resolve("{{issueDate}}", {"issueDate": datetime(2025, 6, 13, 8, 0)}).content == "June 13, 2025"
    assert resolve("{{issueDate}}", {"issueDate": "2025-12-01"}).content == "December 1, 2025"
    assert resolve("{{issueDate}}", {"issueDate": "next Sunday"}).content == "next Sunday"


def test_service_outline_items():
    element = resolve("{{serviceOutlineItems}}", {"serviceOutline": "Opening Prayer\n\n<Worship>\n"})

    assert element.content.count("<div") == 2
    assert "Opening Prayer" in element.content
    assert "&lt;Worship&gt;" in element.content


def test_service_outline_items_missing_hides():
    assert resolve("{{serviceOutlineItems}}", {}).hidden


def test_graduates_list_legacy_and_json_render_the_same():
    legacy = "\n".join(
        f"{i}. {g['Name']} • {g['Country']} • {g['University']} • {g['Major']}"
        for i, g in enumerate(GRADUATES, start=1)
    )
    as_json = json.dumps([
        {"name": g["Name"], "country": g["Country"], "university": g["University"], "major": g["Major"]}
        for g in GRADUATES
    ])

    from_legacy = resolve("{{graduatesList}}", {"graduatesList": legacy}).content
    from_json = resolve("{{graduatesList}}", {"graduatesList": as_json}).content

    assert from_legacy == from_json
    assert "1. Jane Doe" in from_json
    assert "3. Li Wei" in from_json


def test_graduates_list_empty_and_malformed():
    assert NO_DATA_MESSAGE in resolve("{{graduatesList}}", {"graduatesList": "[]"}).content
    malformed = resolve("{{graduatesList}}", {"graduatesList": "[{broken"})
    assert DATA_ERROR_MESSAGE in malformed.content
    assert not malformed.hidden


def test_list_values_never_leave_tokens_behind():
    outline = resolve("{{serviceOutlineItems}}", {"serviceOutline": "Prayer {{pastorName}}\nClosing {mcName}"})
    roster = resolve("{{graduatesList}}", {"graduatesList": json.dumps([
        {"name": "{{recipientName}}", "country": "{country}", "university": "SDU", "major": "{{major}}"},
    ])})

    for element in (outline, roster):
        assert TOKEN_PATTERN.search(element.content) is None
        assert "{" not in element.content and "}" not in element.content
    assert "Prayer &#123;&#123;pastorName&#125;&#125;" in outline.content
    assert "1. &#123;&#123;recipientName&#125;&#125;" in roster.content


def test_image_and_qr_elements():
    assert resolve("/Logo.png", {}, type="image").content == "/Logo.png"
    assert resolve("{{photo}}", {}, type="image").hidden
    assert resolve("", {"qrCode": "data:image/png;base64,AAAA"}, type="qr").content == "data:image/png;base64,AAAA"
    assert resolve("", {}, type="qr").hidden


def test_image_urls_are_not_html_escaped():
    element = resolve("{{photoUrl}}", {"photoUrl": "https://cdn.example.org/a.png?w=1&h=2"}, type="image")

    assert element.content == "https://cdn.example.org/a.png?w=1&h=2"


def test_explicitly_hidden_element_stays_hidden():
    element = PlaceholderEngine({"recipientName": "Jane"}).resolve_element(
        text_element("{{recipientName}}", display="none")
    )

    assert element.hidden


def test_certificate_resolution_leaves_no_tokens(library):
    data = {
        "recipientName": "Jane Doe",
        "issuerName": "Mr. Enoch Kwateh Dongbo",
        "issueDate": datetime(2025, 6, 13),
        "certificateId": "FOM-2025-APP-0001-K7",
        "qrCode": "data:image/png;base64,AAAA",
    }
    document = resolve_template(library["fom-appreciation"], data, now=NOW)

    for element in document.elements:
        assert TOKEN_PATTERN.search(element.content) is None
    assert document.page_width == 800
    assert document.document_height == 600
    assert not document.multi_page
    by_id = {e.id: e for e in document.elements}
    assert by_id["message"].hidden
    assert by_id["recipient"].content == "Jane Doe"
    assert by_id["date"].content == "Date: June 13, 2025"


def test_resolution_is_idempotent(library):
    data = {"recipientName": "Jane Doe", "mcName": "Brother Sam", "serviceOutline": "Prayer\nWorship"}
    template = library["jicf-service-outline"]

    assert resolve_template(template, data, now=NOW) == resolve_template(template, data, now=NOW)


def test_resolution_does_not_mutate_template(library):
    template = library["fom-appreciation"]
    before = template.model_dump()

    resolve_template(template, {"recipientName": "Jane"}, now=NOW)

    assert template.model_dump() == before


def test_multi_page_expansion(library):
    template = library["jicf-meet-our-graduates"]
    document = resolve_template(template, {"meetOurGraduatesData": json.dumps(GRADUATES)}, now=NOW)

    assert document.multi_page
    assert document.page_count == 5
    assert document.page_height == 842
    assert document.document_height == 5 * 842
    assert document.expanded_ids == ("pages",)

    pages = document.elements[0]
    assert pages.position.height == 5 * 842
    assert pages.content.count('class="page-break"') == 4
    assert pages.content.count('class="page"') == 5
    assert "Jane Doe" in pages.content
    assert "Thank you JICF!" in pages.content
    assert pages.content.count("Photo ") == 2


def test_multi_page_accepts_legacy_lines(library):
    template = library["jicf-meet-our-graduates"]
    document = resolve_template(template, {"meetOurGraduatesData": "1. Jane Doe • USA • SDU • CS"}, now=NOW)

    assert document.page_count == 3
    assert "Email:</strong> N/A" in document.elements[0].content


def test_multi_page_values_never_leave_tokens_behind(library):
    graduates = [{"Name": "{{recipientName}}", "Country": "Ghana", "Email": "{email}",
                  "Message from the Graduates": "See you {{eventDate}}!"}]
    document = resolve_template(library["jicf-meet-our-graduates"], {"meetOurGraduatesData": json.dumps(graduates)}, now=NOW)

    pages = document.elements[0].content
    assert TOKEN_PATTERN.search(pages) is None
    assert "See you &#123;&#123;eventDate&#125;&#125;!" in pages


@pytest.mark.parametrize("data,message", [
    ({}, NO_DATA_MESSAGE),
    ({"meetOurGraduatesData": "[]"}, NO_DATA_MESSAGE),
    ({"meetOurGraduatesData": "[{broken"}, DATA_ERROR_MESSAGE),
])
def test_multi_page_without_usable_data(library, data, message):
    document = resolve_template(library["jicf-meet-our-graduates"], data, now=NOW)

    assert not document.multi_page
    assert document.page_count == 1
    assert document.document_height == 842
    assert message in document.elements[0].content


def test_customize_template_for_another_organization(library):
    customized = customize_template(library["fom-appreciation"], JICF_ORGANIZATION)
    by_id = {e.id: e for e in customized.elements}

    assert by_id["organization"].content == "JINAN INTERNATIONAL CHRISTIAN FELLOWSHIP"
    assert by_id["tagline"].content == "Worshipping together in Jinan"
    assert by_id["logo"].content == "/JICF_LOGO1.png"
    assert by_id["verse-reference"].content == "2 Kings 6:16"
    assert customized.organization_id == "jicf"
    assert library["fom-appreciation"].element("organization").content == "FISHERS OF MEN"


def test_templates_are_frozen(library):
    with pytest.raises(pydantic.ValidationError):
        library["fom-appreciation"].elements[0].content = "changed"


def test_template_accepts_camel_and_snake_case():
    camel = CertificateTemplate.model_validate({
        "id": "t", "name": "T",
        "pageSettings": {"width": 500, "height": 300},
        "elements": [{"id": "a", "type": "text", "position": {"width": 10, "height": 10},
                      "style": {"fontSize": 14, "zIndex": 2}}],
    })
    snake = CertificateTemplate.model_validate({
        "id": "t", "name": "T",
        "page_settings": {"width": 500, "height": 300},
        "elements": [{"id": "a", "type": "text", "position": {"width": 10, "height": 10},
                      "style": {"font_size": 14, "z_index": 2}}],
    })

    assert camel == snake
    assert camel.page_settings.width == 500
    assert camel.elements[0].style.z_index == 2
    assert camel.elements[0].type == ElementType.TEXT
